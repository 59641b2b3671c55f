"""Typed configuration loading and access.

Configuration lives in ``.scrat.toml`` (or ``scrat.toml``) at the project
root. Every section is optional; auto-detection and defaults fill the gaps
and config values act as overrides.

Example:
    [commands]
    test = "pytest -q"
    publish = "uv publish"

    [version]
    strategy = "conventional"

    [release]
    assets = ["dist/app.tar.gz"]
    draft = false

    [hooks]
    post_bump = ["sync: make docs", "filter: ./scripts/add-metadata.py"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_number, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILE_NAMES",
    "HOOK_NAMES",
    "VERSION_STRATEGIES",
    "CommandsConfig",
    "Config",
    "ConfigError",
    "HooksConfig",
    "ProjectConfig",
    "ReleaseConfig",
    "ShipConfig",
    "VersionConfig",
    "find_project_config",
    "load_config",
    "load_config_or_default",
    "load_project_config",
]

CONFIG_FILE_NAMES = (".scrat.toml", "scrat.toml")

HOOK_NAMES = (
    "pre_ship",
    "post_ship",
    "pre_test",
    "post_test",
    "pre_bump",
    "post_bump",
    "pre_publish",
    "post_publish",
    "pre_tag",
    "post_tag",
    "pre_release",
    "post_release",
)

_LOG_LEVELS = ("debug", "info", "warn", "error")

VERSION_STRATEGIES = ("bump", "conventional")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Overrides for values normally auto-detected from the project."""

    ecosystem: str | None = None
    release_branch: str | None = None


@dataclass(frozen=True, slots=True)
class CommandsConfig:
    """Shell commands for the phase bodies.

    ``bump`` and ``changelog`` support the same ``{var}`` interpolation as
    hooks. ``timeout`` applies to test, publish, bump and changelog commands.
    """

    test: str | None = None
    publish: str | None = None
    bump: str | None = None
    changelog: str | None = None
    timeout: float | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Hosted release settings."""

    github_release: bool = True
    assets: tuple[str, ...] = ()
    render_notes: bool = True
    notes_template: str | None = None
    draft: bool = True
    # Supports {var} interpolation; defaults to the tag.
    title: str | None = None
    # Only applied when creating a release, not when editing one.
    discussion_category: str | None = None


@dataclass(frozen=True, slots=True)
class HooksConfig:
    """Hook command lists per phase boundary.

    Commands run in parallel by default. ``sync:`` makes a command a barrier;
    ``filter:`` makes it a barrier that rewrites the pipeline context through
    stdin/stdout JSON.
    """

    pre_ship: tuple[str, ...] = ()
    post_ship: tuple[str, ...] = ()
    pre_test: tuple[str, ...] = ()
    post_test: tuple[str, ...] = ()
    pre_bump: tuple[str, ...] = ()
    post_bump: tuple[str, ...] = ()
    pre_publish: tuple[str, ...] = ()
    post_publish: tuple[str, ...] = ()
    pre_tag: tuple[str, ...] = ()
    post_tag: tuple[str, ...] = ()
    pre_release: tuple[str, ...] = ()
    post_release: tuple[str, ...] = ()
    timeout: float | None = None

    def commands_for(self, name: str) -> tuple[str, ...]:
        """Return the command list configured for a hook name."""
        if name not in HOOK_NAMES:
            raise KeyError(f"unknown hook: {name}")
        commands: tuple[str, ...] = getattr(self, name)
        return commands

    @property
    def total(self) -> int:
        return sum(len(self.commands_for(name)) for name in HOOK_NAMES)


@dataclass(frozen=True, slots=True)
class VersionConfig:
    """How the next version is chosen when --version and --bump are not given.

    ``bump`` increments the latest tag (patch); ``conventional`` asks
    git-cliff for the version implied by commits since that tag.
    """

    strategy: str = "bump"


@dataclass(frozen=True, slots=True)
class ShipConfig:
    """Ship command behavior."""

    # Ask before executing; --yes overrides.
    confirm: bool = True


def _hook_list(table: Mapping[str, object], key: str) -> tuple[str, ...]:
    if key not in table:
        return ()
    commands = get_str_list(table, key)
    if commands is None:
        raise ValueError(f"hooks.{key} must be a list of strings")
    return tuple(c for c in commands if c.strip())


def _timeout(table: Mapping[str, object], section: str) -> float | None:
    if "timeout" not in table:
        return None
    value = get_number(table, "timeout")
    if value is None or value <= 0:
        raise ValueError(f"{section}.timeout must be a positive number of seconds")
    return value


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    log_level: str = "info"
    project: ProjectConfig = field(default_factory=ProjectConfig)
    commands: CommandsConfig = field(default_factory=CommandsConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    ship: ShipConfig = field(default_factory=ShipConfig)
    version: VersionConfig = field(default_factory=VersionConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a known key has the wrong shape.
        """
        project: StrDict = get_table(data, "project") or {}
        commands: StrDict = get_table(data, "commands") or {}
        release: StrDict = get_table(data, "release") or {}
        hooks: StrDict = get_table(data, "hooks") or {}
        ship: StrDict = get_table(data, "ship") or {}
        version: StrDict = get_table(data, "version") or {}

        log_level = (get_str(data, "log_level") or "info").lower()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(_LOG_LEVELS)}")

        strategy = (get_str(version, "strategy") or "bump").lower()
        if strategy == "conventional-commits":
            strategy = "conventional"
        if strategy not in VERSION_STRATEGIES:
            raise ValueError(f"version.strategy must be one of: {', '.join(VERSION_STRATEGIES)}")

        assets = get_str_list(release, "assets")
        if "assets" in release and assets is None:
            raise ValueError("release.assets must be a list of strings")

        github_release = get_bool(release, "github_release")
        render_notes = get_bool(release, "render_notes")
        draft = get_bool(release, "draft")
        confirm = get_bool(ship, "confirm")

        return cls(
            log_level=log_level,
            project=ProjectConfig(
                ecosystem=get_str(project, "ecosystem") or get_str(project, "type"),
                release_branch=get_str(project, "release_branch"),
            ),
            commands=CommandsConfig(
                test=get_str(commands, "test"),
                publish=get_str(commands, "publish"),
                bump=get_str(commands, "bump"),
                changelog=get_str(commands, "changelog"),
                timeout=_timeout(commands, "commands"),
            ),
            release=ReleaseConfig(
                github_release=True if github_release is None else github_release,
                assets=tuple(assets or ()),
                render_notes=True if render_notes is None else render_notes,
                notes_template=get_str(release, "notes_template"),
                draft=True if draft is None else draft,
                title=get_str(release, "title"),
                discussion_category=get_str(release, "discussion_category"),
            ),
            hooks=HooksConfig(
                **{name: _hook_list(hooks, name) for name in HOOK_NAMES},
                timeout=_timeout(hooks, "hooks"),
            ),
            ship=ShipConfig(confirm=True if confirm is None else confirm),
            version=VersionConfig(strategy=strategy),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def find_project_config(start: Path, *, boundary_marker: str | None = ".git") -> Path | None:
    """Walk up from ``start`` looking for a config file.

    The directory containing ``boundary_marker`` (the repository root) is the
    last one searched.
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        if boundary_marker is not None and (directory / boundary_marker).exists():
            break
    return None


def load_project_config(project_root: Path) -> Result[Config, ConfigError]:
    """Discover and load the project config, or defaults if there is none."""
    path = find_project_config(project_root)
    if path is None:
        return Ok(Config())
    return load_config(path)


def load_config_or_default(path: Path) -> Config:
    """Load config from file, or return the default config on any error."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return Config()
