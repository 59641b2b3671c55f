"""Release notes via git-cliff context injection.

Two git-cliff passes around one injection step:

1. ``git-cliff --unreleased --context`` prints a JSON array of releases
2. the pipeline's stats, deps and metadata go into ``release[0].extra``
3. ``git-cliff --from-context - --body <template>`` renders markdown

git-cliff owns commit parsing, grouping and the template language; this
module only supplies the sidecar data.
"""

from __future__ import annotations

import json
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from scrat.core.result import Err, Ok, Result
from scrat.core.structured import StrDict, as_obj_list, as_str_dict
from scrat.platform.process import run as run_process
from scrat.ship.pipeline import PipelineContext

__all__ = [
    "BUILTIN_TEMPLATE",
    "CliffNotesRenderer",
    "NotesError",
    "build_extra",
    "inject_extra",
]

logger = logging.getLogger(__name__)

CLIFF_TIMEOUT_SECONDS = 2 * 60.0

BUILTIN_TEMPLATE = """\
{% for group, commits in commits | group_by(attribute="group") %}
### {{ group | striptags | trim | upper_first }}
{% for commit in commits %}
- {% if commit.scope %}**{{ commit.scope }}:** {% endif %}\
{{ commit.message | upper_first }} \
({{ commit.id | truncate(length=7, end="") }})
{%- endfor %}
{% endfor %}
{%- if extra.deps %}
### Dependencies
{% for dep in extra.deps %}
- **{{ dep.name }}**: \
{% if dep.from %}{{ dep.from }}{% else %}new{% endif %} → \
{% if dep.to %}{{ dep.to }}{% else %}removed{% endif %}
{%- endfor %}
{% endif %}
{%- if extra.stats %}
### Stats

{{ extra.stats.commit_count }} commits, {{ extra.stats.files_changed }} files changed \
(+{{ extra.stats.insertions }} / -{{ extra.stats.deletions }})
{%- if extra.stats.contributors %}

Contributors: {% for c in extra.stats.contributors %}{{ c.name }}\
{% if not loop.last %}, {% endif %}{% endfor %}
{%- endif %}
{% endif %}
"""


@dataclass(frozen=True, slots=True)
class NotesError:
    kind: Literal["context", "render", "template"]
    message: str

    def __str__(self) -> str:
        match self.kind:
            case "context":
                return f"git-cliff context extraction failed: {self.message}"
            case "render":
                return f"git-cliff rendering failed: {self.message}"
            case _:
                return self.message


def build_extra(context: PipelineContext) -> StrDict:
    """Sidecar data exposed to templates as ``extra``; empty parts are omitted."""
    extra: StrDict = {}
    if context.stats is not None:
        extra["stats"] = context.stats.to_dict()
    if context.dependencies:
        extra["deps"] = [d.to_dict() for d in context.dependencies]
    if context.metadata:
        extra["metadata"] = dict(context.metadata)
    return extra


def inject_extra(context_json: str, context: PipelineContext) -> Result[str, NotesError]:
    """Put ``build_extra(context)`` into the first (unreleased) release object."""
    try:
        obj: object = json.loads(context_json)
    except json.JSONDecodeError as e:
        return Err(NotesError("context", f"failed to parse context JSON: {e}"))

    releases = as_obj_list(obj)
    if releases is None:
        return Err(NotesError("context", "context is not a JSON array"))
    if not releases:
        return Err(NotesError("context", "context array is empty (no unreleased changes?)"))

    first = as_str_dict(releases[0])
    if first is None:
        return Err(NotesError("context", "first release is not a JSON object"))

    enriched = [{**first, "extra": build_extra(context)}, *releases[1:]]
    return Ok(json.dumps(enriched, ensure_ascii=False))


def _read_template(path: str | None, project_root: Path) -> Result[str, NotesError]:
    if path is None:
        return Ok(BUILTIN_TEMPLATE)

    template_path = Path(path)
    if not template_path.is_absolute():
        template_path = project_root / template_path
    try:
        return Ok(template_path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(NotesError("template", f"failed to read template at {template_path}: {e}"))


class CliffNotesRenderer:
    """``NotesRenderer`` backed by git-cliff."""

    def __init__(self, project_root: Path, *, template: str | None = None) -> None:
        self.project_root = project_root
        self.template = template

    def render(self, context: PipelineContext) -> Result[str, str]:
        result = self.render_notes(context)
        if isinstance(result, Err):
            return Err(str(result.error))
        return result

    def render_notes(self, context: PipelineContext) -> Result[str, NotesError]:
        template = _read_template(self.template, self.project_root)
        if isinstance(template, Err):
            return template

        logger.debug("extracting git-cliff context (pass 1)")
        raw = run_process(
            ["git-cliff", "--unreleased", "--context"],
            cwd=self.project_root,
            timeout=CLIFF_TIMEOUT_SECONDS,
        )
        if isinstance(raw, Err):
            return Err(NotesError("context", raw.error.stderr.strip() or str(raw.error)))
        if not raw.value.strip():
            return Err(NotesError("context", "git-cliff produced empty context output"))

        enriched = inject_extra(raw.value, context)
        if isinstance(enriched, Err):
            return enriched

        logger.debug("rendering release notes (pass 2)")
        with tempfile.TemporaryDirectory(prefix="scrat-notes-") as tmp:
            body = Path(tmp) / "release-notes.tera"
            body.write_text(template.value, encoding="utf-8")
            rendered = run_process(
                ["git-cliff", "--from-context", "-", "--body", str(body)],
                cwd=self.project_root,
                timeout=CLIFF_TIMEOUT_SECONDS,
                input_text=enriched.value,
            )

        if isinstance(rendered, Err):
            return Err(NotesError("render", rendered.error.stderr.strip() or str(rendered.error)))
        if not rendered.value.strip():
            logger.warning("git-cliff rendered empty release notes")
        return Ok(rendered.value)
