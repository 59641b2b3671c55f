"""Core types: results, configuration, exit codes."""

from .config import Config, ConfigError, HooksConfig, load_config, load_project_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    "Config",
    "ConfigError",
    "ErrorCode",
    "Err",
    "HooksConfig",
    "Ok",
    "Result",
    "load_config",
    "load_project_config",
]
