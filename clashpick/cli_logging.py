"""
Logging policy.

Log records go to stderr (and optionally a file) so they never interleave
with prompts on stdout. The clashpick version is stamped next to the
timestamp so bug reports carry it.
"""

from __future__ import annotations

import logging

from clashpick import __version__
from clashpick.common.config import LoggingConfig
from clashpick.common.errors import ConfigError

__all__ = ["logging_setup", "logHandlers_build"]


def logHandlers_build(log_file: str | None) -> list[logging.Handler]:
    """
    Build the stderr handler plus an optional file handler.

    Args:
        log_file:
            Path from logging.file, or None.

    Returns:
        Handlers to install on the root logger.

    Raises:
        ConfigError:
            Raised when the log file cannot be opened.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if not log_file:
        return handlers
    try:
        handlers.append(logging.FileHandler(log_file))
    except OSError as exc:
        raise ConfigError(f"Cannot open log file {log_file}: {exc.strerror or exc}") from exc
    return handlers


def logging_setup(logging_config: LoggingConfig, level_override: str | None = None) -> None:
    """
    Configure root logging from the config file's logging section.

    Args:
        logging_config:
            Parsed logging section.
        level_override:
            Level chosen by a --debug/--info/... flag; beats the file level.

    Raises:
        ConfigError:
            Raised when the log file cannot be opened.
    """
    level: str = (level_override or logging_config.level).upper()
    stamped_format: str = logging_config.format.replace(
        "%(asctime)s", f"%(asctime)s [v{__version__}]"
    )
    logging.basicConfig(
        level=getattr(logging, level),
        format=stamped_format,
        handlers=logHandlers_build(logging_config.file),
    )
