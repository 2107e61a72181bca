# src/pagecraft/core/utils/configure_logging.py
import logging
import sys
from typing import Dict, Optional, Union

from tqdm import tqdm

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"

Level = Union[str, int]


class LogWithTqdm(logging.Handler):
    """
    Routes log records through `tqdm.write()` so batch conversion progress
    bars are not torn apart by log lines.
    """

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


def to_level(level: Optional[Level], fallback: int) -> int:
    """Accepts 'info', 'INFO', 20 or None."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if isinstance(resolved, int):
            return resolved
    return fallback


def _set_levels(levels: Optional[Dict[str, Level]], fallback: int) -> None:
    for name, level in (levels or {}).items():
        logging.getLogger(name).setLevel(to_level(level, fallback))


def configure_logger(
        general_level: Level = 'WARNING',
        module_specific_levels: Optional[Dict[str, Level]] = None,
        silenced_loggers: Optional[Dict[str, Level]] = None,
) -> logging.Handler:
    """
    Installs a single tqdm-aware handler on the root logger.

    `module_specific_levels` lets e.g. the guard log demotions at INFO while
    the rest stays quiet; `silenced_loggers` raises noisy third-party loggers
    (werkzeug) to the given level, CRITICAL when the level is unreadable.
    Returns the installed handler.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if isinstance(h, LogWithTqdm)]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(to_level(general_level, logging.WARNING))

    _set_levels(module_specific_levels, logging.INFO)
    _set_levels(silenced_loggers, logging.CRITICAL)
    return handler
