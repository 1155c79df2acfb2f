"""
Logging setup for the API process.

Records go to the console and, when ``LOG_FILE`` is set, to a file as
well.  A relative log file path is resolved against the project root,
the same way as the database and the board config directory.
"""

import logging
from typing import List, Optional

from homeboard_api.app.core.config import resolve_path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attribute set on handlers installed by ``setup_logging``.
_HANDLER_FLAG = "_homeboard_handler"


def build_handlers(logfile: Optional[str] = None) -> List[logging.Handler]:
    """Return a console handler plus a file handler when ``logfile`` is set.

    Missing parent directories of the log file are created.
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        log_path = resolve_path(logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_FLAG, True)
    return handlers


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger.

    Handlers are attached on the first call only; later calls (for
    example ``create_app`` in tests) just update the level.  Unknown
    level names fall back to ``INFO``.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(getattr(handler, _HANDLER_FLAG, False) for handler in root.handlers):
        return
    for handler in build_handlers(logfile):
        root.addHandler(handler)
