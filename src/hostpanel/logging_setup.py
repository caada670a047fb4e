"""Local file logging setup.

The terminal belongs to the dashboard while it runs, so records only ever go
to a rotating file.
"""

import logging
import logging.handlers
from pathlib import Path

from hostpanel.config import DEFAULT_LOG_DIR

LOGGER_NAME = "hostpanel"
LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def configure_logging(
    log_file: Path | None = None,
    level: int = logging.INFO,
    keep_files: int = 3,
) -> logging.Logger:
    """
    Attach a rotating file handler to the ``hostpanel`` logger.

    Calling this more than once leaves the first configuration in place.

    Args:
        log_file: Where to write. Defaults to ``~/.config/hostpanel/logs/hostpanel.log``.
        level: Logger level.
        keep_files: Number of rotated files to keep.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    path = log_file if log_file is not None else DEFAULT_LOG_DIR / "hostpanel.log"
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=str(path),
        maxBytes=1024 * 1024,
        backupCount=max(1, keep_files),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    logger.info("logging configured at %s", path)
    return logger
