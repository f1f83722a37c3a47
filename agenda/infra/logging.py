from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from agenda.config import PROJECT_ROOT, SETTINGS

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None, console: bool = True) -> None:
    """Log to ``<LOG_DIR>/agenda.log`` (rotated) and optionally to stderr."""
    log_dir = PROJECT_ROOT / SETTINGS.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(log_dir / "agenda.log", maxBytes=2_000_000, backupCount=3)
    file_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [file_handler]

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    logging.basicConfig(
        level=(level or SETTINGS.log_level).upper(),
        handlers=handlers,
        force=True,
    )
    # SQL echo only when asked for explicitly
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
