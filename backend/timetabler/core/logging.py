from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from timetabler.core.config import BACKEND_DIR

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
LOG_FILE_NAME = "timetabler.log"

# Third-party loggers and the level they are capped at.
QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "google_genai": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
}


def resolve_level(environment: str | None, override: str | None = None) -> int:
    """DEBUG outside production, INFO in production, unless overridden by name."""
    if override:
        level = logging.getLevelName(override.strip().upper())
        if isinstance(level, int):
            return level
        raise ValueError(f"Unknown log level: {override}")
    env = (environment or "development").lower().strip()
    return logging.INFO if env == "production" else logging.DEBUG


def _rotating_file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )


def setup_logging(*, environment: str, level: str | None = None, log_dir: Path | None = None) -> None:
    """Install console logging, plus a rotating file in production or when
    ``log_dir`` is given. A no-op once the root logger has handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    resolved = resolve_level(environment, level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir is not None or (environment or "").lower().strip() == "production":
        handlers.append(_rotating_file_handler(log_dir or BACKEND_DIR / "logs"))
    for handler in handlers:
        handler.setLevel(resolved)
        handler.setFormatter(formatter)

    logging.basicConfig(level=resolved, handlers=handlers)

    for name, ceiling in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(resolved, ceiling))
    logging.getLogger("uvicorn.access").setLevel(resolved)
