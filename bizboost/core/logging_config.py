from __future__ import annotations

import logging
import logging.handlers
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILE_NAME = "bizboost.log"

# Third-party loggers that are too chatty at INFO for a desktop log file.
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "httpx")


def _level(name: str) -> int:
    value = logging.getLevelName(name.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return value


def parse_module_levels(spec: str | None) -> dict[str, int]:
    """Parse ``"bizboost.services.captcha=DEBUG,sqlalchemy.engine=INFO"`` into logger levels.

    Blank entries are skipped. A malformed entry or unknown level raises ``ValueError``
    so a typo in LOG_LEVELS fails at startup instead of being ignored.
    """
    levels: dict[str, int] = {}
    for item in (spec or "").split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, level = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected logger=LEVEL, got {item!r}")
        levels[name.strip()] = _level(level)
    return levels


def configure_logging(
    *,
    log_dir: str,
    level: str = "INFO",
    module_levels: dict[str, int] | None = None,
) -> None:
    """Set up root logging for the service (handlers are attached once per process).

    An empty ``log_dir`` logs to the console only. ``module_levels`` is applied
    after the quiet defaults, so it can turn SQL echo back on for debugging.
    """
    root = logging.getLogger()
    root.setLevel(_level(level) if level else logging.INFO)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name, value in (module_levels or {}).items():
        logging.getLogger(name).setLevel(value)

    if root.handlers:
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)
    # The desktop shell keeps the data dir small: 5 MB x 3 rotated files.
    file_handler = logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
