"""Logger-Konfiguration für CLI und CSV-Proxy.

`get_logger` richtet beim ersten Aufruf den Root-Logger ein: eine Tagesdatei
``prepcards_YYYYMMDD.log`` und die Ausgabe auf der Konsole. Verzeichnis und
Level lassen sich über ``PREPCARDS_LOG_DIR`` bzw. ``PREPCARDS_LOG_LEVEL``
überschreiben (Standard: ``.logs`` und ``INFO``).
"""

import datetime
import logging
import os
import pathlib
from typing import Optional

LOG_DIR_ENV = "PREPCARDS_LOG_DIR"
LOG_LEVEL_ENV = "PREPCARDS_LOG_LEVEL"
DEFAULT_LOG_DIR = ".logs"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def log_file_path(log_dir: Optional[str] = None, day: Optional[datetime.date] = None) -> pathlib.Path:
    directory = pathlib.Path(log_dir or os.getenv(LOG_DIR_ENV) or DEFAULT_LOG_DIR)
    day = day or datetime.date.today()
    return directory / f"prepcards_{day.strftime('%Y%m%d')}.log"


def resolve_level(level: Optional[str] = None) -> int:
    """Unbekannte Level-Namen fallen auf INFO zurück."""
    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    log_dir: Optional[str] = None,
    level: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> pathlib.Path:
    """Attach the file and stream handlers to ``logger`` (root by default)."""

    logfile = log_file_path(log_dir)
    logfile.parent.mkdir(parents=True, exist_ok=True)
    target = logger or logging.getLogger()
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in (logging.FileHandler(logfile, encoding="utf-8"), logging.StreamHandler()):
        handler.setFormatter(formatter)
        target.addHandler(handler)
    target.setLevel(resolve_level(level))
    return logfile


def get_logger(name: str = "prepcards") -> logging.Logger:
    """Return a module-specific logger configured once for the application."""

    # Root-Logger nur einmal konfigurieren, sonst doppelte Handler
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)
