"""Hilfsfunktionen zum Laden der zentralen Konfigurationsdatei.

Das Modul kapselt den Zugriff auf ``config.toml`` und stellt Standardwerte für
Deck-Quellen, Cache und Gewichtungen bereit. `load_config` wird u.a. von
`prepcards.loader`, `prepcards.practice` und der CLI verwendet, um
Einstellungen wie CSV-URLs, Timeouts oder Gewichte zu beziehen.
"""
import os
from pathlib import Path
from typing import Any, Dict

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback für Python <3.11
    import tomli as tomllib  # type: ignore

from .card_models import DECKS, STATUSES, DeckWeights

# Deck-Namen – Deck A (Coding-Aufgaben) und Deck B (System Design)
LEETCODE = "leetcode"
SYSTEM_DESIGN = "system_design"

CACHE_PREFIX = "deck-cache:v2"
DEFAULT_TTL_HOURS = 6.0
DEFAULT_CACHE_DIR = ".cache"
DEFAULT_FETCH_TIMEOUT = 30
DEFAULT_PROXY_BASE = "http://127.0.0.1:8765"

# Umgebungsvariablen haben Vorrang vor ``[decks]`` in config.toml
DECK_URL_ENV = {
    LEETCODE: "PREPCARDS_LC_CSV_URL",
    SYSTEM_DESIGN: "PREPCARDS_SD_CSV_URL",
}

DEFAULT_WEIGHTS: Dict[str, Dict[str, float]] = {
    LEETCODE: {"red": 0.6, "yellow": 0.3, "green": 0.1},
    SYSTEM_DESIGN: {"red": 0.5, "yellow": 0.35, "green": 0.15},
}

REQUIRED_SECTIONS = ("decks",)


_CFG_CACHE: Dict[str, Any] | None = None

from .logging_utils import get_logger

logger = get_logger(__name__)


def load_config(path: str | None = None) -> Dict[str, Any]:
    """Load configuration from ``config.toml``.

    The result is cached so repeated calls are cheap. If ``path`` is not
    provided, the function looks for ``config.toml`` in the project root
    (one directory above this package). Missing files result in an empty
    dictionary instead of an exception, allowing callers to provide
    sensible defaults.
    """

    global _CFG_CACHE
    if _CFG_CACHE is not None:
        return _CFG_CACHE

    cfg_path = Path(path) if path else Path(__file__).resolve().parent.parent / "config.toml"
    try:
        with cfg_path.open("rb") as f:
            _CFG_CACHE = tomllib.load(f)
    except FileNotFoundError:
        _CFG_CACHE = {}
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Invalid config file %s: %s", cfg_path, exc)
        _CFG_CACHE = {}
    return _CFG_CACHE


def reset_config_cache() -> None:
    """Vergisst die zwischengespeicherte Konfiguration (z. B. für Tests)."""

    global _CFG_CACHE
    _CFG_CACHE = None


def validate_config(cfg: Dict[str, Any]) -> None:
    """Prüft ``cfg`` auf Pflichtabschnitte und gültige Gewichte.

    Raises:
        ValueError: mit einer Meldung, die den fehlenden Abschnitt bzw. den
            ungültigen Schlüssel benennt.
    """

    for section in REQUIRED_SECTIONS:
        if section not in cfg:
            raise ValueError(f"[{section}] fehlt in config.toml")

    decks = cfg["decks"]
    for deck in DECKS:
        value = decks.get(f"{deck}_csv_url")
        if value is not None and not isinstance(value, str):
            raise ValueError(f"decks.{deck}_csv_url muss ein String sein")

    for deck, table in cfg.get("weights", {}).items():
        if deck not in DECKS:
            raise ValueError(f"weights.{deck}: unbekanntes Deck")
        for status, value in table.items():
            if status not in STATUSES:
                raise ValueError(f"weights.{deck}.{status}: unbekannter Status")
            if not isinstance(value, (int, float)) or value < 0:
                raise ValueError(f"weights.{deck}.{status} muss >= 0 sein")

    ttl = cfg.get("cache", {}).get("ttl_hours")
    if ttl is not None and (not isinstance(ttl, (int, float)) or ttl <= 0):
        raise ValueError("cache.ttl_hours muss > 0 sein")


def load_deck_url(deck: str, cfg: Dict[str, Any] | None = None) -> tuple[str, str]:
    """Resolve the CSV source URL for ``deck``.

    Priority order:
    1. Environment variable (``PREPCARDS_LC_CSV_URL`` / ``PREPCARDS_SD_CSV_URL``)
    2. ``decks.<deck>_csv_url`` in ``config.toml``

    Returns a tuple ``(url, source)`` where ``source`` is one of ``"env"``,
    ``"config"`` or ``""`` if no URL was found.
    """

    env_name = DECK_URL_ENV.get(deck)
    if env_name:
        url = os.environ.get(env_name)
        if url and url.strip():
            return url.strip(), "env"

    if cfg is None:
        cfg = load_config()
    url = cfg.get("decks", {}).get(f"{deck}_csv_url")
    if url and str(url).strip():
        return str(url).strip(), "config"

    return "", ""


def default_weights(deck: str, cfg: Dict[str, Any] | None = None) -> DeckWeights:
    """Standardgewichte eines Decks, ggf. überschrieben durch ``[weights.<deck>]``."""

    if cfg is None:
        cfg = load_config()
    merged = dict(DEFAULT_WEIGHTS.get(deck, {"red": 1.0, "yellow": 1.0, "green": 1.0}))
    for status, value in cfg.get("weights", {}).get(deck, {}).items():
        if status in STATUSES:
            merged[status] = max(0.0, float(value))
    return DeckWeights(**merged)


def cache_settings(cfg: Dict[str, Any] | None = None) -> tuple[Path, float]:
    """Liefert ``(cache_dir, ttl_seconds)`` für den persistenten Cache."""

    if cfg is None:
        cfg = load_config()
    cache_cfg = cfg.get("cache", {})
    cache_dir = Path(cache_cfg.get("dir", DEFAULT_CACHE_DIR)).expanduser()
    ttl_hours = float(cache_cfg.get("ttl_hours", DEFAULT_TTL_HOURS))
    return cache_dir, ttl_hours * 60 * 60


def fetch_settings(cfg: Dict[str, Any] | None = None) -> tuple[int, str]:
    """Liefert ``(timeout_sec, proxy_base)`` für den CSV-Abruf."""

    if cfg is None:
        cfg = load_config()
    fetch_cfg = cfg.get("fetch", {})
    timeout = int(fetch_cfg.get("timeout_sec", DEFAULT_FETCH_TIMEOUT))
    proxy_base = str(fetch_cfg.get("proxy_base", DEFAULT_PROXY_BASE)).rstrip("/")
    return timeout, proxy_base
