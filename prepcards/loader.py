"""Laden der Decks: Cache → Abruf → Parsen → Mapping.

Der `DeckLoader` verbindet alle Einzelmodule. Er fragt zuerst den
Prozess-Cache, dann den persistenten Cache ab und lädt erst danach die CSV
über `fetch.fetch_csv_text_with_fallback`. Ergebnisse werden in beiden
Cache-Stufen abgelegt. `import_csv` ist der Weg für lokale Dateien und
behandelt den ersten Parserfehler als fatal.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional

import requests

from .cache import LocalCache, MemoryCache
from .card_models import DECKS, Card, card_from_dict, card_to_dict
from .cards import map_rows
from .config import (
    CACHE_PREFIX,
    cache_settings,
    fetch_settings,
    load_config,
    load_deck_url,
)
from .csv_parser import parse_csv
from .fetch import fetch_csv_text_with_fallback
from .logging_utils import get_logger

logger = get_logger(__name__)


class DeckConfigError(ValueError):
    """Raised when a deck has no configured CSV source."""


class CsvImportError(ValueError):
    """Raised when an imported CSV contains parse errors."""


def cache_key(deck: str) -> str:
    return f"{CACHE_PREFIX}:{deck}"


def _check_deck(deck: str) -> None:
    if deck not in DECKS:
        raise ValueError(f"Unknown deck: {deck!r}")


class DeckLoader:
    def __init__(
        self,
        cfg: Optional[Dict[str, Any]] = None,
        memory_cache: Optional[MemoryCache] = None,
        local_cache: Optional[LocalCache] = None,
        session: Optional[requests.Session] = None,
        fetch_text: Optional[Callable[[str], str]] = None,
    ):
        self.cfg = load_config() if cfg is None else cfg
        cache_dir, ttl_seconds = cache_settings(self.cfg)
        self.timeout, self.proxy_base = fetch_settings(self.cfg)
        self.memory = memory_cache if memory_cache is not None else MemoryCache()
        self.local = local_cache if local_cache is not None else LocalCache(cache_dir, ttl_seconds)
        self.session = session
        self._fetch_text = fetch_text or self._fetch_with_fallback

    def _fetch_with_fallback(self, url: str) -> str:
        return fetch_csv_text_with_fallback(
            url, self.proxy_base, session=self.session, timeout=self.timeout
        )

    def _read_local(self, key: str) -> Optional[List[Card]]:
        raw = self.local.get(key)
        if raw is None:
            return None
        try:
            return [card_from_dict(item) for item in raw]
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            logger.warning("Cache-Eintrag %s unbrauchbar, wird verworfen: %s", key, exc)
            self.local.remove(key)
            return None

    def _store(self, deck: str, cards: List[Card]) -> None:
        key = cache_key(deck)
        self.memory.set(key, cards)
        self.local.set(key, [card_to_dict(c) for c in cards])

    def load_deck(self, deck: str) -> List[Card]:
        """Liefert die Karten eines Decks, bevorzugt aus dem Cache.

        Parserfehler werden nur protokolliert; die teilweise gelesenen Zeilen
        werden trotzdem verwendet.
        """

        _check_deck(deck)
        key = cache_key(deck)

        memory = self.memory.get(key)
        if memory is not None:
            logger.info("Deck %s aus dem Speicher-Cache (%s Karten)", deck, len(memory))
            return memory

        local = self._read_local(key)
        if local is not None:
            logger.info("Deck %s aus dem lokalen Cache (%s Karten)", deck, len(local))
            self.memory.set(key, local)
            return local

        url, source = load_deck_url(deck, self.cfg)
        if not url:
            raise DeckConfigError(f"Missing CSV URL for deck '{deck}'.")
        logger.info("Lade Deck %s von %s (Quelle: %s)", deck, url, source)

        csv_text = self._fetch_text(url)
        result = parse_csv(csv_text)
        for message in result.errors:
            logger.warning("CSV-Fehler in Deck %s: %s", deck, message)
        cards = map_rows(deck, result.rows)

        self._store(deck, cards)
        logger.info("Deck %s geladen: %s Zeilen, %s Karten", deck, len(result.rows), len(cards))
        return cards

    def import_csv(self, deck: str, csv_text: str) -> List[Card]:
        """Ersetzt ein Deck durch den Inhalt einer lokalen CSV-Datei.

        Raises:
            CsvImportError: mit der ersten Fehlermeldung des Parsers.
        """

        _check_deck(deck)
        result = parse_csv(csv_text)
        if result.errors:
            raise CsvImportError(result.errors[0])
        cards = map_rows(deck, result.rows)
        self._store(deck, cards)
        logger.info("Deck %s importiert: %s Karten", deck, len(cards))
        return cards

    def invalidate(self, deck: str) -> None:
        """Entfernt ein Deck aus beiden Cache-Stufen (erzwingt Neuladen)."""

        _check_deck(deck)
        key = cache_key(deck)
        self.memory.remove(key)
        self.local.remove(key)
