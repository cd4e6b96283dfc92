"""Übungszustand je Deck: Gewichte, Filter, gezogene Karte.

`PracticeSession` hält für beide Decks einen `DeckState` und bildet die
Bedienlogik der Oberfläche ab (nächste Karte ziehen, aufdecken, Gewichte und
Filter ändern). Die Karten selbst liefert der `loader.DeckLoader`.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence
import random

from .card_models import DECKS, STATUS_FILTERS, STATUSES, Card, DeckFilters, DeckWeights
from .config import default_weights
from .logging_utils import get_logger
from .sampling import RandomSource, filter_cards, weighted_random_pick

logger = get_logger(__name__)


@dataclass
class DeckState:
    weights: DeckWeights
    filters: DeckFilters = field(default_factory=DeckFilters)
    selected_card: Optional[Card] = None
    revealed: bool = False


class PracticeSession:
    def __init__(
        self,
        cfg: Optional[Dict[str, Any]] = None,
        rng: RandomSource = random.random,
        active_deck: str = "leetcode",
    ):
        if active_deck not in DECKS:
            raise ValueError(f"Unknown deck: {active_deck!r}")
        self.rng = rng
        self.active_deck = active_deck
        self.states: Dict[str, DeckState] = {
            deck: DeckState(weights=default_weights(deck, cfg)) for deck in DECKS
        }
        self.cards: Dict[str, List[Card]] = {deck: [] for deck in DECKS}

    @property
    def state(self) -> DeckState:
        return self.states[self.active_deck]

    def switch_deck(self, deck: str) -> None:
        if deck not in DECKS:
            raise ValueError(f"Unknown deck: {deck!r}")
        self.active_deck = deck

    def set_cards(self, deck: str, cards: Sequence[Card]) -> None:
        self.cards[deck] = list(cards)

    def filtered_cards(self) -> List[Card]:
        return filter_cards(self.cards[self.active_deck], self.state.filters)

    def draw_next(self) -> Optional[Card]:
        """Zieht die nächste Karte gewichtet aus den gefilterten Karten."""
        selected = weighted_random_pick(self.filtered_cards(), self.state.weights, rng=self.rng)
        self.state.selected_card = selected
        self.state.revealed = False
        if selected is None:
            logger.info("Keine Karte für Deck %s mit den aktuellen Filtern", self.active_deck)
        return selected

    def toggle_reveal(self) -> bool:
        self.state.revealed = not self.state.revealed
        return self.state.revealed

    def set_weight(self, status: str, value: Any) -> None:
        """Setzt ein Gewicht; negative Werte werden auf 0 begrenzt, ungültige ignoriert."""
        if status not in STATUSES:
            raise ValueError(f"Unknown status: {status!r}")
        try:
            number = float(value)
        except (TypeError, ValueError):
            return
        if number != number:  # NaN
            return
        self.state.weights = self.state.weights.with_weight(status, max(0.0, number))

    def set_status_filter(self, status: str) -> None:
        if status not in STATUS_FILTERS:
            raise ValueError(f"Unknown status filter: {status!r}")
        self.state.filters = replace(self.state.filters, status=status)

    def toggle_exclude_green(self) -> bool:
        filters = self.state.filters
        self.state.filters = replace(filters, exclude_green=not filters.exclude_green)
        return self.state.filters.exclude_green
