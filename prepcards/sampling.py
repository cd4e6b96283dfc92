"""Filter und gewichtete Zufallsauswahl von Karten.

`filter_cards` wendet die Statusfilter an, `weighted_random_pick` zieht dann
zweistufig: zuerst einen Status-Eimer proportional zum Gewicht (nur nicht
leere Eimer zählen), danach gleichverteilt eine Karte daraus. Die Zufallsquelle
ist als ``rng`` injizierbar, damit Tests deterministisch bleiben.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional, Sequence
import random

from .card_models import STATUSES, Card, DeckFilters, DeckWeights

RandomSource = Callable[[], float]


def filter_cards(cards: Sequence[Card], filters: DeckFilters) -> List[Card]:
    filtered = list(cards)
    if filters.exclude_green:
        filtered = [c for c in filtered if c.status != "green"]
    if filters.status != "all":
        filtered = [c for c in filtered if c.status == filters.status]
    return filtered


def _uniform_pick(cards: Sequence[Card], rng: RandomSource) -> Card:
    index = int(rng() * len(cards))
    # rng() darf nicht 1.0 liefern; trotzdem nie über das Ende hinaus greifen
    return cards[min(index, len(cards) - 1)]


def weighted_random_pick(
    cards: Sequence[Card],
    weights: DeckWeights,
    rng: RandomSource = random.random,
) -> Optional[Card]:
    """Pick one card, biased toward statuses with a higher weight.

    Statuses without cards never contribute to the weight sum. If no present
    status has a positive weight the pick is uniform over all ``cards``.
    Returns ``None`` only for an empty input.
    """
    if not cards:
        return None

    totals: Dict[str, int] = {status: 0 for status in STATUSES}
    for card in cards:
        totals[card.status] = totals.get(card.status, 0) + 1

    present = {
        status: max(0.0, weights.weight(status)) if totals[status] else 0.0
        for status in STATUSES
    }
    weight_sum = sum(present.values())
    if weight_sum <= 0:
        return _uniform_pick(cards, rng)

    draw = rng()
    buckets = [status for status in STATUSES if present[status] > 0]
    # der letzte belegte Bucket nimmt den Rest auf (Rundung, draw == 1.0)
    selected = buckets[-1]
    threshold = 0.0
    for status in buckets[:-1]:
        threshold += present[status] / weight_sum
        if draw < threshold:
            selected = status
            break

    return _uniform_pick([c for c in cards if c.status == selected], rng)
