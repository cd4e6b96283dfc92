from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional

Status = Literal["red", "yellow", "green"]
DeckName = Literal["leetcode", "system_design"]
StatusFilter = Literal["all", "red", "yellow", "green"]

STATUSES: tuple[str, ...] = ("red", "yellow", "green")
DECKS: tuple[str, ...] = ("leetcode", "system_design")
STATUS_FILTERS: tuple[str, ...] = ("all",) + STATUSES


@dataclass(frozen=True)
class NoteSection:
    label: str
    value: str


@dataclass(frozen=True)
class Card:
    id: str
    deck: DeckName
    status: Status
    title: str
    description: Optional[str] = None
    link: Optional[str] = None
    meta: Optional[Dict[str, str]] = None
    notes: List[NoteSection] = field(default_factory=list)


@dataclass(frozen=True)
class DeckWeights:
    red: float = 1.0
    yellow: float = 1.0
    green: float = 1.0

    def weight(self, status: str) -> float:
        return float(getattr(self, status))

    def with_weight(self, status: str, value: float) -> "DeckWeights":
        if status not in STATUSES:
            raise ValueError(f"Unknown status: {status!r}")
        return replace(self, **{status: value})


@dataclass(frozen=True)
class DeckFilters:
    status: StatusFilter = "all"
    exclude_green: bool = False


def card_to_dict(card: Card) -> Dict[str, Any]:
    """JSON-taugliche Darstellung einer Karte; fehlende Felder werden weggelassen."""

    data: Dict[str, Any] = {
        "id": card.id,
        "deck": card.deck,
        "status": card.status,
        "title": card.title,
    }
    if card.description is not None:
        data["description"] = card.description
    if card.link is not None:
        data["link"] = card.link
    if card.meta is not None:
        data["meta"] = dict(card.meta)
    data["notes"] = {
        "sections": [{"label": s.label, "value": s.value} for s in card.notes]
    }
    return data


def card_from_dict(data: Dict[str, Any]) -> Card:
    """Gegenstück zu `card_to_dict`.

    Wirft ``KeyError``/``TypeError`` bei falscher Form und ``ValueError`` bei
    unbekanntem Deck oder Status.
    """

    deck = str(data["deck"])
    status = str(data["status"])
    if deck not in DECKS:
        raise ValueError(f"Unknown deck: {deck!r}")
    if status not in STATUSES:
        raise ValueError(f"Unknown status: {status!r}")
    sections = (data.get("notes") or {}).get("sections") or []
    meta = data.get("meta")
    return Card(
        id=str(data["id"]),
        deck=deck,
        status=status,
        title=str(data["title"]),
        description=data.get("description"),
        link=data.get("link"),
        meta=dict(meta) if meta is not None else None,
        notes=[NoteSection(label=str(s["label"]), value=str(s["value"])) for s in sections],
    )
