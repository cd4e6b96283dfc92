"""Übersetzung von CSV-Zeilen in Karten.

Für jedes Deck existiert ein eigener Mapper (`map_leetcode_rows`,
`map_system_design_rows`), ausgewählt über `DECK_MAPPERS` bzw. `map_rows`.
Beide normalisieren den Status über `normalize_status`, sodass jede Karte einen
der drei Werte ``red``/``yellow``/``green`` trägt.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional
import re

from .card_models import Card, NoteSection
from .csv_parser import CsvRow

LEETCODE_PROBLEM_URL = "https://leetcode.com/problems/{slug}/"

STATUS_MAP: Dict[str, str] = {
    "red": "red",
    "yellow": "yellow",
    "green": "green",
    "low": "red",
    "medium": "yellow",
    "high": "green",
    "0": "red",
    "1": "yellow",
    "2": "green",
}
DEFAULT_STATUS = "yellow"

LEGACY_ID_STATUS: Dict[str, str] = {"0": "red", "1": "yellow", "2": "green"}

LEETCODE_NOTE_FIELDS = (
    "Reason for fail",
    "Takeaway",
    "Follow Up",
    "Time Complexity",
    "Space Complexity",
)

TITLE_RE = re.compile(r"^(\d+)\.\s*(.+)$")
KEY_POINT_SEPARATOR_RE = re.compile(r"\s*[—–-]\s*SEPARATOR\s*[—–-]\s*")


def normalize(value: Optional[str] = None) -> str:
    return str(value or "").strip()


def normalize_status(value: Optional[str] = None) -> str:
    """Map any spelling (colour, severity word, legacy digit) to a status.

    Unknown or empty input yields ``yellow``.
    """
    return STATUS_MAP.get(normalize(value).lower(), DEFAULT_STATUS)


def _legacy_status_from_id(value: Optional[str]) -> Optional[str]:
    return LEGACY_ID_STATUS.get(normalize(value))


def slugify_leetcode_title(text: str) -> str:
    slug = text.lower()
    slug = re.sub(r"['\"]", "", slug)
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


def derive_leetcode_link(title: str) -> Optional[str]:
    """``"1. Two Sum"`` → ``https://leetcode.com/problems/two-sum/``."""
    match = TITLE_RE.match(title)
    if not match:
        return None
    slug = slugify_leetcode_title(match.group(2))
    return LEETCODE_PROBLEM_URL.format(slug=slug) if slug else None


def map_leetcode_rows(rows: List[CsvRow]) -> List[Card]:
    cards: List[Card] = []
    for index, row in enumerate(rows):
        card_id = normalize(row.get("ID")) or str(index + 1)
        name = normalize(row.get("Name"))
        title = name if name else f"{card_id}."

        # raw Status first, then the legacy 0/1/2 encoding stored in ID
        raw_status = row.get("Status") or _legacy_status_from_id(row.get("ID"))
        status = normalize_status(raw_status)

        times = normalize(row.get("Times Submitted"))
        meta = {"Times Submitted": times} if times else None

        sections = [
            NoteSection(label=label, value=normalize(row.get(label)))
            for label in LEETCODE_NOTE_FIELDS
        ]
        cards.append(
            Card(
                id=card_id,
                deck="leetcode",
                status=status,
                title=title,
                description=normalize(row.get("Description")) or None,
                link=normalize(row.get("Link")) or derive_leetcode_link(title),
                meta=meta,
                notes=[s for s in sections if s.value],
            )
        )
    return [c for c in cards if c.title.strip() != ""]


def hash_string(text: str) -> str:
    """Stabiler djb2-Hash (XOR-Variante) über UTF-16-Codeeinheiten, Basis 36.

    Rechnet mit 32-Bit-Überlauf, damit die IDs denen der Web-Version gleichen.
    """
    h = 5381
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h * 33) & 0xFFFFFFFF) ^ unit
        if h >= 0x80000000:
            h -= 0x100000000
    return _to_base36(abs(h))


def _to_base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def split_key_points(value: str) -> List[str]:
    cleaned = value.replace("\r", "\n")
    if not cleaned:
        return []
    blocks = (block.strip() for block in KEY_POINT_SEPARATOR_RE.split(cleaned))
    return [block for block in blocks if block]


def map_system_design_rows(rows: List[CsvRow]) -> List[Card]:
    cards: List[Card] = []
    for index, row in enumerate(rows):
        title = normalize(row.get("System Question"))
        if not title:
            continue
        key_points = split_key_points(normalize(row.get("Key Points")))
        sections = [
            NoteSection(label=f"Key Point {n}", value=point)
            for n, point in enumerate(key_points, 1)
        ]
        cards.append(
            Card(
                id=hash_string(f"{title}-{index}"),
                deck="system_design",
                status=normalize_status(row.get("Familiarity")),
                title=title,
                description=normalize(row.get("Description")) or None,
                notes=[s for s in sections if s.value],
            )
        )
    return cards


DECK_MAPPERS: Dict[str, Callable[[List[CsvRow]], List[Card]]] = {
    "leetcode": map_leetcode_rows,
    "system_design": map_system_design_rows,
}


def map_rows(deck: str, rows: List[CsvRow]) -> List[Card]:
    try:
        mapper = DECK_MAPPERS[deck]
    except KeyError:
        raise ValueError(f"Unknown deck: {deck!r}") from None
    return mapper(rows)
