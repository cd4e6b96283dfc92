"""Einlesen von Tabellen-Exporten (CSV) in Zeilen-Mappings.

`parse_csv` bereinigt den Rohtext (BOM, führende Leerzeilen), erkennt das
Trennzeichen anhand der ersten Zeile und liest die Daten mit ``pandas`` ein.
Fehler werden als Liste von Meldungen zurückgegeben; bereits gelesene Zeilen
bleiben erhalten. Die Zeilen werden anschließend von `cards.map_rows` in
Karten übersetzt.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import csv
import io
import re

import pandas as pd

from .logging_utils import get_logger

logger = get_logger(__name__)

CsvRow = Dict[str, Optional[str]]

DELIMITER_CANDIDATES = (",", ";", "\t")
BOM = "\ufeff"


@dataclass
class ParseResult:
    rows: List[CsvRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith(BOM) else text


def strip_leading_empty_lines(text: str) -> str:
    """Entfernt führende Zeilen, die nur aus Trennzeichen/Leerraum bestehen."""

    lines = re.split(r"\r?\n", text)
    while lines:
        cleaned = re.sub(r"[,\t; ]", "", lines[0]).strip()
        if cleaned:
            break
        lines.pop(0)
    return "\n".join(lines)


def detect_delimiter(csv_text: str) -> str:
    """Return the most frequent candidate delimiter of the first line.

    Ties are resolved in candidate order (comma, semicolon, tab); a line
    without any candidate falls back to a comma.
    """

    first_line = re.split(r"\r?\n", csv_text, maxsplit=1)[0]
    best, best_count = ",", 0
    for delimiter in DELIMITER_CANDIDATES:
        count = first_line.count(delimiter)
        if count > best_count:
            best, best_count = delimiter, count
    return best


def _read_options(delimiter: str) -> dict:
    # header=None: die erste Zeile wird selbst als Kopfzeile behandelt, damit
    # pandas keine Index-Spalte aus überlangen Zeilen ableitet
    return dict(
        sep=delimiter,
        engine="python",
        header=None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )


def _cell(value: object) -> Optional[str]:
    return None if pd.isna(value) else str(value)


def _has_content(row: CsvRow) -> bool:
    return any(str(value or "").strip() != "" for value in row.values())


def dedupe_headers(headers: List[str]) -> List[str]:
    """Benennt doppelte Spaltennamen um (``A``, ``A_1``, ``A_2`` ...)."""

    taken = set(headers)
    seen: set[str] = set()
    suffixes: Dict[str, int] = {}
    result = []
    for header in headers:
        name = header
        if name in seen:
            n = suffixes.get(header, 0)
            while name in seen or name in taken:
                n += 1
                name = f"{header}_{n}"
            suffixes[header] = n
        seen.add(name)
        result.append(name)
    return result


def parse_csv(csv_text: str) -> ParseResult:
    """Parse ``csv_text`` into header-keyed rows plus human-readable errors.

    The function never raises for malformed content: structural problems end
    up in ``errors`` and every row read before the problem is returned.
    """

    cleaned = strip_leading_empty_lines(strip_bom(csv_text))
    result = ParseResult()
    if not cleaned.strip():
        return result

    options = _read_options(detect_delimiter(cleaned))
    headers: List[str] | None = None
    rows: List[CsvRow] = []

    def on_bad_line(fields: List[str]) -> List[str]:
        result.errors.append(
            f"Too many fields: expected {n_fields} fields but parsed {len(fields)}"
        )
        return fields[:n_fields]

    try:
        n_fields = pd.read_csv(io.StringIO(cleaned), nrows=1, **options).shape[1]
        # eine Zeile pro Chunk, damit bei einem Abbruch alle vorherigen Zeilen bleiben
        with pd.read_csv(
            io.StringIO(cleaned),
            on_bad_lines=on_bad_line,
            chunksize=1,
            **options,
        ) as reader:
            for chunk in reader:
                for values in chunk.itertuples(index=False, name=None):
                    cells = [_cell(v) for v in values]
                    if headers is None:
                        headers = dedupe_headers([(c or "").strip() for c in cells])
                        continue
                    row: CsvRow = {
                        header: cell
                        for header, cell in zip(headers, cells)
                        if cell is not None
                    }
                    parsed = sum(1 for cell in cells if cell is not None)
                    if parsed < len(headers):
                        result.errors.append(
                            f"Row {len(rows) + 1}: Too few fields: expected "
                            f"{len(headers)} fields but parsed {parsed}"
                        )
                    rows.append(row)
    except csv.Error as exc:
        logger.warning("CSV-Zeile %s fehlerhaft quotiert: %s", len(rows) + 1, exc)
        result.errors.append(f"Row {len(rows) + 1}: Malformed quoted field: {exc}")
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        logger.warning("CSV konnte nicht vollständig gelesen werden: %s", exc)
        result.errors.append(str(exc).strip())

    result.rows = [row for row in rows if _has_content(row)]
    return result
