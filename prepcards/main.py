"""Kommandozeilen-Einstieg (``prepcards``).

Unterbefehle:

* ``draw``: Deck laden (Cache/URL oder lokale Datei) und Karten gewichtet ziehen
* ``import``: lokale CSV als Deck übernehmen und in die Caches schreiben
* ``serve-proxy``: den CSV-Proxy lokal starten
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import List, Optional
from wsgiref.simple_server import make_server

from .card_models import DECKS, STATUS_FILTERS, STATUSES, Card
from .config import load_config, validate_config
from .csv_proxy import make_wsgi_app
from .fetch import FetchError
from .loader import CsvImportError, DeckConfigError, DeckLoader
from .logging_utils import get_logger
from .practice import PracticeSession

logger = get_logger(__name__)


def format_card(card: Card, reveal: bool = False) -> str:
    lines = [f"[{card.status.upper()}] {card.title}"]
    if card.link:
        lines.append(f"  {card.link}")
    if card.description:
        lines.append(f"  {card.description}")
    for key, value in (card.meta or {}).items():
        lines.append(f"  {key}: {value}")
    if reveal:
        for section in card.notes:
            lines.append(f"  - {section.label}: {section.value}")
    return "\n".join(lines)


def _read_file(path: str) -> str:
    # utf-8-sig entfernt ein BOM bereits beim Lesen
    return Path(path).read_text(encoding="utf-8-sig")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prepcards", description="Interview-Karteikarten üben")
    parser.add_argument("--config", help="Pfad zu config.toml")
    sub = parser.add_subparsers(dest="command", required=True)

    draw = sub.add_parser("draw", help="Karten gewichtet ziehen")
    draw.add_argument("--deck", choices=DECKS, default="leetcode")
    draw.add_argument("--file", help="lokale CSV statt der konfigurierten URL")
    draw.add_argument("--status", choices=STATUS_FILTERS, default="all")
    draw.add_argument("--exclude-green", action="store_true")
    draw.add_argument("--count", type=int, default=1)
    draw.add_argument("--reveal", action="store_true", help="Notizen mit ausgeben")
    for status in STATUSES:
        draw.add_argument(f"--{status}", type=float, dest=f"weight_{status}", help=f"Gewicht für {status}")

    imp = sub.add_parser("import", help="lokale CSV als Deck übernehmen")
    imp.add_argument("--deck", choices=DECKS, required=True)
    imp.add_argument("path")

    proxy = sub.add_parser("serve-proxy", help="CSV-Proxy starten")
    proxy.add_argument("--host", default="127.0.0.1")
    proxy.add_argument("--port", type=int, default=8765)
    return parser


def cmd_draw(args: argparse.Namespace, cfg: dict) -> int:
    loader = DeckLoader(cfg)
    if args.file:
        cards = loader.import_csv(args.deck, _read_file(args.file))
    else:
        cards = loader.load_deck(args.deck)

    session = PracticeSession(cfg, active_deck=args.deck)
    session.set_cards(args.deck, cards)
    session.set_status_filter(args.status)
    if args.exclude_green:
        session.toggle_exclude_green()
    for status in STATUSES:
        value = getattr(args, f"weight_{status}")
        if value is not None:
            session.set_weight(status, value)

    for _ in range(max(1, args.count)):
        card = session.draw_next()
        if card is None:
            print("Keine passenden Karten.")
            return 0
        print(format_card(card, reveal=args.reveal))
        print()
    return 0


def cmd_import(args: argparse.Namespace, cfg: dict) -> int:
    cards = DeckLoader(cfg).import_csv(args.deck, _read_file(args.path))
    print(f"{len(cards)} Karten in Deck {args.deck} importiert.")
    return 0


def cmd_serve_proxy(args: argparse.Namespace, cfg: dict) -> int:
    with make_server(args.host, args.port, make_wsgi_app()) as server:
        logger.info("CSV-Proxy läuft auf http://%s:%s/api/csv-proxy", args.host, args.port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("CSV-Proxy beendet")
    return 0


COMMANDS = {
    "draw": cmd_draw,
    "import": cmd_import,
    "serve-proxy": cmd_serve_proxy,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    if cfg:
        try:
            validate_config(cfg)
        except ValueError as exc:
            logger.error("Ungültige Konfiguration: %s", exc)
            return 2
    try:
        return COMMANDS[args.command](args, cfg)
    except (FetchError, DeckConfigError, CsvImportError) as exc:
        logger.error("%s", exc)
        return 1
    except OSError as exc:
        logger.error("Datei konnte nicht gelesen werden: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
