"""Kleiner CSV-Proxy für Tabellen-Exporte.

Leitet nur Anfragen an ``docs.google.com/spreadsheets/...`` weiter und liefert
die Antwort als ``text/csv``. `handle_proxy_request` enthält die Logik,
`make_wsgi_app` stellt sie unter ``/api/csv-proxy`` als WSGI-Anwendung bereit
(gestartet über ``prepcards serve-proxy``).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit
import json

import requests

from .config import DEFAULT_FETCH_TIMEOUT
from .fetch import PROXY_PATH
from .logging_utils import get_logger

logger = get_logger(__name__)

ALLOWED_HOST = "docs.google.com"
ALLOWED_PATH_PREFIX = "/spreadsheets/"
CSV_CACHE_CONTROL = "public, max-age=3600"

HTTP_REASONS = {200: "OK", 400: "Bad Request", 404: "Not Found", 502: "Bad Gateway"}


@dataclass
class ProxyResponse:
    status: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)


def _json_error(message: str, status: int) -> ProxyResponse:
    return ProxyResponse(
        status=status,
        body=json.dumps({"error": message}),
        headers={"Content-Type": "application/json"},
    )


def is_allowed_url(url: str) -> bool:
    parts = urlsplit(url)
    return parts.netloc == ALLOWED_HOST and parts.path.startswith(ALLOWED_PATH_PREFIX)


def handle_proxy_request(
    target: Optional[str],
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> ProxyResponse:
    if not target:
        return _json_error("Missing url parameter.", 400)

    try:
        parts = urlsplit(target)
        parts.port  # löst ValueError bei kaputtem Port aus
    except ValueError:
        return _json_error("Invalid url.", 400)
    if not parts.scheme or not parts.netloc:
        return _json_error("Invalid url.", 400)

    if not is_allowed_url(target):
        logger.warning("Proxy-Anfrage abgelehnt: %s", target)
        return _json_error("URL not allowed.", 400)

    http = session or requests
    try:
        response = http.get(target, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Proxy-Abruf fehlgeschlagen: %s", exc)
        return _json_error("Failed to fetch CSV.", 502)
    if not response.ok:
        logger.warning("Proxy-Abruf fehlgeschlagen: HTTP %s", response.status_code)
        return _json_error("Failed to fetch CSV.", 502)

    response.encoding = response.encoding or "utf-8"
    return ProxyResponse(
        status=200,
        body=response.text,
        headers={
            "Content-Type": "text/csv; charset=utf-8",
            "Cache-Control": CSV_CACHE_CONTROL,
        },
    )


StartResponse = Callable[[str, List[Tuple[str, str]]], Any]


def make_wsgi_app(session: Optional[requests.Session] = None) -> Callable[[Dict[str, Any], StartResponse], Iterable[bytes]]:
    def app(environ: Dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "") != PROXY_PATH:
            resp = _json_error("Not found.", 404)
        else:
            query = parse_qs(environ.get("QUERY_STRING", ""))
            target = (query.get("url") or [None])[0]
            resp = handle_proxy_request(target, session=session)
        body = resp.body.encode("utf-8")
        headers = list(resp.headers.items()) + [("Content-Length", str(len(body)))]
        start_response(f"{resp.status} {HTTP_REASONS.get(resp.status, '')}".strip(), headers)
        return [body]

    return app
