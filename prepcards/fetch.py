"""Abruf der CSV-Quellen über HTTP.

`fetch_csv_text` holt den Text direkt; `fetch_csv_text_with_fallback` versucht
bei einem Fehler genau einmal den Umweg über den CSV-Proxy
(`csv_proxy`, Pfad ``/api/csv-proxy``). Weitere Wiederholungen gibt es nicht.
"""

from __future__ import annotations
from typing import Optional
from urllib.parse import quote

import requests

from .config import DEFAULT_FETCH_TIMEOUT
from .logging_utils import get_logger

logger = get_logger(__name__)

PROXY_PATH = "/api/csv-proxy"


class FetchError(RuntimeError):
    """Raised when a CSV source cannot be fetched."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


def fetch_csv_text(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> str:
    http = session or requests
    try:
        response = http.get(url, timeout=timeout, headers={"Cache-Control": "no-store"})
    except requests.RequestException as exc:
        raise FetchError(f"Failed to fetch CSV: {exc}", url) from exc
    if not response.ok:
        raise FetchError(
            f"Failed to fetch CSV: {response.status_code}", url, response.status_code
        )
    if response.encoding is None or response.encoding.lower() == "iso-8859-1":
        # Google Sheets liefert UTF-8, oft ohne charset im Content-Type
        response.encoding = "utf-8"
    return response.text


def proxy_url_for(url: str, proxy_base: str) -> str:
    return f"{proxy_base.rstrip('/')}{PROXY_PATH}?url={quote(url, safe='')}"


def fetch_csv_text_with_fallback(
    url: str,
    proxy_base: str,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> str:
    try:
        return fetch_csv_text(url, session=session, timeout=timeout)
    except FetchError as exc:
        logger.warning("Direkter Abruf fehlgeschlagen (%s), versuche Proxy", exc)
        return fetch_csv_text(proxy_url_for(url, proxy_base), session=session, timeout=timeout)
