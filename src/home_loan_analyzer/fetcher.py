"""Promotion catalog loader: local JSON file or read-only REST endpoint.

The catalog is either a bare list of promotion rows or an object with
"banks" and "promotions" lists. Loading is user-triggered; nothing polls.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import requests

from .config import API_KEY_ENV_VAR, FETCH_TIMEOUT
from .promotions import Promotion
from .resolver import resolve_catalog

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a catalog cannot be read for any reason."""


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def fetch_raw_catalog(source: str, api_key: Optional[str] = None) -> Any:
    """Return the decoded JSON document behind *source*.

    Raises FetchError on any error (network, file access, malformed JSON).
    """
    if _is_url(source):
        return _fetch_http(source, api_key or os.environ.get(API_KEY_ENV_VAR))
    return _read_file(source)


def load_catalog(source: str, api_key: Optional[str] = None) -> list[Promotion]:
    """Fetch and resolve the promotion catalog behind *source*."""
    promotions = resolve_catalog(fetch_raw_catalog(source, api_key))
    logger.info("Loaded %d promotions from %s", len(promotions), source)
    return promotions


def _fetch_http(url: str, api_key: Optional[str]) -> Any:
    headers = {"Accept": "application/json"}
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    try:
        resp = requests.get(url, headers=headers, timeout=FETCH_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"Catalog request failed: {exc}") from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise FetchError(f"Catalog response from {url} is not valid JSON: {exc}") from exc


def _read_file(path: str) -> Any:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise FetchError(f"Cannot read catalog file '{path}': {exc}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise FetchError(f"Catalog file '{path}' is not valid JSON: {exc}") from exc
