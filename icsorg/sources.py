"""Acquire raw ICS text from a local file or an http(s) URL."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from .constants import DEFAULT_FETCH_TIMEOUT
from .errors import ConfigError, ExitCode, SourceError

LOG = logging.getLogger(__name__)

__all__ = ["get_ics_data", "is_url"]


def is_url(source: str) -> bool:
    return source.startswith("http")


def _fetch(url: str, session: Optional[requests.Session], timeout: float) -> str:
    http = session or requests.Session()
    LOG.debug("GET %s", url)
    try:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise SourceError(f"get_ics_data: {exc}", code=ExitCode.NETWORK_ERROR) from exc
    return resp.text


def _read(path: str) -> str:
    p = Path(path).expanduser()
    LOG.debug("reading %s", p)
    try:
        return p.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceError(f"get_ics_data: {exc}") from exc


def get_ics_data(
    source: Optional[str],
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> str:
    """Return the full ICS text for ``source``.

    Sources starting with ``http`` are fetched; anything else is read as a
    UTF-8 file. The whole payload is returned before any processing starts.
    """
    if not source:
        raise ConfigError(
            "No ICS source configured",
            hint="Pass -i PATH_OR_URL or set ICS_FILE in the rc file",
        )
    if is_url(source):
        return _fetch(source, session, timeout)
    return _read(source)
