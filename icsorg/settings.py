"""Run configuration for icsorg.

Values are resolved in layers, later layers winning:

1. built-in defaults (``TITLE=Calendar``, ``PAST=7``, ``FUTURE=365``)
2. the rc file (``~/.icsorgrc`` unless ``-c`` says otherwise), a YAML mapping
3. process environment variables with the same names
4. command-line switches

The result is a plain ``Settings`` value passed explicitly to the normalizer
and the document assembler; nothing reads configuration from globals.
"""
from __future__ import annotations

import datetime as _dt
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .constants import DEFAULT_FUTURE_DAYS, DEFAULT_PAST_DAYS, DEFAULT_RC_FILE, DEFAULT_TITLE
from .errors import ConfigError
from .model import HeaderFields, Identity

__all__ = ["ENV_KEYS", "DateWindowResolver", "Settings", "load_rc", "load_settings"]

# rc/env name -> Settings attribute
ENV_KEYS: Dict[str, str] = {
    "ICS_FILE": "ics_file",
    "ORG_FILE": "org_file",
    "TITLE": "title",
    "AUTHOR": "author",
    "EMAIL": "email",
    "CATEGORY": "category",
    "STARTUP": "startup",
    "FILETAGS": "filetags",
    "PAST": "past",
    "FUTURE": "future",
    "TIMEZONE": "timezone",
    "SORT": "sort",
}

_INT_FIELDS = ("past", "future")
_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")


def load_rc(path: Optional[str]) -> Dict[str, Any]:
    """Load the rc file into a dict with upper-cased keys.

    A missing or empty file yields {}. A file whose root is not a mapping is a
    ConfigError.
    """
    if not path:
        return {}
    p = Path(path).expanduser()
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid rc file {p}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid rc file {p}: top-level YAML must be a mapping")
    return {str(k).upper(): v for k, v in data.items()}


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name.upper()} must be a number of days, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name.upper()} must be a number of days, got {value!r}") from None


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ConfigError(f"{name.upper()} must be true or false, got {value!r}")


def _coerce(attr: str, value: Any) -> Any:
    if attr in _INT_FIELDS:
        return _as_int(attr, value)
    if attr == "sort":
        return _as_bool(attr, value)
    return None if value is None else str(value)


class DateWindowResolver:
    """Resolves the [start, end] window around now."""

    def __init__(self, now_factory: Optional[Callable[[], _dt.datetime]] = None):
        self._now_factory = now_factory or _dt.datetime.now

    def resolve(self, past: int, future: int) -> Tuple[_dt.datetime, _dt.datetime]:
        now = self._now_factory()
        return now - _dt.timedelta(days=past), now + _dt.timedelta(days=future)


@dataclass(frozen=True)
class Settings:
    rc_file: Optional[str] = None
    ics_file: Optional[str] = None
    org_file: Optional[str] = None
    title: str = DEFAULT_TITLE
    author: Optional[str] = None
    email: Optional[str] = None
    category: Optional[str] = None
    startup: Optional[str] = None
    filetags: Optional[str] = None
    past: int = DEFAULT_PAST_DAYS
    future: int = DEFAULT_FUTURE_DAYS
    timezone: Optional[str] = None
    sort: bool = False
    window_start: Optional[_dt.datetime] = None
    window_end: Optional[_dt.datetime] = None

    def header(self) -> HeaderFields:
        return HeaderFields(
            title=self.title or DEFAULT_TITLE,
            author=self.author,
            email=self.email,
            category=self.category,
            startup=self.startup,
            filetags=self.filetags,
        )

    def identity(self) -> Identity:
        return Identity(author_name=self.author, author_email=self.email)

    def tzinfo(self) -> Optional[_dt.tzinfo]:
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigError(f"Unknown time zone: {self.timezone}", hint="Use an IANA name like Australia/Sydney") from None

    def with_window(self, resolver: Optional[DateWindowResolver] = None) -> "Settings":
        start, end = (resolver or DateWindowResolver()).resolve(self.past, self.future)
        return replace(self, window_start=start, window_end=end)

    def as_dict(self) -> Dict[str, Any]:
        return {f.name.upper(): getattr(self, f.name) for f in fields(self)}


def _layer(source: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, attr in ENV_KEYS.items():
        if key in source and source[key] is not None:
            out[attr] = _coerce(attr, source[key])
    return out


def load_settings(
    rc_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Settings:
    """Resolve Settings from the rc file, the environment and CLI overrides.

    ``overrides`` maps Settings attribute names to values; None values are
    ignored so unset CLI switches do not clobber lower layers.
    """
    rc_path = os.path.expanduser(rc_file or DEFAULT_RC_FILE)
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {"rc_file": rc_path}
    values.update(_layer(load_rc(rc_path)))
    values.update(_layer(env))
    for attr, value in (overrides or {}).items():
        if value is None:
            continue
        if attr not in ENV_KEYS.values():
            raise ConfigError(f"Unknown setting: {attr}")
        values[attr] = _coerce(attr, value)
    return Settings(**values)
