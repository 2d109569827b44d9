"""Readers for ``MARKET_EXTREMES_*`` and API-key environment variables.

Every reader takes an optional ``environ`` mapping so settings can be built
from a plain dict in tests. Blank or unparseable values fall back to the
default; numeric values are clamped into ``[minimum, maximum]``.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from typing import TypeVar

_Number = TypeVar("_Number", int, float)

TRUTHY = frozenset({"1", "true", "yes", "on", "y"})


def parse_env_str(name: str, default: str = "", *, environ: Mapping[str, str] | None = None) -> str:
    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None:
        return default
    return str(value).strip()


def parse_env_bool(
    name: str,
    default: bool = False,
    *,
    environ: Mapping[str, str] | None = None,
) -> bool:
    raw = parse_env_str(name, environ=environ)
    return raw.lower() in TRUTHY if raw else default


def _parse_clamped(
    name: str,
    convert: Callable[[str], _Number],
    default: _Number,
    minimum: _Number,
    maximum: _Number,
    environ: Mapping[str, str] | None,
) -> _Number:
    raw = parse_env_str(name, environ=environ)
    if not raw:
        return default
    try:
        parsed = convert(raw)
    except ValueError:
        return default
    return max(minimum, min(parsed, maximum))


def parse_env_int(
    name: str,
    default: int,
    minimum: int,
    maximum: int,
    *,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Batch sizes, retry counts and timeouts."""
    return _parse_clamped(name, int, default, minimum, maximum, environ)


def parse_env_float(
    name: str,
    default: float,
    minimum: float,
    maximum: float,
    *,
    environ: Mapping[str, str] | None = None,
) -> float:
    """Delays in seconds, cache TTLs and coverage ratios."""
    return _parse_clamped(name, float, default, minimum, maximum, environ)


def parse_env_list(name: str, *, environ: Mapping[str, str] | None = None) -> list[str]:
    """Comma-separated symbols or hosts; blanks dropped."""
    raw = parse_env_str(name, environ=environ)
    return [item.strip() for item in raw.split(",") if item.strip()]
