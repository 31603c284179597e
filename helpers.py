"""General-purpose helper utilities shared across the application."""

from __future__ import annotations

import numbers
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import pandas as pd


__all__ = [
    "_coerce_timestamp",
    "_dedupe_preserve_order",
    "_format_release_timestamp",
    "_normalize_lookup_name",
    "_parse_id_list",
    "coerce_catalog_id",
]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if not pd.api.types.is_scalar(value):
        return False
    return bool(pd.isna(value))


def coerce_catalog_id(value: Any) -> str:
    """Normalize potential IGDB identifiers to a canonical string."""

    if _is_missing(value):
        return ""
    if isinstance(value, bool):
        return ""
    if isinstance(value, str):
        text = value.strip()
        if not text or text.lower() == "nan":
            return ""
        if text.endswith(".0") and text[:-2].isdigit():
            return text[:-2]
        return text
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        if float(value).is_integer():
            return str(int(value))
        return str(value)
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return ""
    return text


def _coerce_timestamp(value: Any) -> int | None:
    """Return a usable epoch timestamp or ``None`` for absent/zero values."""

    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        timestamp = int(value)
    else:
        try:
            timestamp = int(float(str(value).strip()))
        except (TypeError, ValueError, OverflowError):
            return None
    return timestamp or None


def _format_release_timestamp(value: Any) -> str:
    """Return the UTC ``YYYY-MM-DD`` date for an epoch timestamp, or ``""``."""

    timestamp = _coerce_timestamp(value)
    if timestamp is None:
        return ""
    try:
        dt = _EPOCH + timedelta(seconds=timestamp)
    except (OverflowError, ValueError):
        return ""
    return dt.date().isoformat()


def _dedupe_preserve_order(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def _normalize_lookup_name(value: Any) -> str:
    if _is_missing(value):
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _parse_id_list(value: Any) -> tuple[int, ...]:
    """Return the integer ids held by an IGDB reference list."""

    if _is_missing(value) or isinstance(value, (str, bytes)):
        return ()
    try:
        iterator = iter(value)
    except TypeError:
        return ()
    ids: list[int] = []
    for element in iterator:
        if isinstance(element, dict):
            element = element.get("id")
        text = coerce_catalog_id(element)
        if text.isdigit():
            ids.append(int(text))
    return tuple(ids)
