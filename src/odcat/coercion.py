"""
Field coercion for heterogeneous JSON values.

The same logical field arrives in different shapes from different feeds:
CKAN extras carry everything as strings (lists comma-separated), POD
documents use native lists and booleans. Each coercer here classifies
the incoming value once and branches on that classification, returning
the canonical value and any diagnostics. Coercers never raise on bad
input; a malformed value comes back as None plus a PARSE diagnostic.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional, Tuple, Union
from urllib.parse import urlparse

from odcat.diagnostics import Diagnostic, parse_error

DateValue = Union[date, datetime]

BUREAU_CODE_RE = re.compile(r"^\d{3}:\d{2}$")
PROGRAM_CODE_RE = re.compile(r"^\d{3}:\d{3}$")
EMAIL_RE = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)+$")

MAILTO = "mailto:"

# POD 1.1 accrualPeriodicity vocabulary
PERIODICITY = {
    "decennial": "R/P10Y",
    "quadrennial": "R/P4Y",
    "annual": "R/P1Y",
    "annually": "R/P1Y",
    "yearly": "R/P1Y",
    "bimonthly": "R/P2M",
    "semiweekly": "R/P3.5D",
    "daily": "R/P1D",
    "biweekly": "R/P2W",
    "semiannual": "R/P6M",
    "biennial": "R/P2Y",
    "triennial": "R/P3Y",
    "three times a week": "R/P0.33W",
    "three times a month": "R/P0.33M",
    "continuously updated": "R/PT1S",
    "continuous": "R/PT1S",
    "monthly": "R/P1M",
    "quarterly": "R/P3M",
    "semimonthly": "R/P0.5M",
    "three times a year": "R/P4M",
    "weekly": "R/P1W",
    "hourly": "R/PT1H",
    "irregular": "irregular",
}


class JsonKind(Enum):
    """Shape of a decoded JSON value."""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    OBJECT = "object"
    # YAML loaders resolve unquoted timestamps to date objects
    DATE = "date"
    OTHER = "other"


def classify(value: Any) -> JsonKind:
    """Tag a decoded JSON or YAML value with its kind; unknown types are OTHER."""
    if value is None:
        return JsonKind.NULL
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return JsonKind.BOOL
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, (list, tuple)):
        return JsonKind.LIST
    if isinstance(value, dict):
        return JsonKind.OBJECT
    if isinstance(value, date):
        return JsonKind.DATE
    return JsonKind.OTHER


def split_csv(text: str) -> List[str]:
    """Split a comma-separated string, trimming segments and dropping empties."""
    if "," not in text:
        stripped = text.strip()
        return [stripped] if stripped else []
    return [part.strip() for part in text.split(",") if part.strip()]


def as_string_list(value: Any, field: Optional[str] = None) -> Tuple[List[str], List[Diagnostic]]:
    """
    Coerce a list-or-CSV-string value into a list of strings.

    Args:
        value: None, a comma-separated string, or a list of strings
        field: Field name used in diagnostics

    Returns:
        (items, diagnostics)
    """
    kind = classify(value)
    if kind == JsonKind.NULL:
        return [], []
    if kind == JsonKind.STRING:
        return split_csv(value), []
    if kind == JsonKind.LIST:
        items: List[str] = []
        diagnostics: List[Diagnostic] = []
        for member in value:
            if classify(member) == JsonKind.STRING:
                if member.strip():
                    items.append(member.strip())
            else:
                diagnostics.append(parse_error(f"{field or 'list'} entry must be a string: {member!r}", field))
        return items, diagnostics
    return [], [parse_error(f"{field or 'value'} must be a string or list, got {kind.value}", field)]


def as_string(value: Any, field: Optional[str] = None) -> Tuple[Optional[str], Optional[Diagnostic]]:
    """Coerce a scalar to a trimmed string; lists and objects are rejected."""
    kind = classify(value)
    if kind == JsonKind.NULL:
        return None, None
    if kind == JsonKind.STRING:
        return value.strip(), None
    if kind in (JsonKind.NUMBER, JsonKind.BOOL):
        return str(value).lower() if kind == JsonKind.BOOL else str(value), None
    if kind == JsonKind.DATE:
        return value.isoformat(), None
    return None, parse_error(f"{field or 'value'} must be a string, got {kind.value}", field)


def as_bool(value: Any, field: Optional[str] = None) -> Tuple[Optional[bool], Optional[Diagnostic]]:
    """String "true" is True, any other string False; booleans pass through."""
    kind = classify(value)
    if kind == JsonKind.NULL:
        return None, None
    if kind == JsonKind.BOOL:
        return value, None
    if kind == JsonKind.STRING:
        return value.strip() == "true", None
    return None, parse_error(f"{field or 'value'} must be a boolean, got {kind.value}", field)


def as_int(value: Any, field: Optional[str] = None) -> Tuple[Optional[int], Optional[Diagnostic]]:
    kind = classify(value)
    if kind == JsonKind.NULL:
        return None, None
    if kind == JsonKind.NUMBER and float(value).is_integer():
        return int(value), None
    if kind == JsonKind.STRING and value.strip().isdigit():
        return int(value.strip()), None
    return None, parse_error(f"{field or 'value'} must be an integer: {value!r}", field)


def parse_url(value: Any, field: Optional[str] = None) -> Tuple[Optional[str], Optional[Diagnostic]]:
    """
    Parse a URL string.

    Empty strings count as unset. A value without a scheme and network
    location is a PARSE diagnostic and leaves the field unset.
    """
    kind = classify(value)
    if kind == JsonKind.NULL:
        return None, None
    if kind != JsonKind.STRING:
        return None, parse_error(f"{field or 'URL'} must be a string, got {kind.value}", field)
    text = value.strip()
    if not text:
        return None, None
    try:
        parts = urlparse(text)
    except ValueError as e:
        return None, parse_error(f"{field or 'URL'} is an invalid URL: {text} ({e})", field)
    if not parts.scheme or not parts.netloc:
        return None, parse_error(f"{field or 'URL'} is an invalid URL: {text}", field)
    return text, None


def parse_date(value: Any, field: Optional[str] = None) -> Tuple[Optional[DateValue], Optional[Diagnostic]]:
    """
    Parse an ISO-8601 date or datetime.

    "2015-01-30" becomes a date; anything with a time part becomes a
    datetime. A trailing "Z" is read as UTC.
    """
    kind = classify(value)
    if kind == JsonKind.NULL:
        return None, None
    if kind == JsonKind.DATE:
        return value, None
    if kind != JsonKind.STRING:
        return None, parse_error(f"{field or 'date'} must be an ISO-8601 string, got {kind.value}", field)
    text = value.strip()
    if not text:
        return None, None
    try:
        if len(text) == 10:
            return date.fromisoformat(text), None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text), None
    except ValueError:
        return None, parse_error(f"{field or 'date'} has invalid ISO date: {value}", field)


def format_date(value: Optional[DateValue]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Strip a leading mailto: prefix."""
    if value is None:
        return None
    text = value.strip()
    if text.lower().startswith(MAILTO):
        text = text[len(MAILTO):]
    return text


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_RE.match(value) is not None


def normalize_periodicity(value: Optional[str]) -> Optional[str]:
    """Map a frequency word to its ISO-8601 repeating duration."""
    if value is None:
        return None
    text = value.strip()
    if not text or text.startswith("R/"):
        return text or None
    return PERIODICITY.get(text.lower(), text)


def add_codes(
    existing: List[str],
    value: Any,
    pattern: re.Pattern,
    label: str,
    field: Optional[str] = None,
) -> List[Diagnostic]:
    """
    Append well-formed codes from `value` to `existing` in place.

    Codes already present are skipped. Codes not matching `pattern` are
    excluded and reported.
    """
    codes, diagnostics = as_string_list(value, field)
    for code in codes:
        if code in existing:
            continue
        if pattern.match(code):
            existing.append(code)
        else:
            diagnostics.append(parse_error(f"{label} must be {pattern.pattern[1:-1]}: {code}", field))
    return diagnostics


__all__ = [
    "JsonKind",
    "classify",
    "split_csv",
    "as_string_list",
    "as_string",
    "as_bool",
    "as_int",
    "parse_url",
    "parse_date",
    "format_date",
    "normalize_email",
    "is_valid_email",
    "normalize_periodicity",
    "add_codes",
    "BUREAU_CODE_RE",
    "PROGRAM_CODE_RE",
]
