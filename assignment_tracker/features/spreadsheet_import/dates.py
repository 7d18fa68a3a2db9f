"""
Due-date normalizer for spreadsheet cells.

Accepts datetime/date objects, spreadsheet serial numbers (days since
1899-12-30, so serial 25569 is 1970-01-01) and strings. Strings go through
dateutil first, then the slash (N/N/YYYY) and ISO (YYYY-M-D) patterns.
Slash dates are month/day/year unless slash_order is "DMY"; slash_order never
applies to year-first text. A bare four-digit string is a year (January 1st);
other numeric strings of up to five digits are serials.
Results are naive UTC datetimes.
"""
import numbers
import re
from datetime import date, datetime, time, timedelta
from typing import Any

from dateutil import parser as dateutil_parser

from assignment_tracker.core.models import to_naive_utc

from .errors import InvalidDate

SPREADSHEET_EPOCH = datetime(1899, 12, 30)
SLASH_ORDERS = ("MDY", "DMY")

_YEAR_RE = re.compile(r"^(\d{4})$")
_SERIAL_RE = re.compile(r"^\d{1,5}(?:\.\d+)?$")
_SLASH_PREFIX_RE = re.compile(r"^\d{1,2}/\d{1,2}/\d{2,4}\b")
_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def from_serial(serial: float) -> datetime:
    """Spreadsheet serial day number -> datetime."""
    try:
        return SPREADSHEET_EPOCH + timedelta(days=serial)
    except (OverflowError, ValueError):
        raise InvalidDate(serial)


def _from_patterns(text: str, slash_order: str) -> datetime:
    m = _SLASH_RE.match(text)
    if m:
        first, second, year = (int(g) for g in m.groups())
        month, day = (second, first) if slash_order == "DMY" else (first, second)
        return datetime(year, month, day)
    m = _ISO_RE.match(text)
    if m:
        year, month, day = (int(g) for g in m.groups())
        return datetime(year, month, day)
    raise ValueError(f"unrecognized date: {text}")


def parse_date_string(text: str, slash_order: str = "MDY") -> datetime:
    text = text.strip()
    if not text:
        raise InvalidDate(text)
    m = _YEAR_RE.match(text)
    if m:
        try:
            return datetime(int(m.group(1)), 1, 1)
        except ValueError:
            raise InvalidDate(text)
    if _SERIAL_RE.match(text):
        return from_serial(float(text))
    dayfirst = slash_order == "DMY" and bool(_SLASH_PREFIX_RE.match(text))
    try:
        return to_naive_utc(dateutil_parser.parse(text, dayfirst=dayfirst))
    except (ValueError, OverflowError):
        pass
    try:
        return _from_patterns(text, slash_order)
    except ValueError:
        raise InvalidDate(text)


def normalize_due_date(value: Any, slash_order: str = "MDY") -> datetime:
    """Convert one due-date cell to a naive UTC datetime or raise InvalidDate."""
    if slash_order not in SLASH_ORDERS:
        raise ValueError(f"slash_order must be one of {SLASH_ORDERS}, got {slash_order!r}")
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, bool):
        raise InvalidDate(value)
    if isinstance(value, numbers.Real):
        return from_serial(float(value))
    if isinstance(value, str):
        return parse_date_string(value, slash_order)
    raise InvalidDate(value)
