from __future__ import annotations

import math
import re
import warnings
from datetime import date, datetime
from numbers import Real
from typing import Any

import pandas as pd

EXCEL_EPOCH = "1899-12-30"
# Serial day number of 1970-01-01 in the 1899-12-30 epoch.
UNIX_EPOCH_SERIAL = 25569
TWO_DIGIT_YEAR_PIVOT = 50

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# (pattern, year_first); tried in order, first valid calendar date wins.
DATE_PATTERNS = [
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), True),
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$"), False),
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{2}|\d{4})$"), False),
    (re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{2}|\d{4})$"), False),
]


def _fmt(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _calendar_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def expand_two_digit_year(year: int, today: date | None = None) -> int:
    """00-50 land in the current century, 51-99 in the previous one."""
    century = ((today or date.today()).year // 100) * 100
    if year <= TWO_DIGIT_YEAR_PIVOT:
        return century + year
    return century - 100 + year


def serial_to_iso(value: float) -> str:
    if not math.isfinite(value):
        return ""
    try:
        parsed = pd.to_datetime(value, unit="D", origin=EXCEL_EPOCH, errors="coerce")
    except (OverflowError, ValueError):
        return ""
    if pd.isna(parsed):
        return ""
    return _fmt(parsed.date())


def _parse_generic(text: str) -> str:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (OverflowError, TypeError, ValueError):
            return ""
    if pd.isna(parsed):
        return ""
    return _fmt(parsed.date())


def _parse_text(text: str, today: date | None) -> str:
    m = ISO_DATE_RE.match(text)
    if m and _calendar_date(*(int(part) for part in m.groups())):
        return text

    numeric_shape = bool(m)
    for pattern, year_first in DATE_PATTERNS:
        m = pattern.match(text)
        if not m:
            continue
        numeric_shape = True
        a, b, c = m.groups()
        if year_first:
            year, month, day = int(a), int(b), int(c)
        else:
            month, day = int(a), int(b)
            year = int(c) if len(c) == 4 else expand_two_digit_year(int(c), today)
        parsed = _calendar_date(year, month, day)
        if parsed is not None:
            return _fmt(parsed)

    # numeric-shaped text that is off the calendar never reaches the generic parse
    if numeric_shape:
        return ""
    return _parse_generic(text)


def normalize_date(raw: Any, *, today: date | None = None) -> str:
    """Return ``raw`` as a zero-padded ``YYYY-MM-DD`` string, or ``""``.

    Accepts text in the formats a site inspector tends to type, spreadsheet
    serial day numbers, and date/datetime values handed over by a workbook
    reader. Never raises: anything unrecognised comes back as ``""`` and it
    is up to the caller to decide whether an empty result is an error.
    """
    if raw is None or isinstance(raw, bool):
        return ""
    if isinstance(raw, datetime):
        return "" if pd.isna(raw) else _fmt(raw.date())
    if isinstance(raw, date):
        return _fmt(raw)
    if isinstance(raw, Real):
        return serial_to_iso(float(raw))
    text = str(raw).strip()
    if not text:
        return ""
    return _parse_text(text, today)
