from __future__ import annotations

import math
import re
from dataclasses import dataclass
from numbers import Real
from typing import Any

from site_checklist.shared import is_blank

LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
WELL_FORMED_RANGE_RE = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


@dataclass(frozen=True)
class ScoreRange:
    min: int = 0
    max: int = 1

    def text(self) -> str:
        return f"{self.min}/{self.max}"


DEFAULT_RANGE = ScoreRange()


def coerce_int(value: Any, default: int) -> int:
    """Leading-integer coercion: ``"3 pts"`` -> 3, ``4.0`` -> 4, ``"abc"`` -> default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Real):
        number = float(value)
        if not math.isfinite(number):
            return default
        return int(number)
    m = LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else default


def parse_range(text: Any) -> ScoreRange:
    """Parse an ``"<min>/<max>"`` score range, falling back to ``0/1``.

    Each half falls back on its own, so ``"3/x"`` gives ``3/1``. The maximum
    is never below 1 and the minimum never below 0.
    """
    if text is None:
        return DEFAULT_RANGE
    raw = str(text).strip()
    if "/" not in raw:
        return DEFAULT_RANGE
    parts = raw.split("/")
    if len(parts) != 2:
        return DEFAULT_RANGE
    low = coerce_int(parts[0], 0)
    high = coerce_int(parts[1], 1)
    return ScoreRange(min=max(low, 0), max=high if high >= 1 else 1)


def range_is_well_formed(text: Any) -> bool:
    if text is None:
        return False
    m = WELL_FORMED_RANGE_RE.match(str(text))
    return bool(m) and int(m.group(2)) >= 1


def parse_score(value: Any) -> tuple[int, bool]:
    """Return ``(score, defaulted)``; blank cells score 0 without counting as malformed."""
    if is_blank(value):
        return 0, False
    score = coerce_int(value, -1)
    if score < 0:
        return 0, True
    return score, False
