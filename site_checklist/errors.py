"""Errors raised while reading inspection checklists.

Every error is a ``ValueError`` so callers that only care about "this file
could not be parsed" can keep catching that.
"""

from __future__ import annotations

from typing import Any


class ChecklistError(ValueError):
    pass


class UnreadableSheetError(ChecklistError):
    pass


class InvalidDateFormatError(ChecklistError):
    def __init__(self, field: str, raw_value: Any) -> None:
        super().__init__(
            f"{field} has an unrecognised date '{raw_value}'. "
            "Use yyyy-mm-dd (or m/d/yy) in the source sheet."
        )
        self.field = field
        self.raw_value = raw_value


class MissingColumnError(ChecklistError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Header row is missing required column(s): {', '.join(missing)}")
        self.missing = missing
