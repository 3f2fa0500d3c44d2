# file: kodysu/core/phone.py
"""
Phone number normalization.

The lookup service keys everything by a digits-only number, so normalization
here is deliberately simple:
- every character that is not an ASCII decimal digit is dropped,
- empty/whitespace/None input normalizes to an empty string,
- no length checks (see `PhoneNumber.is_valid`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

_NON_DIGITS = re.compile(r"[^0-9]+")

MIN_LENGTH = 7
MAX_LENGTH = 15


def normalize(raw: str | None) -> str:
    """
    Return the digits-only form of `raw`.

    >>> normalize("+7 (916) 123-45-67")
    '79161234567'
    """

    if raw is None:
        return ""
    s = raw.strip()
    if not s:
        return ""
    return _NON_DIGITS.sub("", s)


def normalize_all(raw_numbers: Iterable[str | None]) -> list[str]:
    """Normalize, drop empties and deduplicate, keeping first-seen order."""

    out: list[str] = []
    seen: set[str] = set()
    for raw in raw_numbers:
        value = normalize(raw)
        if not value or value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


@dataclass(frozen=True, slots=True)
class PhoneNumber:
    """
    A phone number as typed by the user plus its normalized value.

    Two instances are equal (and hash equally) when their normalized values
    match, whatever the original formatting was.
    """

    raw: str = field(default="", compare=False)
    value: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", normalize(self.raw))

    @classmethod
    def from_raw(cls, raw: str | None) -> PhoneNumber:
        return cls(raw or "")

    @property
    def is_empty(self) -> bool:
        return not self.value

    @property
    def is_valid(self) -> bool:
        return not self.is_empty and MIN_LENGTH <= len(self.value) <= MAX_LENGTH

    def __str__(self) -> str:
        return self.value
