# file: kodysu/core/phone_type.py
"""Number type classification as reported by the lookup service."""

from __future__ import annotations

from enum import IntEnum


class PhoneType(IntEnum):
    UNKNOWN = 0
    RUSSIAN_MOBILE = 1
    RUSSIAN_FIXED = 2
    OTHER = 3

    @classmethod
    def from_string(cls, number_type_str: str | None) -> PhoneType:
        """Map the raw `number_type_str` value onto a `PhoneType`."""

        if number_type_str is None:
            return cls.UNKNOWN
        return _FROM_STRING.get(number_type_str, cls.UNKNOWN)

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


# The service has used both English codes and Russian labels over time.
_FROM_STRING: dict[str, PhoneType] = {
    "ru_mobile": PhoneType.RUSSIAN_MOBILE,
    "Мобильный РФ": PhoneType.RUSSIAN_MOBILE,
    "ru_fixed": PhoneType.RUSSIAN_FIXED,
    "Стационарный РФ": PhoneType.RUSSIAN_FIXED,
    "other": PhoneType.OTHER,
    "Другие": PhoneType.OTHER,
    "ua_mobile": PhoneType.OTHER,
}

_DESCRIPTIONS: dict[PhoneType, str] = {
    PhoneType.UNKNOWN: "Unknown type",
    PhoneType.RUSSIAN_MOBILE: "Russian mobile number",
    PhoneType.RUSSIAN_FIXED: "Russian fixed-line number",
    PhoneType.OTHER: "International number",
}
