# file: kodysu/models.py
"""
Response models for the `/api/v2.1/search.json` endpoint.

Models are frozen pydantic models keyed by the wire field names (aliases).
Use `SearchResponse.from_payload` for raw decoded JSON: it matches field
names case-insensitively and treats explicit `null`s as absent fields.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kodysu.core.phone_type import PhoneType


def _clean_keys(obj: dict[str, Any]) -> dict[str, Any]:
    # Lower-case keys and drop nulls so model defaults apply.
    return {str(k).lower(): v for k, v in obj.items() if v is not None}


class SearchResult(BaseModel):
    """Lookup result for a single phone number."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    phone_number: str = Field(default="", alias="number_current")
    success: bool = False
    number_type: int | None = None
    number_type_string: str | None = Field(default=None, alias="number_type_str")
    error_code: str | None = None
    error_message: str | None = None

    # Descriptive fields, passed through as-is.
    def_code: str | None = Field(default=None, alias="def")
    number: str | None = None
    code_start: str | None = None
    code_end: str | None = None
    operator: str | None = None
    operator_full: str | None = None
    region: str | None = None
    time: str | None = None
    is_bdpn: bool | None = Field(default=None, alias="bdpn")
    bdpn_operator: str | None = None
    city_code: str | None = Field(default=None, alias="code")
    city: str | None = None
    country_code: str | None = None
    international_city_code: str | None = Field(default=None, alias="city_code")
    country: str | None = None

    @property
    def phone_type(self) -> PhoneType:
        return PhoneType.from_string(self.number_type_string)

    @property
    def is_russian_mobile(self) -> bool:
        return self.phone_type is PhoneType.RUSSIAN_MOBILE

    @property
    def is_russian_fixed(self) -> bool:
        return self.phone_type is PhoneType.RUSSIAN_FIXED

    @property
    def is_ported(self) -> bool:
        """True only when the number is listed in the ported-numbers database."""

        return self.is_bdpn is True

    @property
    def display_operator(self) -> str:
        if self.operator_full:
            return self.operator_full
        return self.operator or ""


class SearchResponse(BaseModel):
    """One decoded HTTP response: remaining quota plus per-number results."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    quota: int = 0
    numbers: tuple[SearchResult, ...] = ()
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SearchResponse:
        """Build a response from decoded JSON (case-insensitive, null-tolerant)."""

        data = _clean_keys(payload)
        raw_numbers = data.get("numbers")
        if isinstance(raw_numbers, list):
            data["numbers"] = [
                _clean_keys(item) if isinstance(item, dict) else item for item in raw_numbers
            ]
        return cls.model_validate(data)

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the wire shape (aliases, nulls omitted)."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def has_error(self) -> bool:
        return bool((self.error_code or "").strip() or (self.error_message or "").strip())

    def failed_numbers(self) -> list[SearchResult]:
        return [n for n in self.numbers if not n.success]
