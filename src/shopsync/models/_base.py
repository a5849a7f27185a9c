"""Base model and enum for shop API records.

Every list item inherits from :class:`ShopSyncBaseModel` which provides:

* A ``model_validator(mode="before")`` that strips sentinel values
  (``None``, ``""``, ``"--"``, NaN) so the field default is used.
* A ``raw`` dict that captures the original record.
* A required integer ``id``. Records without a usable identifier fail
  validation and are dropped by the normalizer.

Coded fields use :class:`SyncEnum`, which adds an ``UNKNOWN`` member at
``-1`` and a ``_missing_`` hook returning it for unmapped values.
"""

from __future__ import annotations

import enum
import math
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

from shopsync.datetime_codec import parse_server_timestamp
from shopsync.ingestion.normalize import safe_float, safe_int, safe_str

# Sentinel strings meaning "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null"})


ServerTimestamp = Annotated[datetime | None, BeforeValidator(parse_server_timestamp)]
"""Annotated type that coerces ISO strings or epoch numbers to aware datetimes."""


def lenient_float(default: float) -> BeforeValidator:
    """Validator replacing unreadable numbers with *default*."""

    def _coerce(value: Any) -> float:
        parsed = safe_float(value)
        return default if parsed is None else parsed

    return BeforeValidator(_coerce)


def lenient_optional_int(value: Any) -> int | None:
    return safe_int(value)


def lenient_str(default: str) -> BeforeValidator:
    """Validator replacing non-scalar or empty values with *default*."""

    def _coerce(value: Any) -> str:
        text = safe_str(value)
        return default if text is None else text.strip() or default

    return BeforeValidator(_coerce)


class SyncEnum(enum.IntEnum):
    """Base for coded API values.

    Every subclass **must** define ``UNKNOWN = -1``.
    """

    @classmethod
    def _missing_(cls, value: object) -> SyncEnum:
        if hasattr(cls, "UNKNOWN"):
            unknown: SyncEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class ShopSyncBaseModel(BaseModel):
    """Base for cached list items.

    Subclasses declare ``id`` aliases with ``validation_alias`` on an
    overriding field; the base only guarantees the identifier is a
    positive integer.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: int
    """Stable identifier, unique within one list."""

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original API record."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip sentinel values and stash the raw record."""
        if not isinstance(values, dict):
            return values
        cleaned = ShopSyncBaseModel._clean_dict(values)
        # Only auto-stash raw when it was not passed explicitly.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> int:
        parsed = safe_int(value)
        if parsed is None or parsed <= 0:
            raise ValueError(f"unusable identifier: {value!r}")
        return parsed
