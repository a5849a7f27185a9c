"""Normalization helpers.

Centralizes defensive parsing of server payloads. The upstream API does not
use one envelope shape across endpoints, so item extraction probes a fixed
list of conventional shapes instead of trusting any single one.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

_logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)

_TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "n", "off", ""})


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value)
    return text if text else None


def safe_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and not (isinstance(value, float) and math.isnan(value)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    return default


def extract_items(payload: Any) -> list[Any]:
    """Return the item array of a list response, or ``[]``.

    Shapes are probed in this order and the first match wins:

    1. a bare top-level array
    2. ``{"items": [...]}``
    3. ``{"data": {"items": [...]}}``
    4. ``{"data": [...]}``
    """
    if isinstance(payload, list):
        return list(payload)
    if not isinstance(payload, Mapping):
        return []

    items = payload.get("items")
    if isinstance(items, list):
        return list(items)

    data = payload.get("data")
    if isinstance(data, Mapping):
        nested = data.get("items")
        if isinstance(nested, list):
            return list(nested)
    if isinstance(data, list):
        return list(data)
    return []


def extract_page_meta(payload: Any) -> dict[str, int | None]:
    """Best-effort extraction of pagination metadata from an envelope.

    Keys are looked up on the envelope itself first, then on a nested
    ``data`` object. Missing or malformed values come back as ``None``.
    """
    sources: list[Mapping[str, Any]] = []
    if isinstance(payload, Mapping):
        sources.append(payload)
        data = payload.get("data")
        if isinstance(data, Mapping):
            sources.append(data)

    def _lookup(*names: str) -> int | None:
        for source in sources:
            for name in names:
                if name in source:
                    parsed = safe_int(source.get(name))
                    if parsed is not None:
                        return parsed
        return None

    return {
        "page": _lookup("page", "pageNumber", "currentPage"),
        "page_size": _lookup("pageSize"),
        "total_pages": _lookup("totalPages"),
        "total_count": _lookup("totalCount", "total"),
        "unread_count": _lookup("unreadCount"),
    }


def normalize_items(payload: Any, model: type[TModel]) -> list[TModel]:
    """Extract and validate every record of *payload* as *model*.

    Records that are not objects, or that have no usable identifier, are
    dropped. Malformed display fields fall back to the model defaults.
    """
    result: list[TModel] = []
    for index, record in enumerate(extract_items(payload)):
        if not isinstance(record, Mapping):
            _logger.debug("Dropping non-object record #%d for %s", index, model.__name__)
            continue
        try:
            result.append(model.model_validate(dict(record)))
        except ValidationError as exc:
            _logger.debug(
                "Dropping record #%d for %s: %s",
                index,
                model.__name__,
                exc.errors(include_url=False, include_input=False),
            )
    return result
