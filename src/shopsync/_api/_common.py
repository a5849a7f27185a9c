"""Shared helpers for shop API endpoint modules.

This module centralizes the most repeated patterns:
- resolving the session scope required by every endpoint
- issuing a paginated GET and turning any envelope into a :class:`Page`

It is internal to shopsync and may change at any time.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TypeVar

from shopsync._transport import Transport
from shopsync.exceptions import SessionMissingError
from shopsync.ingestion.normalize import extract_page_meta, normalize_items
from shopsync.models._base import ShopSyncBaseModel
from shopsync.models.page import Page
from shopsync.session import Session

_logger = logging.getLogger(__name__)

TItem = TypeVar("TItem", bound=ShopSyncBaseModel)


def require_session(session: Session | None) -> Session:
    """Return *session* if it carries a credential and a shop scope."""
    if session is None or not session.is_usable:
        raise SessionMissingError("No access token or shop scope available")
    return session


def require_user_id(session: Session) -> int:
    if session.user_id is None or session.user_id <= 0:
        raise SessionMissingError("No user id available for this session")
    return session.user_id


async def fetch_page(
    *,
    endpoint: str,
    session: Session,
    transport: Transport,
    params: Mapping[str, str | int],
    model: type[TItem],
    page_number: int,
    page_size: int,
) -> Page[TItem]:
    """GET one page of *endpoint* and normalize it into a typed page."""
    query: dict[str, str | int] = {**params, "page": page_number, "pageSize": page_size}
    payload = await transport.get_json(endpoint, query, session.access_token)
    items = normalize_items(payload, model)
    meta = extract_page_meta(payload)
    page = Page[model](  # type: ignore[valid-type]
        items=items,
        page_number=meta["page"] or page_number,
        page_size=meta["page_size"] or page_size,
        total_pages=meta["total_pages"],
        total_count=meta["total_count"],
        unread_count=meta["unread_count"],
    )
    _logger.debug(
        "%s page=%d/%s items=%d",
        endpoint,
        page.page_number,
        page.total_pages if page.total_pages is not None else "?",
        len(items),
    )
    return page
