"""Shift endpoints.

Endpoints:
  - GET /api/shifts               (list shifts of a shop)
  - PUT /api/shifts/{id}/close    (close a shift)
"""

from __future__ import annotations

import logging
from typing import Any

from shopsync._api._common import fetch_page
from shopsync._constants import SHIFTS_ENDPOINT, close_shift_endpoint
from shopsync._transport import Transport
from shopsync.models.page import Page
from shopsync.models.shift import Shift
from shopsync.session import Session

_logger = logging.getLogger(__name__)


async def fetch_shifts(
    session: Session,
    transport: Transport,
    *,
    page_number: int,
    page_size: int,
) -> Page[Shift]:
    return await fetch_page(
        endpoint=SHIFTS_ENDPOINT,
        session=session,
        transport=transport,
        params={"ShopId": session.shop_id},
        model=Shift,
        page_number=page_number,
        page_size=page_size,
    )


async def close_shift(session: Session, transport: Transport, shift_id: int) -> Any:
    _logger.debug("Closing shift %d", shift_id)
    return await transport.put_json(close_shift_endpoint(shift_id), session.access_token, {"ShopId": session.shop_id})
