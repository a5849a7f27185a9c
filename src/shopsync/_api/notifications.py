"""Notification endpoints.

Endpoints:
  - GET /api/notifications                  (paginated feed)
  - PUT /api/notifications/{id}/read        (mark one read)
  - PUT /api/notifications/read-all/{user}  (mark all read)
"""

from __future__ import annotations

import logging
from typing import Any

from shopsync._api._common import fetch_page, require_user_id
from shopsync._constants import NOTIFICATIONS_ENDPOINT, mark_all_read_endpoint, mark_read_endpoint
from shopsync._transport import Transport
from shopsync.models.notification import Notification
from shopsync.models.page import Page
from shopsync.session import Session

_logger = logging.getLogger(__name__)


async def fetch_notifications(
    session: Session,
    transport: Transport,
    *,
    page_number: int,
    page_size: int,
) -> Page[Notification]:
    return await fetch_page(
        endpoint=NOTIFICATIONS_ENDPOINT,
        session=session,
        transport=transport,
        params={"ShopId": session.shop_id, "UserId": require_user_id(session)},
        model=Notification,
        page_number=page_number,
        page_size=page_size,
    )


async def mark_read(session: Session, transport: Transport, notification_id: int) -> Any:
    _logger.debug("Marking notification %d read", notification_id)
    return await transport.put_json(mark_read_endpoint(notification_id), session.access_token)


async def mark_all_read(session: Session, transport: Transport) -> Any:
    user_id = require_user_id(session)
    _logger.debug("Marking all notifications read for user %d", user_id)
    return await transport.put_json(mark_all_read_endpoint(user_id), session.access_token)
