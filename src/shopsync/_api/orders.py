"""Order endpoints.

Endpoints:
  - GET /api/orders          (by shift, or by exact order id)
  - GET /api/order-details   (line items of one order)
"""

from __future__ import annotations

from shopsync._api._common import fetch_page
from shopsync._constants import ORDER_DETAILS_ENDPOINT, ORDERS_ENDPOINT
from shopsync._transport import Transport
from shopsync.models.order import Order, OrderLine
from shopsync.models.page import Page
from shopsync.session import Session


async def fetch_orders(
    session: Session,
    transport: Transport,
    *,
    page_number: int,
    page_size: int,
    shift_id: int | None = None,
    order_id: int | None = None,
) -> Page[Order]:
    """List orders of a shift, or look one order up by id.

    When ``order_id`` is given the shift filter is not sent; the server
    treats the two as alternative query forms.
    """
    params: dict[str, str | int]
    if order_id is not None:
        params = {"OrderId": order_id, "ShopId": session.shop_id}
    else:
        params = {"ShopId": session.shop_id}
        if shift_id is not None:
            params["ShiftId"] = shift_id
    return await fetch_page(
        endpoint=ORDERS_ENDPOINT,
        session=session,
        transport=transport,
        params=params,
        model=Order,
        page_number=page_number,
        page_size=page_size,
    )


async def fetch_order_lines(
    session: Session,
    transport: Transport,
    order_id: int,
    *,
    page_number: int,
    page_size: int,
) -> Page[OrderLine]:
    return await fetch_page(
        endpoint=ORDER_DETAILS_ENDPOINT,
        session=session,
        transport=transport,
        params={"ShopId": session.shop_id, "OrderId": order_id},
        model=OrderLine,
        page_number=page_number,
        page_size=page_size,
    )
