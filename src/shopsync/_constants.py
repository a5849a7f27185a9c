"""Internal constants shared across the library."""

BASE_URL = "http://localhost:5000"
USER_AGENT = "shopsync/aiohttp"

DEFAULT_PAGE_SIZE = 20
DEFAULT_NOTIFICATION_PAGE_SIZE = 20
DEFAULT_PRODUCT_PAGE_SIZE = 100
DEFAULT_UNIT_PAGE_SIZE = 50

#: Quiet period before a search keystroke turns into a request.
DEFAULT_DEBOUNCE_DELAY = 0.5

#: Vietnam does not observe DST, so a fixed offset is exact.
DEFAULT_UTC_OFFSET_HOURS = 7.0

# ------------------------------------------------------------------
# REST endpoints
# ------------------------------------------------------------------

SHIFTS_ENDPOINT = "/api/shifts"
ORDERS_ENDPOINT = "/api/orders"
ORDER_DETAILS_ENDPOINT = "/api/order-details"
NOTIFICATIONS_ENDPOINT = "/api/notifications"
PRODUCTS_ENDPOINT = "/api/products"
PRODUCT_UNITS_ENDPOINT = "/api/product-units"


def close_shift_endpoint(shift_id: int) -> str:
    return f"{SHIFTS_ENDPOINT}/{shift_id}/close"


def mark_read_endpoint(notification_id: int) -> str:
    return f"{NOTIFICATIONS_ENDPOINT}/{notification_id}/read"


def mark_all_read_endpoint(user_id: int) -> str:
    return f"{NOTIFICATIONS_ENDPOINT}/read-all/{user_id}"
