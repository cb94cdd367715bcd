from urllib.parse import quote


def tracking_path(restaurant_slug: str, track_code: str) -> str:
    """Customer order tracking page."""
    return f"/customer-end-pages/{quote(restaurant_slug, safe='')}/orders/{quote(track_code, safe='')}"


def checkout_path(track_code: str, restaurant_slug: str) -> str:
    """Checkout page showing the UPI link and QR for a payment_pending order."""
    return f"/checkout/{quote(track_code, safe='')}?slug={quote(restaurant_slug, safe='')}"


def magic_link_path(token: str) -> str:
    return f"/magic/{token}"
