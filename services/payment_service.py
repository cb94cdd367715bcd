"""
UPI payment link and QR generation for prepaid orders.
"""
import base64
import io
from decimal import Decimal
from urllib.parse import quote

import qrcode

from core.config import settings
from utils.logger import get_logger

logger = get_logger(__name__)


def format_amount(amount) -> str:
    return f"{Decimal(str(amount)):.2f}"


def build_upi_link(upi_id: str, payee_name: str, amount, note: str) -> str:
    """
    Build a UPI deep link, e.g.
    upi://pay?pa=cafe@okicici&pn=Blue%20Cafe&am=25.98&cu=INR&tn=Order%20%23K7Q2MX9A
    """
    return (
        f"upi://pay?pa={upi_id}"
        f"&pn={quote(payee_name, safe='')}"
        f"&am={format_amount(amount)}"
        f"&cu={settings.CURRENCY}"
        f"&tn={quote(note, safe='')}"
    )


def render_payment_qr(upi_link: str) -> str | None:
    """
    Render the UPI link as a PNG QR code and return it as a data URI.
    Returns None when rendering fails; the customer can still use the link.
    """
    try:
        qr = qrcode.QRCode(version=None, box_size=10, border=4)
        qr.add_data(upi_link)
        qr.make(fit=True)
        img = qr.make_image(fill_color='black', back_color='white')
        buffer = io.BytesIO()
        img.save(buffer, format='PNG')
    except Exception as e:
        logger.error(
            f"Payment QR generation failed: {e}",
            extra={"error_type": type(e).__name__},
            exc_info=True
        )
        return None

    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f"data:image/png;base64,{encoded}"
