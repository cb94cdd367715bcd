import re
import secrets
import string
from datetime import datetime, timezone, timedelta

TRACK_CODE_ALPHABET = string.ascii_uppercase + string.digits
TRACK_CODE_LENGTH = 8


def generate_track_code(length: int = TRACK_CODE_LENGTH) -> str:
    """Short, customer-shareable order code, e.g. 'K7Q2MX9A'."""
    return "".join(secrets.choice(TRACK_CODE_ALPHABET) for _ in range(length))


def generate_link_token() -> str:
    # 32 random bytes -> 256 bits, URL-safe base64
    return secrets.token_urlsafe(32)


def get_expiry_time(minutes: int = 15) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "restaurant"
