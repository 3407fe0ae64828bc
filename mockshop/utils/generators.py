"""Timestamp and identifier helpers shared by the data layer and the routes."""
import random
import string
import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """
    Current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    The fixtures use this exact shape, so string comparison of two
    timestamps orders them chronologically.
    """
    return to_iso(utc_now())


def to_iso(dt: datetime) -> str:
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_iso(value) -> datetime:
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def generate_id(collection: str) -> str:
    """
    ``<first four letters of the collection>_<epoch millis><0-999>``.

    The random suffix only makes collisions unlikely within one millisecond;
    it is not a uniqueness guarantee.
    """
    return prefixed_id(str(collection)[:4])


def prefixed_id(prefix: str) -> str:
    """``<prefix>_<epoch millis><0-999>`` for nested items such as addresses and cart lines."""
    return f"{prefix}_{int(time.time() * 1000)}{random.randint(0, 999)}"


def random_token(length: int = 8) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choice(alphabet) for _ in range(length))
