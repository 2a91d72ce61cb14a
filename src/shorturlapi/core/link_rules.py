from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

MAX_URL_LENGTH = 2048

_http_url = TypeAdapter(HttpUrl)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # naive datetimes are taken to be UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    return expires_at is not None and now >= expires_at


def url_errors(url: object, field: str = "url") -> list[str]:
    """Returns the problems with `url` as a redirect target, empty if it is usable."""
    if not isinstance(url, str) or not url.strip():
        return [f"The {field} field is required."]
    if len(url) > MAX_URL_LENGTH:
        return [f"The {field} may not be greater than {MAX_URL_LENGTH} characters."]
    try:
        _http_url.validate_python(url)
    except PydanticValidationError:
        return [f"The {field} must be a valid absolute http or https URL."]
    return []


def expiry_errors(expires_at: Optional[datetime], now: datetime) -> list[str]:
    if expires_at is None:
        return []
    if as_utc(expires_at) <= now:
        return ["The expires_at must be a date after now."]
    return []
