from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import HTTPException


class ShortUrlError(Exception):
    """Base class for errors raised by the shortening and resolution paths."""

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str = "Request failed"):
        super().__init__(message)
        self.message = message


class ValidationError(ShortUrlError):
    """Malformed or missing input. Carries per-field messages."""

    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors


class NotFoundError(ShortUrlError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, message: str = "URL not found"):
        super().__init__(message)


class ExpiredError(ShortUrlError):
    """The code exists but its expiry has passed."""

    status_code = 410
    error_code = "GONE"

    def __init__(self, message: str = "URL has expired"):
        super().__init__(message)


class ConflictError(ShortUrlError):
    """A short code is already taken. Retried internally, never surfaced."""

    status_code = 409
    error_code = "CONFLICT"


class CapacityError(ShortUrlError):
    """No free short code could be allocated within the retry budget."""


@dataclass(frozen=True)
class ApiError:
    code: str
    message: str
    fields: Optional[dict[str, list[str]]] = field(default=None)

    def to_body(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.fields is not None:
            error["fields"] = self.fields
        return {"success": False, "error": error}


STATUS_TO_ERROR_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    410: "GONE",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_SERVER_ERROR",
}


def from_domain_error(exc: ShortUrlError) -> ApiError:
    if isinstance(exc, ValidationError):
        return ApiError(code=exc.error_code, message=exc.message, fields=exc.errors)
    if isinstance(exc, CapacityError):
        # internal detail stays in the logs
        return ApiError(code=exc.error_code, message="Internal server error")
    return ApiError(code=exc.error_code, message=exc.message)


def from_request_errors(errors: list[dict[str, Any]]) -> ApiError:
    """
    Converts FastAPI/pydantic request validation errors into field messages.

    The location prefix ("body", "query", "path") is dropped so a body field
    `url` is reported under "url".
    """
    fields: dict[str, list[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        fields.setdefault(name, []).append(str(err.get("msg", "Invalid value")))
    return ApiError(code="VALIDATION_ERROR", message="Validation failed", fields=fields)


def normalize_http_exception(exc: HTTPException) -> ApiError:
    """
    Converts HTTPException.detail into (code, message).

    Supports:
    - detail as str -> message=str, code inferred from status
    - detail as {"code": "...", "message": "..."} -> use directly
    - detail as {"error": {"code": "...", "message": "..."}} -> use directly
    """
    status = exc.status_code
    default_code = STATUS_TO_ERROR_CODE.get(status, "ERROR")

    detail: Any = exc.detail
    if isinstance(detail, dict):
        if "error" in detail and isinstance(detail["error"], dict):
            inner = detail["error"]
            if "code" in inner and "message" in inner:
                return ApiError(code=str(inner["code"]), message=str(inner["message"]))
        if "code" in detail and "message" in detail:
            return ApiError(code=str(detail["code"]), message=str(detail["message"]))

    # fallback
    msg = detail if isinstance(detail, str) else "Request failed"
    return ApiError(code=default_code, message=str(msg))
