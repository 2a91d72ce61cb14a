from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from shorturlapi.services.store import ShortUrlRecord


class CreateUrlRequest(BaseModel):
    url: str
    expires_at: Optional[datetime] = None


class UpdateUrlRequest(BaseModel):
    # absent keys are left alone; an explicit null expires_at clears the expiry
    original_url: Optional[str] = None
    expires_at: Optional[datetime] = None


class ShortUrlResponse(BaseModel):
    id: str
    original_url: str
    short_code: str
    short_url: str
    clicks: int
    expires_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: ShortUrlRecord, base_url: str) -> "ShortUrlResponse":
        return cls(
            id=record.id,
            original_url=record.original_url,
            short_code=record.short_code,
            short_url=build_short_url(base_url, record.short_code),
            clicks=record.clicks,
            expires_at=record.expires_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


def build_short_url(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/{code}"


class UrlListResponse(BaseModel):
    success: bool = True
    data: list[ShortUrlResponse]


class UrlDataResponse(BaseModel):
    success: bool = True
    data: ShortUrlResponse


class UrlMessageResponse(UrlDataResponse):
    message: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ResolveResponse(BaseModel):
    success: bool = True
    original_url: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


class ErrorDetail(BaseModel):
    code: str
    message: str
    fields: Optional[dict[str, list[str]]] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
