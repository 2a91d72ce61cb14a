import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from shorturlapi.db.base import Base
from shorturlapi.services.code_generator import CODE_LENGTH


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShortUrl(Base):
    __tablename__ = "short_urls"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    original_url: Mapped[str] = mapped_column(String(2048), nullable=False, index=True)
    short_code: Mapped[str] = mapped_column(String(CODE_LENGTH), unique=True, index=True, nullable=False)

    clicks: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"), nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
