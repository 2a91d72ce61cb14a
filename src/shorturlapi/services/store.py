from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from shorturlapi.core.errors import ConflictError, NotFoundError
from shorturlapi.core.link_rules import as_utc, is_expired, utcnow
from shorturlapi.db.models import ShortUrl

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"original_url", "expires_at"})

_ORDERINGS = {
    "created_desc": (ShortUrl.created_at.desc(), ShortUrl.id.desc()),
    "created_asc": (ShortUrl.created_at.asc(), ShortUrl.id.asc()),
}


@dataclass(frozen=True)
class ShortUrlRecord:
    id: str
    original_url: str
    short_code: str
    clicks: int
    expires_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return is_expired(self.expires_at, now)


def _to_record(row: ShortUrl) -> ShortUrlRecord:
    # SQLite hands datetimes back without tzinfo
    return ShortUrlRecord(
        id=row.id,
        original_url=row.original_url,
        short_code=row.short_code,
        clicks=row.clicks,
        expires_at=as_utc(row.expires_at),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class UrlStore:
    """
    Persistent short_code -> record mapping.

    Every call opens its own session and commits before returning, so calls
    from concurrent workers are independent short transactions. Code
    uniqueness comes from the unique index on short_urls.short_code.
    """

    def __init__(self, session_factory: sessionmaker, clock: Callable[[], datetime] = utcnow):
        self._session_factory = session_factory
        self._clock = clock

    def create(
        self,
        original_url: str,
        short_code: str,
        expires_at: Optional[datetime] = None,
    ) -> ShortUrlRecord:
        now = self._clock()
        row = ShortUrl(
            original_url=original_url,
            short_code=short_code,
            clicks=0,
            expires_at=as_utc(expires_at),
            created_at=now,
            updated_at=now,
        )
        with self._session_factory() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.info("short_code=%s already taken: %s", short_code, e.orig)
                raise ConflictError(f"Short code '{short_code}' already exists") from e
            return _to_record(row)

    def find_by_id(self, id: str) -> ShortUrlRecord:
        with self._session_factory() as session:
            row = session.get(ShortUrl, id)
            if row is None:
                raise NotFoundError()
            return _to_record(row)

    def find_by_code(self, code: str) -> ShortUrlRecord:
        with self._session_factory() as session:
            row = session.scalars(select(ShortUrl).where(ShortUrl.short_code == code)).first()
            if row is None:
                raise NotFoundError()
            return _to_record(row)

    def find_by_original_url(self, url: str, active_at: Optional[datetime] = None) -> ShortUrlRecord:
        """
        Most recent record pointing at `url`. With `active_at`, records whose
        expiry is at or before that instant are skipped.
        """
        stmt = select(ShortUrl).where(ShortUrl.original_url == url)
        if active_at is not None:
            stmt = stmt.where(or_(ShortUrl.expires_at.is_(None), ShortUrl.expires_at > as_utc(active_at)))
        stmt = stmt.order_by(*_ORDERINGS["created_desc"])

        with self._session_factory() as session:
            row = session.scalars(stmt).first()
            if row is None:
                raise NotFoundError()
            return _to_record(row)

    def increment_clicks(self, id: str) -> None:
        # single UPDATE so the database serializes concurrent increments
        stmt = (
            update(ShortUrl)
            .where(ShortUrl.id == id)
            .values(clicks=ShortUrl.clicks + 1, updated_at=self._clock())
        )
        with self._session_factory() as session, session.begin():
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError()

    def update(self, id: str, fields: Mapping[str, Any]) -> ShortUrlRecord:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        with self._session_factory() as session:
            row = session.get(ShortUrl, id)
            if row is None:
                raise NotFoundError()
            if "original_url" in fields:
                row.original_url = fields["original_url"]
            if "expires_at" in fields:
                row.expires_at = as_utc(fields["expires_at"])
            row.updated_at = self._clock()
            session.commit()
            return _to_record(row)

    def delete(self, id: str) -> None:
        with self._session_factory() as session:
            row = session.get(ShortUrl, id)
            if row is None:
                raise NotFoundError()
            session.delete(row)
            session.commit()

    def list_all(self, order: str = "created_desc") -> list[ShortUrlRecord]:
        if order not in _ORDERINGS:
            raise ValueError(f"Unknown order: {order}")
        with self._session_factory() as session:
            rows = session.scalars(select(ShortUrl).order_by(*_ORDERINGS[order])).all()
            return [_to_record(row) for row in rows]
