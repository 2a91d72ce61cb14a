from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from shorturlapi.core.errors import CapacityError, ConflictError, NotFoundError, ValidationError
from shorturlapi.core.link_rules import as_utc, expiry_errors, url_errors, utcnow
from shorturlapi.services.code_generator import CodeGenerator, generate_code
from shorturlapi.services.store import ShortUrlRecord, UrlStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class ShorteningService:
    """
    Allocates short codes for long URLs.

    A URL that already has an unexpired record is answered with that record
    (its own expiry and clicks included; a new `expires_at` is ignored).
    Otherwise fresh codes are tried against the store until one is accepted
    or `max_attempts` is used up.
    """

    def __init__(
        self,
        store: UrlStore,
        generate: CodeGenerator = generate_code,
        clock: Callable[[], datetime] = utcnow,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self._generate = generate
        self._clock = clock
        self._max_attempts = max_attempts

    def shorten(
        self,
        original_url: str,
        expires_at: Optional[datetime] = None,
    ) -> tuple[ShortUrlRecord, bool]:
        now = self._clock()
        errors: dict[str, list[str]] = {}
        url_problems = url_errors(original_url)
        if url_problems:
            errors["url"] = url_problems
        expiry_problems = expiry_errors(expires_at, now)
        if expiry_problems:
            errors["expires_at"] = expiry_problems
        if errors:
            raise ValidationError(errors)

        try:
            existing = self.store.find_by_original_url(original_url, active_at=now)
        except NotFoundError:
            pass
        else:
            logger.info("short URL already existed: '%s' for URL: %s", existing.short_code, original_url[:50])
            return existing, False

        record = self._create_with_fresh_code(original_url, as_utc(expires_at))
        logger.info("created short URL '%s' for URL: %s", record.short_code, original_url[:50])
        return record, True

    def _create_with_fresh_code(self, original_url: str, expires_at: Optional[datetime]) -> ShortUrlRecord:
        for attempt in range(1, self._max_attempts + 1):
            code = self._generate()
            try:
                return self.store.create(original_url, code, expires_at)
            except ConflictError:
                logger.info("Short code collision on attempt %d/%d", attempt, self._max_attempts)

        logger.error("No free short code after %d attempts", self._max_attempts)
        raise CapacityError(f"Failed to generate unique short code after {self._max_attempts} attempts")

    def update(self, id: str, fields: Mapping[str, Any]) -> ShortUrlRecord:
        """Validated edit of `original_url` and/or `expires_at` (None clears the expiry)."""
        self.store.find_by_id(id)

        now = self._clock()
        errors: dict[str, list[str]] = {}
        if "original_url" in fields:
            url_problems = url_errors(fields["original_url"], field="original_url")
            if url_problems:
                errors["original_url"] = url_problems
        if "expires_at" in fields:
            expiry_problems = expiry_errors(fields["expires_at"], now)
            if expiry_problems:
                errors["expires_at"] = expiry_problems
        if errors:
            raise ValidationError(errors)

        return self.store.update(id, fields)
