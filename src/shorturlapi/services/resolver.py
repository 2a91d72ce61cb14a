from __future__ import annotations
import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from shorturlapi.core.errors import ExpiredError, NotFoundError
from shorturlapi.core.link_rules import utcnow
from shorturlapi.services.store import UrlStore

logger = logging.getLogger(__name__)


class Resolver:
    def __init__(self, store: UrlStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self._clock = clock

    def resolve(self, code: str) -> str:
        """
        Target URL for `code`, counting one click.

        Raises NotFoundError for unknown codes and ExpiredError once the
        record's expiry has passed; expired records are left untouched.
        A failed click increment is logged and does not fail the lookup.
        """
        record = self.store.find_by_code(code)

        if record.is_expired(self._clock()):
            raise ExpiredError()

        try:
            self.store.increment_clicks(record.id)
        except NotFoundError:
            logger.warning("short URL '%s' deleted before its click was counted", code)
        except SQLAlchemyError:
            logger.exception("Failed to count click for short URL '%s'", code)

        return record.original_url
