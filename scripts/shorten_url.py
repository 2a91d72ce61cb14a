"""
Dev utility: shorten a URL or resolve a short code against the configured database.

    python scripts/shorten_url.py shorten https://example.com/some/long/path --expires-in 3600
    python scripts/shorten_url.py resolve Ab3dEf9Z

Resolving counts a click, exactly like GET /{code}.
"""

import argparse
import sys
from datetime import timedelta

from shorturlapi.core.config import get_settings
from shorturlapi.core.errors import ShortUrlError, ValidationError
from shorturlapi.core.link_rules import utcnow
from shorturlapi.db.base import Base
from shorturlapi.db import models  # noqa: F401
from shorturlapi.db.session import make_engine, make_session_factory
from shorturlapi.schemas.urls import build_short_url
from shorturlapi.services.resolver import Resolver
from shorturlapi.services.shortener import ShorteningService
from shorturlapi.services.store import UrlStore


def main() -> int:
    parser = argparse.ArgumentParser()
    sub = parser.add_subparsers(dest="command", required=True)

    shorten = sub.add_parser("shorten")
    shorten.add_argument("url")
    shorten.add_argument("--expires-in", type=int, default=None, help="seconds until the link expires")

    resolve = sub.add_parser("resolve")
    resolve.add_argument("code")

    args = parser.parse_args()

    settings = get_settings()
    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    store = UrlStore(make_session_factory(engine))

    try:
        if args.command == "shorten":
            expires_at = None
            if args.expires_in is not None:
                expires_at = utcnow() + timedelta(seconds=args.expires_in)
            service = ShorteningService(store, max_attempts=settings.max_code_attempts)
            record, created = service.shorten(args.url, expires_at)
            print("created" if created else "already existed")
            print(record.short_code)
            print(build_short_url(settings.base_url, record.short_code))
        else:
            print(Resolver(store).resolve(args.code))
    except ValidationError as e:
        for field, messages in e.errors.items():
            for message in messages:
                print(f"{field}: {message}", file=sys.stderr)
        return 1
    except ShortUrlError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        engine.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())
