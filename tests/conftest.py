from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from shorturlapi.core.config import Settings
from shorturlapi.db.base import Base
from shorturlapi.db.session import make_engine, make_session_factory
from shorturlapi.main import create_app
from shorturlapi.services.resolver import Resolver
from shorturlapi.services.shortener import ShorteningService
from shorturlapi.services.store import UrlStore


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        base_url="http://sho.rt/",
    )


@pytest.fixture
def client(settings) -> TestClient:
    # entering the client runs the lifespan, which creates the tables
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'store.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine, clock) -> UrlStore:
    return UrlStore(make_session_factory(engine), clock=clock)


@pytest.fixture
def shortener(store, clock) -> ShorteningService:
    return ShorteningService(store, clock=clock)


@pytest.fixture
def resolver(store, clock) -> Resolver:
    return Resolver(store, clock=clock)
