import os
import tempfile
from datetime import datetime
from pathlib import Path

_tmpdir = Path(tempfile.mkdtemp(prefix="bizboost_test_"))
_db_path = _tmpdir / "test.db"

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_db_path.as_posix()}")
os.environ.setdefault("LOG_DIR", (_tmpdir / "logs").as_posix())
os.environ.setdefault("SEED_SAMPLE_DATA", "false")
os.environ.setdefault("LOCAL_USER_ID", "demo-user-123")

import pytest
from fastapi.testclient import TestClient

from bizboost.core.config import Settings
from bizboost.db.session import EntityStore
from bizboost.main import create_app
from bizboost.services.captcha import ChallengeService
from bizboost.services.directory import Directory

T0 = datetime(2026, 10, 19, 12, 0, 0)


class FixedGenerator:
    """Deterministic challenges: question n, answer str(n)."""

    def __init__(self) -> None:
        self.n = 0

    def generate(self) -> tuple[str, str]:
        self.n += 1
        return f"What is {self.n} + 0?", str(self.n)


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def settings():
    return Settings(database_url=os.environ["DATABASE_URL"], seed_sample_data=False)


@pytest.fixture()
def store(settings):
    s = EntityStore(settings.database_url)
    s.drop_all()
    s.create_all()
    yield s
    s.drop_all()
    s.dispose()


@pytest.fixture()
def db(store):
    with store.session() as session:
        yield session


@pytest.fixture()
def clock():
    return Clock(T0)


@pytest.fixture()
def challenges():
    return ChallengeService(FixedGenerator())


@pytest.fixture()
def directory(store, challenges, settings, clock):
    return Directory(store, challenges, settings=settings, clock=clock)


@pytest.fixture()
def business(directory):
    return directory.create_business(
        name="Joe's Pizza",
        category="Food",
        description="Wood-fired pizza by the slice",
        address="123 Main St",
        phone="555-1000",
        website="joespizza.com",
    )


def solve(directory, session_id: str) -> str:
    return directory.challenges.active(session_id).expected_answer


def review_ok(directory, business_id, *, rating=5, comment="Great service here", user_id="demo-user-123"):
    captcha = directory.generate_captcha()
    return directory.create_review(
        business_id,
        user_id,
        rating,
        comment,
        session_id=captcha.session_id,
        captcha_answer=solve(directory, captcha.session_id),
    )


@pytest.fixture()
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        c.app.state.directory.store.drop_all()
        c.app.state.directory.store.create_all()
        yield c
        c.app.state.directory.store.drop_all()
