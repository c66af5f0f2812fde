"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from stemlearn.app import LearningApp
from stemlearn.auth.session import MemoryCredentialStore
from stemlearn.config import Settings, get_settings
from stemlearn.database import Database
from stemlearn.store import users
from stemlearn.store.schemas import User


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_path=str(tmp_path / "stem_learning.db"),
        keyring_service="stem-learning-test",
        log_level="WARNING",
    )


@pytest.fixture
def credentials() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def app(settings, credentials, clock) -> AsyncGenerator[LearningApp, None]:
    """Initialized app over a fresh file-backed store."""
    learning_app = LearningApp(settings=settings, credentials=credentials, clock=clock)
    await learning_app.initialize()
    yield learning_app
    await learning_app.close()


@pytest.fixture
def database(app: LearningApp) -> Database:
    return app.database


async def make_user(
    database: Database,
    email: str = "ada@example.com",
    name: str = "Ada",
    gender: str = "female",
) -> User:
    """Insert a user straight through the store: xp 0, level 1, no streak."""
    async with database.session() as db:
        user = await users.insert_user(
            db,
            name=name,
            email=email,
            username=email.split("@")[0],
            password_hash="$argon2id$placeholder",
            age=14,
            gender=gender,
            education_level="form1",
            avatar_id="avatar-1",
            theme="light",
            theme_color=users.theme_color_for_gender(gender),
        )
        await db.commit()
    return user


@pytest_asyncio.fixture
async def user(database: Database) -> User:
    return await make_user(database)


@pytest.fixture
def user_factory(database: Database):
    async def _make(email: str, name: str = "Learner", gender: str = "male") -> User:
        return await make_user(database, email=email, name=name, gender=gender)

    return _make
