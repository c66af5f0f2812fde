"""Destructive reset gating for stores that cannot be migrated."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import text

from stemlearn.app import LearningApp
from stemlearn.auth.session import MemoryCredentialStore
from stemlearn.config import Settings
from stemlearn.database import Database
from stemlearn.db.schema import SIDECAR_SUFFIXES, probe_store, reset_if_incompatible, reset_store
from stemlearn.errors import StoreInitializationError

pytestmark = pytest.mark.asyncio


async def write_store(path: Path, order_column: str, version: int) -> None:
    database = Database(path)
    database.connect()
    async with database.engine.begin() as conn:
        await conn.execute(
            text(f'CREATE TABLE subjects (id TEXT PRIMARY KEY, name TEXT NOT NULL, "{order_column}" INTEGER)')
        )
        await conn.execute(
            text(
                "CREATE TABLE users (id TEXT PRIMARY KEY, name TEXT NOT NULL, age INTEGER NOT NULL, "
                "gender TEXT NOT NULL, avatarId TEXT NOT NULL, createdAt TEXT NOT NULL, lastActive TEXT NOT NULL)"
            )
        )
        await conn.execute(
            text(
                "INSERT INTO users VALUES ('old-user', 'Old', 12, 'male', 'avatar-1', "
                "'2023-01-01T00:00:00.000Z', '2023-01-01T00:00:00.000Z')"
            )
        )
        await conn.execute(text("CREATE TABLE database_version (version INTEGER PRIMARY KEY)"))
        await conn.execute(text("INSERT INTO database_version VALUES (:v)"), {"v": version})
    await database.dispose()


class TestProbe:
    async def test_missing_file_left_alone(self, tmp_path):
        probe = await probe_store(tmp_path / "absent.db")
        assert not probe.exists
        assert not probe.needs_reset

    async def test_empty_file_left_alone(self, tmp_path):
        path = tmp_path / "empty.db"
        path.touch()
        assert await reset_if_incompatible(path) is False
        assert path.exists()

    async def test_backticked_order_column_below_threshold(self, tmp_path):
        path = tmp_path / "quoted.db"
        await write_store(path, "`order`", version=3)
        probe = await probe_store(path)
        assert probe.quoted_order_column
        assert probe.version == 3
        assert probe.needs_reset

    async def test_plain_order_column_is_fine(self, tmp_path):
        path = tmp_path / "plain.db"
        await write_store(path, "order", version=3)
        assert not (await probe_store(path)).needs_reset

    async def test_marker_ignored_at_migratable_version(self, tmp_path):
        path = tmp_path / "quoted-new.db"
        await write_store(path, "`order`", version=6)
        assert await reset_if_incompatible(path) is False
        assert path.exists()

    async def test_corrupt_file_needs_reset(self, tmp_path):
        path = tmp_path / "corrupt.db"
        path.write_bytes(b"definitely not sqlite " * 64)
        probe = await probe_store(path)
        assert probe.probe_failed
        assert probe.needs_reset


class TestReset:
    async def test_incompatible_store_wiped_on_initialize(self, tmp_path):
        path = tmp_path / "quoted.db"
        await write_store(path, "`order`", version=3)

        app = LearningApp(settings=Settings(database_path=str(path)), credentials=MemoryCredentialStore())
        await app.initialize()
        try:
            assert await app.get_user("old-user") is None
            assert len(await app.list_subjects()) == 4
        finally:
            await app.close()

    async def test_corrupt_store_recovered_on_initialize(self, tmp_path):
        path = tmp_path / "corrupt.db"
        path.write_bytes(b"definitely not sqlite " * 64)

        app = LearningApp(settings=Settings(database_path=str(path)), credentials=MemoryCredentialStore())
        await app.initialize()
        try:
            assert app.initialized
            assert len(await app.list_badges()) == 2
        finally:
            await app.close()

    async def test_sidecar_files_removed(self, tmp_path):
        path = tmp_path / "store.db"
        path.write_bytes(b"x")
        sidecars = [tmp_path / f"store.db{suffix}" for suffix in SIDECAR_SUFFIXES]
        for sidecar in sidecars:
            sidecar.write_bytes(b"x")

        reset_store(path)

        assert not path.exists()
        assert not any(sidecar.exists() for sidecar in sidecars)

    async def test_unlink_failure_is_fatal(self, tmp_path, monkeypatch):
        path = tmp_path / "locked.db"
        path.write_bytes(b"x")

        def refuse(self, missing_ok=False):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "unlink", refuse)
        with pytest.raises(StoreInitializationError):
            reset_store(path)
