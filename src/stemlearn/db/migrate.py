"""Version-gated migration runner.

Every step lives in ``stemlearn.db.migrations.vNNN_*`` and exposes
``revision`` and ``async upgrade(conn)``. Steps are applied in ascending
order, each in its own transaction; a failing step is logged and skipped so
a rerun is always safe. Released steps are never renumbered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import ModuleType

import structlog
from sqlalchemy import delete, insert
from sqlalchemy.ext.asyncio import AsyncEngine

from stemlearn.db.migrations import (
    v004_auth_columns,
    v005_education_level,
    v006_order_column_reset,
    v007_theme_color,
    v008_education_level_format,
    v009_notifications,
    v010_streak_active_seconds,
    v011_unique_indexes,
    v012_hash_legacy_passwords,
)
from stemlearn.db.models import DatabaseVersion
from stemlearn.db.schema import recorded_version

logger = structlog.get_logger()

STEPS: tuple[ModuleType, ...] = (
    v004_auth_columns,
    v005_education_level,
    v006_order_column_reset,
    v007_theme_color,
    v008_education_level_format,
    v009_notifications,
    v010_streak_active_seconds,
    v011_unique_indexes,
    v012_hash_legacy_passwords,
)

CURRENT_VERSION = STEPS[-1].revision


@dataclass
class MigrationReport:
    from_version: int
    to_version: int
    applied: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)


async def read_version(engine: AsyncEngine) -> int:
    async with engine.connect() as conn:
        return await recorded_version(conn)


async def write_version(engine: AsyncEngine, version: int) -> None:
    """Replace the version table contents with a single row."""
    async with engine.begin() as conn:
        await conn.execute(delete(DatabaseVersion))
        await conn.execute(insert(DatabaseVersion).values(version=version))


async def run_migrations(engine: AsyncEngine, target: int = CURRENT_VERSION) -> MigrationReport:
    """Bring the store from its recorded version up to ``target``."""
    current = await read_version(engine)
    report = MigrationReport(from_version=current, to_version=max(current, target))
    if current >= target:
        logger.info("migrations_up_to_date", version=current)
        return report

    logger.info("migrations_started", from_version=current, to_version=target)
    for step in STEPS:
        if step.revision <= current or step.revision > target:
            continue
        try:
            async with engine.begin() as conn:
                await step.upgrade(conn)
        except Exception as exc:  # noqa: BLE001
            report.skipped.append(step.revision)
            logger.warning(
                "migration_step_skipped",
                revision=step.revision,
                description=step.description,
                error=str(exc),
            )
            continue
        report.applied.append(step.revision)
        logger.info("migration_step_applied", revision=step.revision, description=step.description)

    await write_version(engine, target)
    logger.info("migrations_finished", version=target, applied=report.applied, skipped=report.skipped)
    return report
