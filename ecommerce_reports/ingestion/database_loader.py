"""
Snapshot Database Loader

Reads the five source relations from the database tables defined in
``ecommerce_reports.database.models``.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecommerce_reports.config import get_settings
from ecommerce_reports.data.snapshot import RELATIONS, Snapshot
from ecommerce_reports.database.connection import snapshot_session
from ecommerce_reports.database.models import RELATION_TABLES
from .checks import run_quality_checks

logger = structlog.get_logger(__name__)


async def load_snapshot_from_session(
    session: AsyncSession,
    enable_validation: Optional[bool] = None,
) -> Snapshot:
    """
    Read every relation table through ``session`` and build the snapshot.

    Args:
        session: Open async session
        enable_validation: Run quality checks (default from settings)
    """
    records = {}
    for spec in RELATIONS:
        table = RELATION_TABLES[spec.name].__table__
        result = await session.execute(select(table))
        records[spec.name] = [dict(row) for row in result.mappings()]
        logger.debug("Read relation table", relation=spec.name, rows=len(records[spec.name]))

    snapshot = Snapshot.from_records(**records)

    if enable_validation is None:
        enable_validation = get_settings().data_quality.enable_data_quality_checks
    if enable_validation:
        run_quality_checks(snapshot)

    return snapshot


async def load_snapshot_from_database(enable_validation: Optional[bool] = None) -> Snapshot:
    """
    Load a snapshot over the initialized database connection.

    The relations are read in one read-only transaction.

    Example:
        await init_database()
        snapshot = await load_snapshot_from_database()
    """
    async with snapshot_session() as db:
        return await load_snapshot_from_session(db, enable_validation=enable_validation)
