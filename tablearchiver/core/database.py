"""Database engine layer for the Table Archiver.

Provides the sync engine (PyMySQL) used by the archiver, the catalog and
Alembic. The archival workflow is blocking and runs on a single connection,
so no async engine is configured.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .config import settings

# ---------------------------------------------------------------------------
# Sync engine (archiver, catalog, Alembic -- PyMySQL)
# ---------------------------------------------------------------------------
sync_engine: Engine = create_engine(
    settings.sync_database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
    connect_args={"connect_timeout": settings.db_connect_timeout},
    echo=settings.debug,
)
