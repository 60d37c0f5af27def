"""Alembic environment configuration for MySQL + SQLAlchemy 2.0.

Only the archiver's own tables are managed here. Partitioned source tables
and the archive tables created at runtime are excluded from autogenerate so
that revisions never try to drop them.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from tablearchiver.core.config import settings
from tablearchiver.core.models import Base

# Alembic Config object -- provides access to .ini values
config = context.config

# Set up Python logging from the config file
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# The URL always comes from application settings, never from alembic.ini
config.set_main_option("sqlalchemy.url", settings.sync_database_url.replace("%", "%%"))

# Target metadata for autogenerate support
target_metadata = Base.metadata

# ---------------------------------------------------------------------------
# Table filtering
# ---------------------------------------------------------------------------
_MANAGED_TABLES = set(target_metadata.tables)


def include_name(name, type_, parent_names):
    """Restrict autogenerate reflection to tables declared in the models."""
    if type_ == "table":
        return name in _MANAGED_TABLES
    return True


# ---------------------------------------------------------------------------
# Migration runners
# ---------------------------------------------------------------------------


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL to stdout)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_name=include_name,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode (connect to database)."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_name=include_name,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
