"""SQLAlchemy 2.0 DeclarativeBase shared by the archiver's own tables.

Only the metadata table is modelled here. Source and archive tables are
owned by the application being archived and are addressed by name.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Stable constraint names so Alembic autogenerate does not churn
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=convention)
