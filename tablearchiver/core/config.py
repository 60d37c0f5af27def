"""Pydantic-settings configuration for the Table Archiver.

Loads MySQL connection parameters and archiver defaults from the .env file
with sensible defaults for local development. A computed field produces the
fully-formed SQLAlchemy connection URL.
"""

from urllib.parse import quote_plus

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Runtime
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # MySQL
    mysql_host: str = "localhost"
    mysql_port: int = 3306
    mysql_db: str = "cliq"
    mysql_user: str = "archiver"
    mysql_password: str = ""

    # SQLAlchemy pool settings
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_pre_ping: bool = True
    db_connect_timeout: int = 10

    # Archiver defaults
    archiver_source_table: str = "messages"
    archiver_metadata_table: str = "archived_message_partitions"
    archiver_partition_prefix: str = "p"
    archiver_record_id_column: str = "message_id"
    archiver_timestamp_column: str = "created_at"

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Sync connection string for PyMySQL (used by the archiver and Alembic)."""
        return (
            f"mysql+pymysql://{quote_plus(self.mysql_user)}:{quote_plus(self.mysql_password)}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_db}?charset=utf8mb4"
        )


# Singleton instance
settings = Settings()
