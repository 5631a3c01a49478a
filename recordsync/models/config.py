"""Configuration models for the record synchronization system."""

from enum import Enum

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeletedRecordPolicy(str, Enum):
    """What the change poller does when a previously synced record is gone."""

    SKIP = "skip"
    TOMBSTONE = "tombstone"
    ERROR = "error"


class SyncConfig(BaseModel):
    """Configuration for the full sync and polling phases."""

    page_size: int = Field(default=1, ge=1, description="Records fetched and delivered per page")
    poll_rounds: int = Field(default=10, ge=0, description="Number of change polling rounds")
    poll_interval_ms: int = Field(
        default=5000, ge=0, description="Delay between polling rounds in milliseconds"
    )
    settle_delay_ms: int = Field(
        default=5000, ge=0, description="Delay between full sync and polling in milliseconds"
    )
    deleted_record_policy: DeletedRecordPolicy = Field(
        default=DeletedRecordPolicy.SKIP,
        description="Handling of records deleted upstream (skip, tombstone, error)",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        description="If True, output JSON logs. If False, use console format.",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional path to log file. If None, logs only to stdout.",
    )


class AppConfig(BaseSettings):
    """Main application configuration.

    This class uses pydantic-settings to load configuration from environment
    variables with the APP_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
