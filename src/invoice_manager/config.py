"""Application settings, read from ``INVM_*`` environment variables or ``.env``.

Examples:
    INVM_SQLITE_PATH=/var/lib/invoices/invoices.db
    INVM_LOG_FORMAT=json
    INVM_INVOICE_PREFIX=BILL
    INVM_SEED_INTERVAL_HOURS=6
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from invoice_manager.domain.value_objects import DocumentKind


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class Settings(BaseSettings):
    """Invoice Manager settings.

    Defaults suit a local single-user install; production deployments
    usually set ``INVM_ENVIRONMENT=production`` (JSON logs) and a
    persistent ``INVM_SQLITE_PATH``.
    """

    model_config = SettingsConfigDict(
        env_prefix="INVM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Invoice Manager"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    sqlite_path: Path = Field(
        default=Path("invoice_manager.db"), description="SQLite database file"
    )

    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] | None = Field(
        default=None, description="Defaults to json in production, else console"
    )
    log_file: Path | None = None

    api_host: str = "127.0.0.1"
    api_port: int = Field(default=8000, ge=1, le=65535)

    # Document numbering: "<prefix>-<zero padded sequence>"
    invoice_prefix: str = Field(default="INV", pattern=r"^[A-Za-z0-9]+$")
    receipt_prefix: str = Field(default="RCP", pattern=r"^[A-Za-z0-9]+$")
    default_payment_method: Literal["cash", "card", "transfer", "check"] = "cash"

    # Demo data reseeding
    seed_products: int = Field(default=15, ge=0)
    seed_invoices: int = Field(default=12, ge=0)
    seed_receipts: int = Field(default=15, ge=0)
    seed_interval_hours: float = Field(default=1.0, gt=0)
    seed_max_retries: int = Field(default=3, ge=1)
    seed_retry_delay_seconds: float = Field(default=5.0, ge=0)

    @field_validator("invoice_prefix", "receipt_prefix")
    @classmethod
    def upper_case_prefix(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def apply_environment_defaults(self) -> "Settings":
        if self.log_format is None:
            self.log_format = (
                "json" if self.environment == Environment.PRODUCTION else "console"
            )
        if self.invoice_prefix == self.receipt_prefix:
            raise ValueError("invoice_prefix and receipt_prefix must differ")
        return self

    @property
    def seed_interval_seconds(self) -> float:
        return self.seed_interval_hours * 3600

    def prefix_for(self, kind: DocumentKind) -> str:
        """Number prefix used for documents of ``kind``."""
        if DocumentKind(kind) == DocumentKind.INVOICE:
            return self.invoice_prefix
        return self.receipt_prefix


@lru_cache
def get_settings() -> Settings:
    """Load settings once; call ``get_settings.cache_clear()`` to reload."""
    return Settings()
