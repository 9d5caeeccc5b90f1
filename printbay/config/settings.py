import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from printbay import __version__

# ─────────────────────────────────────────────
# Load .env explicitly with fallback search
# ─────────────────────────────────────────────
env_path = os.path.join(os.path.dirname(__file__), "..", ".env")
if not os.path.exists(env_path):
    env_path = os.path.join(os.path.dirname(__file__), "../..", ".env")
load_dotenv(dotenv_path=env_path)

# Values shipped in .env templates that mean "not filled in yet"
PLACEHOLDER_MARKERS = ("your_", "your-", "_here")


def is_configured(value: Optional[str]) -> bool:
    """True when a credential is present and is not a template placeholder."""
    v = (value or "").strip()
    if not v:
        return False
    lowered = v.lower()
    return not any(marker in lowered for marker in PLACEHOLDER_MARKERS)


class Settings(BaseSettings):
    """
    Centralized app configuration (Pydantic v2).

    Notes:
    - Every vendor integration is optional. Missing or placeholder credentials
      put that integration in mock mode for the life of the process.
    - The database can be given as a full DATABASE_URL or as the four
      AZURE_SQL_* parts (an mssql+aioodbc URL is built from them).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # ────────────────
    # ENVIRONMENT
    # ────────────────
    env: str = Field(default="development", alias="ENV")
    app_version: str = Field(default=__version__, alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # ────────────────
    # UPLOADS
    # ────────────────
    upload_dir_raw: str = Field(default="./uploads", alias="UPLOAD_DIR")
    max_upload_bytes: int = Field(default=50 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    @property
    def UPLOAD_DIR(self) -> str:
        return str(Path(self.upload_dir_raw).resolve())

    # ────────────────
    # BLOB STORAGE
    # ────────────────
    azure_storage_connection_string: str = Field(default="", alias="AZURE_STORAGE_CONNECTION_STRING")
    azure_storage_container_name: str = Field(default="customer-files", alias="AZURE_STORAGE_CONTAINER_NAME")

    @property
    def storage_configured(self) -> bool:
        return is_configured(self.azure_storage_connection_string)

    # ────────────────
    # DATABASE
    # ────────────────
    database_url: str = Field(default="", alias="DATABASE_URL")
    azure_sql_server: str = Field(default="", alias="AZURE_SQL_SERVER")
    azure_sql_database: str = Field(default="", alias="AZURE_SQL_DATABASE")
    azure_sql_user: str = Field(default="", alias="AZURE_SQL_USER")
    azure_sql_password: str = Field(default="", alias="AZURE_SQL_PASSWORD")
    azure_sql_odbc_driver: str = Field(default="ODBC Driver 18 for SQL Server", alias="AZURE_SQL_ODBC_DRIVER")

    @property
    def resolved_database_url(self) -> Optional[str]:
        """
        DATABASE_URL wins when set. Otherwise all four AZURE_SQL_* parts must be
        present; a single missing or placeholder part means "no database".
        """
        if is_configured(self.database_url):
            return self.database_url.strip()
        parts = (
            self.azure_sql_server,
            self.azure_sql_database,
            self.azure_sql_user,
            self.azure_sql_password,
        )
        if not all(is_configured(p) for p in parts):
            return None
        url = URL.create(
            "mssql+aioodbc",
            username=self.azure_sql_user,
            password=self.azure_sql_password,
            host=self.azure_sql_server,
            port=1433,
            database=self.azure_sql_database,
            query={
                "driver": self.azure_sql_odbc_driver,
                "Encrypt": "yes",
                "TrustServerCertificate": "no",
            },
        )
        return url.render_as_string(hide_password=False)

    @property
    def database_configured(self) -> bool:
        return self.resolved_database_url is not None

    # ────────────────
    # STRIPE
    # ────────────────
    stripe_secret_key: str = Field(default="", alias="STRIPE_SECRET_KEY")

    @property
    def stripe_configured(self) -> bool:
        return is_configured(self.stripe_secret_key)

    # ────────────────
    # SENDGRID
    # ────────────────
    sendgrid_api_key: str = Field(default="", alias="SENDGRID_API_KEY")
    sendgrid_from_email: str = Field(default="noreply@theprintedbay.com", alias="SENDGRID_FROM_EMAIL")
    sendgrid_base_url: str = Field(default="https://api.sendgrid.com", alias="SENDGRID_BASE_URL")

    @property
    def sendgrid_configured(self) -> bool:
        return is_configured(self.sendgrid_api_key)

    # ────────────────
    # SHIPPO
    # ────────────────
    shippo_api_key: str = Field(default="", alias="SHIPPO_API_KEY")
    shippo_base_url: str = Field(default="https://api.goshippo.com", alias="SHIPPO_BASE_URL")

    ship_from_name: str = Field(default="The Printed Bay", alias="SHIP_FROM_NAME")
    ship_from_company: str = Field(default="The Printed Bay LLC", alias="SHIP_FROM_COMPANY")
    ship_from_street1: str = Field(default="123 Maker Street", alias="SHIP_FROM_STREET1")
    ship_from_city: str = Field(default="Austin", alias="SHIP_FROM_CITY")
    ship_from_state: str = Field(default="TX", alias="SHIP_FROM_STATE")
    ship_from_zip: str = Field(default="78701", alias="SHIP_FROM_ZIP")
    ship_from_country: str = Field(default="US", alias="SHIP_FROM_COUNTRY")
    ship_from_phone: str = Field(default="555-0123", alias="SHIP_FROM_PHONE")
    ship_from_email: str = Field(default="orders@theprintedbay.com", alias="SHIP_FROM_EMAIL")

    @property
    def shippo_configured(self) -> bool:
        return is_configured(self.shippo_api_key)

    @property
    def ship_from_address(self) -> dict:
        return {
            "name": self.ship_from_name,
            "company": self.ship_from_company,
            "street1": self.ship_from_street1,
            "city": self.ship_from_city,
            "state": self.ship_from_state,
            "zip": self.ship_from_zip,
            "country": self.ship_from_country,
            "phone": self.ship_from_phone,
            "email": self.ship_from_email,
        }

    vendor_timeout_seconds: float = Field(default=30.0, alias="VENDOR_TIMEOUT_SECONDS")

    # ────────────────
    # CORS
    # ────────────────
    cors_origins_raw: str = Field(default="*", alias="CORS_ORIGINS")
    cors_origins: List[str] = []

    @model_validator(mode="after")
    def parse_cors_origins(self) -> "Settings":
        raw = (self.cors_origins_raw or "").strip()
        if raw:
            self.cors_origins = [o.strip() for o in raw.split(",") if o.strip()]
        else:
            self.cors_origins = ["*"]
        return self

    # ────────────────
    # CLIENT (file cache + simulation fallback)
    # ────────────────
    file_cache_url: str = Field(default="sqlite+aiosqlite:///./file_cache.db", alias="FILE_CACHE_URL")
    file_cache_max_age_hours: float = Field(default=7 * 24, alias="FILE_CACHE_MAX_AGE_HOURS")
    file_cache_recency_hours: float = Field(default=24, alias="FILE_CACHE_RECENCY_HOURS")

    api_base_url: str = Field(default="http://localhost:8000/api", alias="PRINTBAY_API_URL")
    simulation_fallback: bool = Field(default=True, alias="ENABLE_SIMULATION_FALLBACK")
    simulation_delay_scale: float = Field(default=1.0, alias="SIMULATION_DELAY_SCALE")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

__all__ = ["settings", "Settings", "get_settings", "is_configured"]
