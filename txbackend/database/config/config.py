"""
Configuration: Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed configuration for the database layer and the
transaction managers built on top of it:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- Every field has a default, so importing the package never requires an
  environment (tests and local runs fall back to a SQLite file).
- `extra="ignore"`: unknown env vars are ignored (not an error).

Usage
-----
from txbackend.database.config.config import settings

# Example
pool_size = settings.DB_POOL_SIZE
manager_name = settings.DEFAULT_MANAGER_NAME

Security
--------
- Never commit secrets or the `.env` file to source control.
- Prefer runtime environment variables in production (K8s/Secrets Manager/etc.).
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Database and transaction-management settings loaded from environment
    variables or a `.env` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DB_DRIVER_NAME: str = Field("sqlite", description="SQLAlchemy driver name (e.g., `sqlite`, `postgresql+psycopg2`).")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field(None, description="Hostname or IP address of the database server.")
    DB_PORT: Optional[int] = Field(None, description="Port of the database server.")
    DB_DATABASE_NAME: str = Field("txbackend.db", description="Name of the database (file path for SQLite).")
    DB_POOL_SIZE: int = Field(5, ge=1, description="Number of connections kept in the pool.")
    DB_MAX_OVERFLOW: int = Field(0, ge=0, description="Connections allowed beyond `DB_POOL_SIZE`.")
    DB_POOL_TIMEOUT: float = Field(30.0, gt=0, description="Seconds to wait for a pooled connection before giving up.")
    DEFAULT_MANAGER_NAME: str = Field("transactionManager", description="Name the default transaction manager is registered under.")
    PASSWORD_HASH_ROUNDS: int = Field(12, description="bcrypt work factor used for new password hashes.")
    LOG_LEVEL: str = Field("INFO", description="Root logging level applied at application startup.")
    FRONTEND_URL: str = Field("http://localhost:5173", description="Allowed CORS origin of the frontend client.")


# Singleton instance of Settings, ready to be imported across the app
settings = Settings()
"""Settings object holding the environment / `.env` configuration."""
