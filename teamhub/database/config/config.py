"""
Configuration — Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed application configuration using:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- Missing required fields raise a validation error at import time.
- `extra="ignore"`: unknown env vars are ignored (not an error).
- `DATABASE_URL`, when set, wins over the individual `DB_*` parts.

Usage
-----
from teamhub.database.config.config import settings

# Example
secret = settings.SECRET_KEY
bucket = settings.BUCKET_NAME

Security
--------
- Never commit secrets or the `.env` file to source control.
- Prefer runtime environment variables in production (K8s/Secrets Manager/etc.).
"""


from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    FRONTEND_URL: str = Field("http://localhost:5173", description="Base URL of the SPA allowed by CORS.")
    DATABASE_URL: str | None = Field(None, description="Full SQLAlchemy URL; overrides the DB_* parts when set.")
    DB_DRIVER_NAME: str = Field("postgresql+psycopg2", description="Database driver (e.g., `postgresql+psycopg2`, `sqlite`).")
    DB_USERNAME: str | None = Field(None, description="Database username credential.")
    DB_PASSWORD: str | None = Field(None, description="Database password credential.")
    DB_HOST: str | None = Field(None, description="Hostname or IP address of the database server.")
    DB_DATABASE_NAME: str | None = Field(None, description="Name of the application’s database.")
    SECRET_KEY: str = Field(..., description="Secret key for signing access tokens.")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm (e.g., `HS256`).")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24 * 7, description="Duration (in minutes) before access tokens expire.")
    SPACES_ENDPOINT: str = Field("", description="S3-compatible endpoint of the object storage (DigitalOcean Spaces).")
    SPACES_ACCESS_KEY: str = Field("", description="Object storage access key ID.")
    SPACES_SECRET_KEY: str = Field("", description="Object storage secret access key.")
    BUCKET_NAME: str = Field("", description="Bucket (Space) that receives uploaded images.")
    REGION: str = Field("nyc3", description="Object storage region name.")
    INIT_MODE: str = Field("runtime", description="`runtime` starts background jobs at startup; anything else skips them.")
    DEADLINE_CHECK_INTERVAL_SECONDS: int = Field(24 * 60 * 60, description="Seconds between two deadline sweeps.")

# Singleton instance of Settings, ready to be imported across the app
settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
