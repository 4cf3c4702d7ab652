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

Usage
-----
from saver_backend.database.config.config import settings

# Example
db_host = settings.DB_HOST
openai_model = settings.OPEN_AI_MODEL

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
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    FRONTEND_URL: str = Field(..., description="Base URL of the single-page frontend (allowed CORS origin).")
    PUBLIC_API_URL: str = Field(..., description="Public base URL of this API, used to build e-mail links.")

    DB_DRIVER_NAME: str = Field(..., description="Database driver (e.g., `postgresql+psycopg2`, `sqlite`).")
    DB_DATABASE_NAME: str = Field(..., description="Name of the application's database (file path for SQLite).")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field(None, description="Hostname or IP address of the database server.")

    SECRET_KEY: str = Field(..., description="Secret key for signing session tokens.")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm.")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(..., description="Duration (in minutes) before access tokens expire.")
    VERIFICATION_TOKEN_EXPIRE_MINUTES: int = Field(
        1440, description="Lifetime (in minutes) of e-mail verification and password-reset links."
    )
    COOKIE_SECURE: bool = Field(False, description="Set the `secure` flag on the session cookie (True in production).")

    API_KEY: str = Field(..., description="OpenAI API key used by the completion endpoint.")
    OPEN_AI_MODEL: str = Field("gpt-4o", description="OpenAI chat model name.")
    COMPLETION_MAX_TOKENS: int = Field(1000, description="Upper bound on generated tokens per completion.")
    COMPLETION_TEMPERATURE: float = Field(0.7, description="Sampling temperature of the completion model.")

    SENDER_EMAIL: str = Field(..., description="Address used as sender of transactional e-mails.")
    APP_PASSWORD: str = Field(..., description="SMTP password for the sender account.")
    SMTP_HOST: str = Field("smtp.gmail.com", description="SMTP relay host.")
    SMTP_PORT: int = Field(587, description="SMTP relay port (STARTTLS).")

    AWS_ACCESS_KEY: str = Field(..., description="AWS access key ID.")
    AWS_SECRET_KEY: str = Field(..., description="AWS secret access key.")
    BUCKET_NAME: str = Field(..., description="S3 bucket holding uploaded chat files.")
    REGION: str = Field(..., description="AWS region name (e.g., `eu-central-1`).")

    FREE_TIER_CASE_LIMIT: int = Field(1, description="Number of cases a caller without an active subscription may open.")


# Singleton instance of Settings, ready to be imported across the app
settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
