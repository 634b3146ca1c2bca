"""Configuration management using Pydantic Settings."""

import os
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    A single instance is built at process start (see ``create_app``) and
    handed to every component that needs it.
    """

    model_config = SettingsConfigDict(
        # Only load .env file in development (not Lambda/production)
        env_file=".env" if os.getenv("AWS_EXECUTION_ENV") is None else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # AWS Configuration
    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None  # Required for temporary credentials

    @field_validator(
        "aws_access_key_id", "aws_secret_access_key", "aws_session_token", mode="before"
    )
    @classmethod
    def convert_empty_string_to_none(cls, v):
        """Convert empty strings to None so boto3 can use IAM role in Lambda."""
        if v is None:
            return None
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    # Storage Configuration
    store_backend: Literal["dynamodb", "memory"] = "dynamodb"
    dynamodb_endpoint_url: str | None = None
    dynamodb_connect_timeout: float = 5.0
    dynamodb_read_timeout: float = 10.0
    dynamodb_table_admin_keys: str = "dev-admin-keys"
    dynamodb_table_audit_logs: str = "dev-external-user-creation-logs"
    dynamodb_table_users: str = "dev-users"

    # Application Configuration
    environment: str = "dev"
    log_level: str = "INFO"
    api_title: str = "Admin Key Service"
    api_version: str = "1.0.0"

    # Admin Keys
    legacy_admin_key: str = "admin_global_key_2024_secure_123"
    admin_key_prefix: str = "admin_key_"
    default_expires_in_days: int = 365
    quota_strategy: Literal["conditional", "unconditional"] = "conditional"

    # Audit Logs
    audit_retention_days: int = 365
    default_audit_page_size: int = 100
    max_audit_page_size: int = 500

    # API Limits
    max_request_size_bytes: int = 512 * 1024  # 512KB

    @field_validator("legacy_admin_key")
    @classmethod
    def legacy_key_not_blank(cls, v: str) -> str:
        """Reject a blank legacy key, which would match a missing credential."""
        if not v or not v.strip():
            raise ValueError("legacy_admin_key must not be empty")
        return v
