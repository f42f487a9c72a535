"""
Application settings and configuration management using Pydantic Settings.
"""
from datetime import time

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="Table Reservation Engine", description="Application name")
    app_env: str = Field(default="development", description="Environment (development, staging, production)")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./reservations.db",
        description="Database connection URL"
    )
    database_echo: bool = Field(default=False, description="Log all SQL statements")

    # Slot grid (service day is expressed in UTC)
    service_open: time = Field(default=time(6, 30), description="First slot start (HH:MM)")
    service_close: time = Field(default=time(18, 30), description="Latest slot end (HH:MM)")
    slot_duration_minutes: int = Field(default=90, ge=1, description="Length of a bookable slot")
    slot_gap_minutes: int = Field(default=15, ge=0, description="Gap between consecutive slots")

    # Booking rules
    modification_cutoff_minutes: int = Field(
        default=30, ge=0, description="Edits are refused this close to the start time"
    )
    requested_time_tolerance_minutes: int = Field(
        default=15, ge=0, description="Closest-slot tolerance for availability queries"
    )
    conflict_boundary_inclusive: bool = Field(
        default=True,
        description="Treat reservations touching at an endpoint as overlapping"
    )

    # Tokens
    jwt_secret: str = Field(default="change-me-in-production", description="HS256 signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    feedback_token_ttl_minutes: int = Field(
        default=60 * 24 * 7, ge=1, description="Lifetime of anonymous feedback tokens"
    )
    feedback_base_url: str = Field(
        default="http://localhost:3000/feedback", description="Public anonymous feedback page"
    )

    # Messaging
    event_sink: str = Field(default="log", description="Completion report sink (log, sqs)")
    sqs_queue_url: str = Field(default="", description="SQS queue receiving completion reports")
    aws_region: str = Field(default="eu-central-1", description="AWS region for SQS")
    report_event_type: str = Field(default="ReservationCompleted", description="Report event type")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    api_v1_prefix: str = Field(default="/api/v1", description="API route prefix")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed_levels:
            raise ValueError(f"log_level must be one of {allowed_levels}")
        return v_upper

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed_envs = ["development", "staging", "production", "test"]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(f"app_env must be one of {allowed_envs}")
        return v_lower

    @field_validator("event_sink")
    @classmethod
    def validate_event_sink(cls, v: str) -> str:
        allowed_sinks = ["log", "sqs"]
        v_lower = v.lower()
        if v_lower not in allowed_sinks:
            raise ValueError(f"event_sink must be one of {allowed_sinks}")
        return v_lower

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


# Global settings instance
settings = Settings()
