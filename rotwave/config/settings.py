"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Matches http(s)://localhost and http(s)://127.0.0.1 on any port
LOCALHOST_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="rotwave-comments", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=5000, description="API port")
    api_reload: bool = Field(default=False, description="Enable auto-reload")

    # MongoDB
    mongodb_uri: str | None = Field(
        default=None, description="MongoDB connection string (required)"
    )
    mongodb_database: str = Field(default="rotwave", description="Database name")
    mongodb_collection: str = Field(
        default="comments", description="Collection holding comment documents"
    )
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000, description="Server selection timeout (ms)"
    )
    mongodb_connect_timeout_ms: int = Field(
        default=10000, description="Connect timeout (ms)"
    )
    mongodb_socket_timeout_ms: int = Field(
        default=20000, description="Socket timeout (ms)"
    )
    mongodb_max_pool_size: int = Field(default=50, description="Max pool size")

    # Comment policy
    comment_max_length: int = Field(
        default=1000, description="Maximum comment text length"
    )
    reply_max_length: int = Field(default=500, description="Maximum reply text length")
    content_id_max_length: int = Field(
        default=200, description="Maximum contentId length"
    )
    default_author_email: str = Field(
        default="Guest", description="Author used when no email is supplied"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    log_include_caller_info: bool = Field(
        default=True, description="Include caller info"
    )
    log_file_enabled: bool = Field(default=True, description="Write log files")
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Max size per log file (10MB default)"
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    log_requests: bool = Field(
        default=True, description="Log HTTP request start/finish"
    )
    log_exclude_paths: list[str] = Field(
        default=["/health", "/health/live"],
        description="Paths to exclude from request logging",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5500",
            "http://127.0.0.1:5500",
            "https://rookie973-s.github.io",
            "https://accounts.google.com",
            "https://rotwave.vercel.app",
            "https://wave-backend-umi8.onrender.com",
        ],
        description="CORS origins",
    )
    cors_allow_localhost: bool = Field(
        default=True, description="Allow any localhost / 127.0.0.1 origin"
    )
    cors_allow_credentials: bool = Field(default=True, description="Allow credentials")
    cors_allow_methods: list[str] = Field(
        default=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        description="Allowed methods",
    )
    cors_allow_headers: list[str] = Field(default=["*"], description="Allowed headers")
    cors_max_age: int = Field(default=600, description="CORS max age")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def cors_origin_regex(self) -> str | None:
        """Origin regex handed to the CORS middleware, if localhost is allowed."""
        return LOCALHOST_ORIGIN_REGEX if self.cors_allow_localhost else None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
