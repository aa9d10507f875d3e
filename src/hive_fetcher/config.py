"""Configuration settings for Hive Fetcher."""

from datetime import date

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Content store (HAF SQL node)
    db_host: str = Field(default="hafsql-sql.mahdiyari.info", description="HAF SQL host")
    db_port: int = Field(default=5432, description="HAF SQL port")
    db_name: str = Field(default="haf_block_log", description="HAF SQL database name")
    db_user: str = Field(default="hafsql_public", description="HAF SQL user")
    db_password: str = Field(default="hafsql_public", description="HAF SQL password")
    db_ssl: bool = Field(default=False, description="Use SSL (the public node has none)")
    db_connect_timeout_seconds: float = Field(default=10, description="Connect timeout")
    db_idle_timeout_seconds: float = Field(default=30, description="Idle connection lifetime")
    db_pool_min_size: int = Field(default=0, description="Connections opened eagerly at startup")
    db_pool_max_size: int = Field(default=10, description="Maximum pooled connections")

    # Query policy
    max_rows: int = Field(default=100, description="Row bound applied to every search")
    default_days: int = Field(default=3, description="Relative window when none is given")
    max_keywords: int = Field(default=3, description="Maximum keywords per search")
    genesis_date: date = Field(default=date(2020, 3, 20), description="Earliest searchable date")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=3000, description="API port")

    # Client settings
    endpoint_url: str = Field(
        default="http://localhost:3000/search", description="Middleware search endpoint"
    )
    page_size: int = Field(default=9, description="Posts per result page")
    request_timeout_seconds: float = Field(default=60, description="Client request timeout")
    preferences_path: str = Field(
        default="~/.hive_fetcher/preferences.json", description="Saved preferences file"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    model_config = {
        "env_prefix": "HIVE_FETCHER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()
