"""
Configuration management for LightFeed.

Uses Pydantic for validation and pydantic-settings for environment variable support.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration.

    LightFeed keeps pages, feeds and saved articles in a local SQLite file.
    Environment variables: DB_PATH, DB_ECHO.
    """

    model_config = SettingsConfigDict(env_prefix="DB_")

    path: str = Field(default="data/lightfeed.db", description="Database file path (SQLite)")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @field_validator("path")
    @classmethod
    def ensure_directory_exists(cls, v: str) -> str:
        """Ensure the database directory exists."""
        if v != ":memory:" and not v.startswith("sqlite://"):
            Path(v).parent.mkdir(parents=True, exist_ok=True)
        return v


class FetcherConfig(BaseSettings):
    """RSS/Atom fetcher and parser configuration."""

    model_config = SettingsConfigDict(env_prefix="FETCHER_")

    # HTTP settings
    timeout_seconds: float = Field(
        default=9.0, gt=0, le=120, description="Wall-clock timeout per feed request"
    )
    user_agent: str = Field(
        default="LightFeed/0.1 (+self-hosted)",
        description="User-Agent header"
    )
    accept: str = Field(
        default="application/rss+xml, application/xml, text/xml;q=0.9, */*;q=0.8",
        description="Accept header"
    )

    # Follow redirects
    follow_redirects: bool = Field(default=True)
    max_redirects: int = Field(default=5, ge=0, le=20)

    # Parser limits
    max_items_per_feed: int = Field(
        default=30, ge=1, le=500,
        description="Max item/entry blocks parsed per feed"
    )
    summary_max_length: int = Field(
        default=220, ge=10, le=5000,
        description="Max summary length in characters, ellipsis included"
    )


class StreamConfig(BaseSettings):
    """Blended stream configuration."""

    model_config = SettingsConfigDict(env_prefix="STREAM_")

    default_page_limit: int = Field(default=24, ge=1, le=500, description="Items per page view")
    preview_limit: int = Field(default=28, ge=1, le=500, description="Items per home/preview view")
    max_feeds_per_request: int = Field(default=20, ge=1, le=100, description="Max feeds per mix")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        description="Log format"
    )

    # File logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_path: str = Field(default="logs/lightfeed.log", description="Log file path")
    rotation: str = Field(default="50 MB", description="Log rotation size")
    retention: str = Field(default="14 days", description="Log retention period")

    # Console logging
    console_enabled: bool = Field(default=True, description="Enable console logging")
    serialize: bool = Field(default=False, description="Write JSON records instead of formatted lines")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v


class WebConfig(BaseSettings):
    """Web API configuration."""

    model_config = SettingsConfigDict(env_prefix="WEB_")

    host: str = Field(default="127.0.0.1", description="Web server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Web server port")
    debug: bool = Field(default=False, description="Debug mode")
    secret_key: str = Field(default="dev-secret-key", description="Secret key for sessions")


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LIGHTFEED_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    version: str = Field(default="0.1.0", description="Application version")
    app_name: str = Field(default="LightFeed", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    # Sub-configurations
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    web: WebConfig = Field(default_factory=WebConfig)


_SECTION_CLASSES = {
    "database": DatabaseConfig,
    "fetcher": FetcherConfig,
    "stream": StreamConfig,
    "logging": LoggingConfig,
    "web": WebConfig,
}

# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def load_config_from_yaml(yaml_path: str) -> Config:
    """Load configuration from a YAML file.

    Values loaded from YAML take precedence over environment variables.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        Config instance loaded from the file.
    """
    import yaml

    yaml_file = Path(yaml_path)
    if not yaml_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

    with yaml_file.open("r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    main_config = {}
    for key, value in config_dict.items():
        if key not in _SECTION_CLASSES:
            main_config[key] = value

    for key, config_class in _SECTION_CLASSES.items():
        main_config[key] = config_class(**(config_dict.get(key) or {}))

    return Config(**main_config)


def reload_config() -> Config:
    """Reload configuration from environment and the optional YAML file."""
    global _config
    _config = None

    config_yaml = Path("config/config.yaml")
    if config_yaml.exists():
        _config = load_config_from_yaml(str(config_yaml))
    else:
        _config = Config()

    return _config
