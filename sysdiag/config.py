"""
Configuration management with environment variable support and validation.

Design principles:
- Validation at startup (fail fast)
- Type safety with Pydantic
- Every knob has a working default; the environment only overrides
"""

import os
import sys
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()


def default_disk_path() -> str:
    """The single fixed volume the quick disk check looks at."""
    if sys.platform == "win32":
        return "C:\\"
    return "/"


class CacheConfig(BaseModel):
    """Time-to-live of each cached operation."""

    alerts_ttl_seconds: float = Field(
        default=3.0, gt=0.0, description="TTL of the primary triage report"
    )
    thermal_ttl_seconds: float = Field(
        default=10.0, gt=0.0, description="TTL of the thermal probe report"
    )
    connectivity_ttl_seconds: float = Field(
        default=30.0, gt=0.0, description="TTL of the internet reachability check"
    )


class CollectionConfig(BaseModel):
    """How collectors are run against the local host."""

    collector_timeout_seconds: float = Field(
        default=5.0, gt=0.0, description="Upper bound on any single collector call"
    )
    command_timeout_seconds: float = Field(
        default=4.0, gt=0.0, description="Upper bound on any spawned OS command"
    )
    disk_path: str = Field(
        default_factory=default_disk_path, description="Volume checked by the quick disk read"
    )
    connectivity_host: str = Field(default="8.8.8.8", description="Host probed for internet")
    connectivity_port: int = Field(default=53, gt=0, lt=65536)
    connectivity_timeout_seconds: float = Field(default=3.0, gt=0.0)

    @model_validator(mode="after")
    def command_fits_in_collector(self) -> "CollectionConfig":
        """A command must time out on its own before the collector that runs it gives up."""
        if self.command_timeout_seconds > self.collector_timeout_seconds:
            raise ValueError(
                "command_timeout_seconds must not exceed collector_timeout_seconds"
            )
        return self


class TriageConfig(BaseModel):
    """Decision guidance settings."""

    max_next_steps: int = Field(
        default=2, ge=1, description="Cap on deep probes recommended by one triage call"
    )


class ServerConfig(BaseModel):
    """Identity advertised by the MCP server."""

    name: str = Field(default="system-health-mcp")
    version: str = Field(default="1.0.0")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="production", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    cache: CacheConfig = Field(default_factory=CacheConfig)
    collection: CollectionConfig = Field(default_factory=CollectionConfig)
    triage: TriageConfig = Field(default_factory=TriageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _format_to_literal(val: str | None, debug: bool) -> Literal["json", "console"]:
        if val is None:
            return "console" if debug else "json"
        return "console" if val.strip().lower() == "console" else "json"

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "production"))
    debug = environment == "development"

    cache_config = CacheConfig(
        alerts_ttl_seconds=float(os.getenv("ALERTS_CACHE_TTL_SECONDS", "3.0")),
        thermal_ttl_seconds=float(os.getenv("THERMAL_CACHE_TTL_SECONDS", "10.0")),
        connectivity_ttl_seconds=float(os.getenv("CONNECTIVITY_CACHE_TTL_SECONDS", "30.0")),
    )

    collection_config = CollectionConfig(
        collector_timeout_seconds=float(os.getenv("COLLECTOR_TIMEOUT_SECONDS", "5.0")),
        command_timeout_seconds=float(os.getenv("COMMAND_TIMEOUT_SECONDS", "4.0")),
        disk_path=os.getenv("DISK_PATH") or default_disk_path(),
        connectivity_host=os.getenv("CONNECTIVITY_HOST", "8.8.8.8"),
        connectivity_port=int(os.getenv("CONNECTIVITY_PORT", "53")),
    )

    triage_config = TriageConfig(max_next_steps=int(os.getenv("MAX_NEXT_STEPS", "2")))

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format=_format_to_literal(os.getenv("LOG_FORMAT"), debug),
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        cache=cache_config,
        collection=collection_config,
        triage=triage_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()
