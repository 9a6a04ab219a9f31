# config.py
"""Configuration management for simplified tracing.

Centralized configuration using dataclasses for type safety and
environment variable integration. Tracing code receives these objects
instead of reading the environment itself.
"""

import os
from dataclasses import dataclass
from typing import Literal, Optional

from core.code_exceptions import TracingConfigError

Protocol = Literal["grpc", "http/protobuf"]

_GRPC_ENDPOINT = "http://localhost:4317"
_HTTP_ENDPOINT = "http://localhost:6006/v1/traces"


def _env_bool(key: str, default: bool) -> bool:
    return os.getenv(key, "1" if default else "0").lower() not in ("0", "false", "no")


def _parse_protocol(value: Optional[str]) -> Optional[Protocol]:
    if not value:
        return None
    proto = value.lower()
    if proto == "grpc":
        return "grpc"
    if proto == "http/protobuf":
        return "http/protobuf"
    raise TracingConfigError(
        f"Unsupported PHOENIX_PROTOCOL {value!r}; expected 'grpc' or 'http/protobuf'"
    )


@dataclass
class TracingConfig:
    """Tracing backend and transaction behaviour settings."""
    enabled: bool = True
    project_name: str = "simplified-tracing"
    endpoint: Optional[str] = None
    protocol: Optional[Protocol] = None
    batch: bool = False
    auto_finish_on_shutdown: bool = True
    excluded_urls: Optional[str] = None

    @property
    def resolved_endpoint(self) -> str:
        """Collector endpoint, defaulting by protocol."""
        if self.endpoint:
            return self.endpoint
        return _GRPC_ENDPOINT if self.protocol == "grpc" else _HTTP_ENDPOINT

    @classmethod
    def from_env(cls) -> "TracingConfig":
        """Create configuration from environment variables."""
        return cls(
            enabled=_env_bool("TRACING_ENABLED", True),
            project_name=os.getenv("PHOENIX_PROJECT_NAME", "simplified-tracing"),
            endpoint=os.getenv("PHOENIX_COLLECTOR_ENDPOINT") or None,
            protocol=_parse_protocol(os.getenv("PHOENIX_PROTOCOL")),
            batch=_env_bool("PHOENIX_BATCH", False),
            auto_finish_on_shutdown=_env_bool("TRACING_AUTO_FINISH_ON_SHUTDOWN", True),
            excluded_urls=os.getenv("TRACING_EXCLUDED_URLS") or None,
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create configuration from environment variables."""
        return cls(level=os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass
class AppConfig:
    """Main configuration container."""
    tracing: TracingConfig
    logging: LoggingConfig

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create complete configuration from environment variables."""
        return cls(
            tracing=TracingConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )
