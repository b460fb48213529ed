"""
Melian Client Configuration Settings

Defaults for the client, overridable through the environment. Explicit
arguments passed to the client always take precedence over these values.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Client configuration settings."""

    # Connection settings
    DSN: str = os.environ.get("MELIAN_DSN", "unix:///tmp/melian.sock")
    TIMEOUT: float = float(os.environ.get("MELIAN_TIMEOUT", "1"))  # TCP connect only

    # Schema settings (at most one may be set)
    SCHEMA_SPEC: Optional[str] = os.environ.get("MELIAN_SCHEMA_SPEC") or None
    SCHEMA_FILE: Optional[str] = os.environ.get("MELIAN_SCHEMA_FILE") or None

    # I/O settings
    READ_CHUNK_SIZE: int = 65536  # Upper bound for a single recv()

    # Logging settings
    DEBUG: bool = os.environ.get("MELIAN_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("MELIAN_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
