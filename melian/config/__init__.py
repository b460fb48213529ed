"""Configuration module for the Melian client."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
