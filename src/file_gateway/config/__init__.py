"""
Configuration management for the file gateway.

Contains the Pydantic settings and mode-aware defaults that work across
local-dev, aws-mock, and aws-prod deployment modes.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
