"""Configuration module for the MemeForge AI backend."""

from memeforge.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
