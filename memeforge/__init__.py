"""MemeForge AI backend: rate-limited relay to chat and image generation models."""

__version__ = "0.1.0"
