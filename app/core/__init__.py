"""Core: config, rate limiting, exception handlers and application lifespan.

Single place for settings and application bootstrap.
"""

from app.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
