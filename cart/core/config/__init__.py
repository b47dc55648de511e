"""
Configuration package for the cart service.

- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Stage names, circuit states and other fixed values
"""

from .settings import (
    Settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
]
