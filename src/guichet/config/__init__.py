"""
Configuration package.
"""

from guichet.config.settings import (
    GuichetConfig,
    get_settings,
    load_config,
    override_settings,
    reset_settings,
)

__all__ = [
    "GuichetConfig",
    "get_settings",
    "load_config",
    "override_settings",
    "reset_settings",
]
