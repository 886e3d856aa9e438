"""Bannercraft - AI marketing banner generation with a guarded request boundary."""

__version__ = "0.1.0"

from bannercraft.core.config import BannercraftConfig, config

__all__ = [
    "BannercraftConfig",
    "config",
]
