"""Shared configuration."""

from .config import OptimizerSettings, settings

__all__ = [
    "OptimizerSettings",
    "settings",
]
