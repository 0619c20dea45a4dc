"""Configuration components for the catpoint security system."""

from .defaults import (
    DEFAULT_CONFIG,
    SYSTEM_CONSTANTS,
    DEFAULT_PATHS,
    MODEL_SETTINGS,
    IMAGE_SERVICES,
    REPOSITORIES
)

__all__ = [
    'DEFAULT_CONFIG',
    'SYSTEM_CONSTANTS',
    'DEFAULT_PATHS',
    'MODEL_SETTINGS',
    'IMAGE_SERVICES',
    'REPOSITORIES'
]
