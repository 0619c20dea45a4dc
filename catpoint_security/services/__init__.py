"""Services for the catpoint security system."""

from .interfaces import (
    SecurityRepositoryInterface,
    ImageServiceInterface,
    StatusListener
)
from .repository import InMemorySecurityRepository, JsonFileSecurityRepository, create_repository
from .image_service import FakeImageService, OpenCVImageService, create_image_service
from .security_service import SecurityService

__all__ = [
    'SecurityRepositoryInterface',
    'ImageServiceInterface',
    'StatusListener',
    'InMemorySecurityRepository',
    'JsonFileSecurityRepository',
    'create_repository',
    'FakeImageService',
    'OpenCVImageService',
    'create_image_service',
    'SecurityService'
]
