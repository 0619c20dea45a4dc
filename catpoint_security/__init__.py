"""
Catpoint Security

A home security monitoring service: sensors report activation, camera
images are checked for cats, and an alarm status is derived under the
current arming policy.
"""

__version__ = "1.0.0"

from .config_manager import ConfigManager
from .models import (
    Sensor,
    SensorType,
    ArmingStatus,
    AlarmStatus,
    SystemConfig
)
from .services import (
    SecurityRepositoryInterface,
    ImageServiceInterface,
    StatusListener,
    InMemorySecurityRepository,
    JsonFileSecurityRepository,
    FakeImageService,
    OpenCVImageService,
    SecurityService
)

__all__ = [
    # Core management
    'ConfigManager',

    # Data models
    'Sensor',
    'SensorType',
    'ArmingStatus',
    'AlarmStatus',
    'SystemConfig',

    # Services
    'SecurityRepositoryInterface',
    'ImageServiceInterface',
    'StatusListener',
    'InMemorySecurityRepository',
    'JsonFileSecurityRepository',
    'FakeImageService',
    'OpenCVImageService',
    'SecurityService'
]
