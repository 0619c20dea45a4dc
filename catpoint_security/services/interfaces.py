"""Service interfaces and abstract base classes."""

from abc import ABC, abstractmethod
from typing import Any, Set

from ..models.sensor import Sensor
from ..models.status import ArmingStatus, AlarmStatus


class SecurityRepositoryInterface(ABC):
    """Interface for the store of sensors and security statuses."""

    @abstractmethod
    def get_arming_status(self) -> ArmingStatus:
        """Get the current arming status."""
        pass

    @abstractmethod
    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        """Store a new arming status."""
        pass

    @abstractmethod
    def get_alarm_status(self) -> AlarmStatus:
        """Get the current alarm status."""
        pass

    @abstractmethod
    def set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        """Store a new alarm status."""
        pass

    @abstractmethod
    def get_sensors(self) -> Set[Sensor]:
        """Get all known sensors."""
        pass

    @abstractmethod
    def add_sensor(self, sensor: Sensor) -> None:
        """Add a sensor."""
        pass

    @abstractmethod
    def remove_sensor(self, sensor: Sensor) -> None:
        """Remove a sensor."""
        pass

    @abstractmethod
    def update_sensor(self, sensor: Sensor) -> None:
        """Persist the current state of a sensor."""
        pass


class ImageServiceInterface(ABC):
    """Interface for camera image analysis."""

    @abstractmethod
    def image_contains_cat(self, image: Any, confidence_threshold: float) -> bool:
        """Check whether the image shows a cat with at least the given confidence."""
        pass


class StatusListener(ABC):
    """Receives notifications from the security service."""

    @abstractmethod
    def on_alarm_status_changed(self, alarm_status: AlarmStatus) -> None:
        """Called after a new alarm status has been written."""
        pass

    @abstractmethod
    def on_sensor_status_changed(self, sensor: Sensor, active: bool) -> None:
        """Called after a sensor's activation flag has been written."""
        pass

    def on_cat_detected(self, cat_detected: bool) -> None:
        """Called with the result of every processed camera image."""
