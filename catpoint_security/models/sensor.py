"""Sensor data model."""

from enum import Enum
from typing import Any, Dict


class SensorType(Enum):
    """Kinds of sensor supported by the system."""
    DOOR = "DOOR"
    WINDOW = "WINDOW"
    MOTION = "MOTION"


class Sensor:
    """A named, typed device with a boolean activation flag.

    Two sensors are equal when their name and type match, so a set of
    sensors never holds the same device twice regardless of its flag.
    """

    def __init__(self, name: str, sensor_type: SensorType, active: bool = False):
        self.name = name
        self.sensor_type = sensor_type
        self.active = active

    def set_active(self, active: bool) -> None:
        """Set the activation flag."""
        self.active = bool(active)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'sensor_type': self.sensor_type.name,
            'active': self.active
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sensor":
        return cls(
            name=data['name'],
            sensor_type=SensorType[data['sensor_type']],
            active=bool(data.get('active', False))
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sensor):
            return NotImplemented
        return self.name == other.name and self.sensor_type == other.sensor_type

    def __hash__(self) -> int:
        return hash((self.name, self.sensor_type))

    def __repr__(self) -> str:
        return f"Sensor(name={self.name!r}, sensor_type={self.sensor_type.name}, active={self.active})"
