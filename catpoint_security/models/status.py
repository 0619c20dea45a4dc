"""Arming and alarm status enumerations."""

from enum import Enum


class ArmingStatus(Enum):
    """Whether the system is monitoring sensors and the camera."""
    DISARMED = "Disarmed"
    ARMED_HOME = "Armed - home"
    ARMED_AWAY = "Armed - away"

    @property
    def description(self) -> str:
        return self.value

    @property
    def is_armed(self) -> bool:
        return self is not ArmingStatus.DISARMED


class AlarmStatus(Enum):
    """Derived security state, ordered by severity."""
    NO_ALARM = "No alarm"
    PENDING_ALARM = "Pending alarm"
    ALARM = "Alarm"

    @property
    def description(self) -> str:
        return self.value
