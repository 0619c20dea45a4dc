"""Alarm status transition rules.

These functions are pure: they receive the statuses and sensor facts read
from the repository and return the alarm status that must be written, or
``None`` when no rule applies. The security service owns all reads and
writes.
"""

from typing import Optional

from ..models.status import ArmingStatus, AlarmStatus


def next_status_for_sensor_event(arming_status: ArmingStatus,
                                 alarm_status: AlarmStatus,
                                 active: bool,
                                 deactivation_applies: bool,
                                 any_sensor_active: bool) -> Optional[AlarmStatus]:
    """Evaluate the rule table for a sensor activation event.

    Args:
        arming_status: Current arming status
        alarm_status: Current alarm status
        active: Requested activation value
        deactivation_applies: False when an explicit deactivation targets a
            sensor that was already inactive
        any_sensor_active: Whether any sensor is active after the update

    Returns:
        The new alarm status, or None when the status must not change
    """
    if alarm_status is AlarmStatus.ALARM:
        return None

    if active:
        if arming_status is ArmingStatus.DISARMED:
            return None
        if alarm_status is AlarmStatus.NO_ALARM:
            return AlarmStatus.PENDING_ALARM
        if alarm_status is AlarmStatus.PENDING_ALARM:
            return AlarmStatus.ALARM
        return None

    if (deactivation_applies
            and alarm_status is AlarmStatus.PENDING_ALARM
            and not any_sensor_active):
        return AlarmStatus.NO_ALARM
    return None


def next_status_for_image(arming_status: ArmingStatus,
                          cat_detected: bool,
                          any_sensor_active: bool) -> Optional[AlarmStatus]:
    """Evaluate the camera rules for a classified image."""
    if cat_detected:
        if arming_status is ArmingStatus.ARMED_HOME:
            return AlarmStatus.ALARM
        return None

    if not any_sensor_active:
        return AlarmStatus.NO_ALARM
    return None


def next_status_for_arming(arming_status: ArmingStatus,
                           cat_detected: bool) -> Optional[AlarmStatus]:
    """Evaluate the rules applied when the arming status is set.

    Disarming always clears the alarm. Arming at home while the last
    camera image showed a cat raises the alarm.
    """
    if arming_status is ArmingStatus.DISARMED:
        return AlarmStatus.NO_ALARM
    if arming_status is ArmingStatus.ARMED_HOME and cat_detected:
        return AlarmStatus.ALARM
    return None
