"""Security service: applies the alarm rules to sensor and camera events."""

import logging
import threading
from typing import Any, List, Optional, Set

from ..models.sensor import Sensor
from ..models.status import ArmingStatus, AlarmStatus
from ..config.defaults import DEFAULT_CONFIG
from .interfaces import SecurityRepositoryInterface, ImageServiceInterface, StatusListener
from .alarm_transitions import (
    next_status_for_sensor_event,
    next_status_for_image,
    next_status_for_arming
)
from .error_decorators import log_execution_time
from ..logging_config import get_logger, log_with_context

logger = get_logger("security_service")


class SecurityService:
    """Derives the alarm status from sensor activity, camera images and the
    arming policy.

    The repository is the single source of truth for sensors and statuses;
    every operation reads what it needs from it, decides with the functions
    in ``alarm_transitions`` and writes back only when the alarm status
    actually changes. Operations are serialized by a reentrant lock so the
    read-decide-write sequence stays atomic when the service is shared
    between threads (for example by the web API).

    Listeners are notified synchronously, in registration order, while the
    lock is held. Exceptions raised by the repository, the image service or
    a listener propagate to the caller.
    """

    def __init__(self,
                 security_repository: SecurityRepositoryInterface,
                 image_service: ImageServiceInterface,
                 confidence_threshold: float = DEFAULT_CONFIG["confidence_threshold"]):
        self.security_repository = security_repository
        self.image_service = image_service
        self.confidence_threshold = confidence_threshold

        self._status_listeners: List[StatusListener] = []
        self._cat_detected = False
        self._images_submitted = 0
        self._latest_image_applied = 0
        self._lock = threading.RLock()

    # Listener registration

    def add_status_listener(self, listener: StatusListener) -> None:
        """Register a listener; registering it twice has no effect."""
        with self._lock:
            if listener not in self._status_listeners:
                self._status_listeners.append(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        """Deregister a listener; unknown listeners are ignored."""
        with self._lock:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

    # Sensors

    def get_sensors(self) -> Set[Sensor]:
        return self.security_repository.get_sensors()

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self.security_repository.add_sensor(sensor)
            logger.info(f"Sensor added: {sensor.name} ({sensor.sensor_type.name})")

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self.security_repository.remove_sensor(sensor)
            logger.info(f"Sensor removed: {sensor.name} ({sensor.sensor_type.name})")

    def change_sensor_activation_status(self, sensor: Sensor, active: Optional[bool] = None) -> None:
        """Change a sensor's activation flag and apply the alarm rules.

        Calling without ``active`` handles a sensor reporting itself
        inactive: the flag is cleared and the pending alarm is released if
        no sensor remains active, whatever the sensor's previous flag. An
        explicit ``active=False`` for a sensor that is already inactive
        leaves the alarm status alone.
        """
        with self._lock:
            if active is None:
                self._apply_sensor_activation(sensor, False, deactivation_applies=True)
            else:
                self._apply_sensor_activation(sensor, active, deactivation_applies=sensor.active)

    # Statuses

    def get_alarm_status(self) -> AlarmStatus:
        return self.security_repository.get_alarm_status()

    def get_arming_status(self) -> ArmingStatus:
        return self.security_repository.get_arming_status()

    @property
    def cat_detected(self) -> bool:
        """Result of the most recently processed camera image."""
        return self._cat_detected

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        """Store a new arming status and apply its side effects.

        Arming resets every sensor to inactive through the regular sensor
        update path before the alarm is re-evaluated. Disarming clears the
        alarm and leaves sensors untouched.
        """
        with self._lock:
            self.security_repository.set_arming_status(arming_status)
            logger.info(f"Arming status set to {arming_status.name}")

            if arming_status.is_armed:
                for sensor in list(self.security_repository.get_sensors()):
                    self._apply_sensor_activation(sensor, False, deactivation_applies=sensor.active)

            new_status = next_status_for_arming(arming_status, self._cat_detected)
            if new_status is not None:
                self._set_alarm_status(new_status)

    @log_execution_time("security_service")
    def process_image(self, image: Any) -> None:
        """Classify a camera image and apply the camera rules.

        Classification runs outside the lock. When several images overlap,
        a result is dropped if an image submitted after it has already been
        applied, so ``cat_detected`` always reflects the newest image.
        """
        with self._lock:
            self._images_submitted += 1
            submission = self._images_submitted

        cat_detected = self.image_service.image_contains_cat(image, self.confidence_threshold)

        with self._lock:
            if submission < self._latest_image_applied:
                logger.debug(f"Discarding result of image {submission}, image {self._latest_image_applied} is newer")
                return
            self._latest_image_applied = submission
            self._cat_detected = cat_detected
            logger.debug(f"Image processed, cat detected: {cat_detected}")
            for listener in list(self._status_listeners):
                listener.on_cat_detected(cat_detected)

            new_status = next_status_for_image(
                self.security_repository.get_arming_status(),
                cat_detected,
                self._any_sensor_active()
            )
            if new_status is not None:
                self._set_alarm_status(new_status)

    # Internal helpers

    def _apply_sensor_activation(self, sensor: Sensor, active: bool, deactivation_applies: bool) -> None:
        was_active = sensor.active
        sensor.set_active(active)
        try:
            self.security_repository.update_sensor(sensor)
        except Exception:
            sensor.set_active(was_active)
            raise
        for listener in list(self._status_listeners):
            listener.on_sensor_status_changed(sensor, active)

        new_status = next_status_for_sensor_event(
            self.security_repository.get_arming_status(),
            self.security_repository.get_alarm_status(),
            active,
            deactivation_applies,
            self._any_sensor_active()
        )
        if new_status is not None:
            self._set_alarm_status(new_status)

    def _any_sensor_active(self) -> bool:
        return any(sensor.active for sensor in self.security_repository.get_sensors())

    def _set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        current_status = self.security_repository.get_alarm_status()
        if alarm_status is current_status:
            return

        self.security_repository.set_alarm_status(alarm_status)
        log_with_context(logger, logging.INFO, f"Alarm status changed to {alarm_status.name}", {
            "previous": current_status.name,
            "arming": self.security_repository.get_arming_status().name
        })
        for listener in list(self._status_listeners):
            listener.on_alarm_status_changed(alarm_status)
