"""Security repository implementations."""

import json
import os
import threading
from typing import Any, Dict, Optional, Set, Tuple

from ..models.sensor import Sensor
from ..models.status import ArmingStatus, AlarmStatus
from ..config.defaults import SYSTEM_CONSTANTS
from .interfaces import SecurityRepositoryInterface
from .error_decorators import retry_on_error
from ..logging_config import get_logger

logger = get_logger("repository")


class InMemorySecurityRepository(SecurityRepositoryInterface):
    """Keeps sensors and statuses in process memory."""

    def __init__(self,
                 sensors: Optional[Set[Sensor]] = None,
                 arming_status: ArmingStatus = ArmingStatus.DISARMED,
                 alarm_status: AlarmStatus = AlarmStatus.NO_ALARM):
        self._sensors: Set[Sensor] = set(sensors or ())
        self._arming_status = arming_status
        self._alarm_status = alarm_status
        self._lock = threading.RLock()

    def get_arming_status(self) -> ArmingStatus:
        return self._arming_status

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        with self._lock:
            previous = self._snapshot()
            self._arming_status = arming_status
            self._commit(previous)

    def get_alarm_status(self) -> AlarmStatus:
        return self._alarm_status

    def set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        with self._lock:
            previous = self._snapshot()
            self._alarm_status = alarm_status
            self._commit(previous)

    def get_sensors(self) -> Set[Sensor]:
        with self._lock:
            return set(self._sensors)

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            previous = self._snapshot()
            self._sensors.add(sensor)
            self._commit(previous)

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            previous = self._snapshot()
            self._sensors.discard(sensor)
            self._commit(previous)

    def update_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            previous = self._snapshot()
            # An equal sensor may be a different instance; keep the caller's
            self._sensors.discard(sensor)
            self._sensors.add(sensor)
            self._commit(previous)

    def _snapshot(self) -> Tuple[Set[Sensor], ArmingStatus, AlarmStatus]:
        return set(self._sensors), self._arming_status, self._alarm_status

    def _commit(self, previous: Tuple[Set[Sensor], ArmingStatus, AlarmStatus]) -> None:
        """Hook called after every write with the state from before it."""

    def _restore(self, previous: Tuple[Set[Sensor], ArmingStatus, AlarmStatus]) -> None:
        self._sensors, self._arming_status, self._alarm_status = previous

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'arming_status': self._arming_status.name,
                'alarm_status': self._alarm_status.name,
                'sensors': [sensor.to_dict() for sensor in sorted(self._sensors, key=lambda s: s.name)]
            }


class JsonFileSecurityRepository(InMemorySecurityRepository):
    """Repository that persists its state to a JSON file after every write."""

    def __init__(self, data_file: str):
        super().__init__()
        self.data_file = data_file
        self.load()

    def load(self) -> None:
        """Load state from the data file; a missing or malformed file leaves the defaults."""
        if not os.path.exists(self.data_file):
            logger.info(f"No state file at {self.data_file}, starting with defaults")
            return

        try:
            with open(self.data_file, 'r') as f:
                data = json.load(f)
            sensors = {Sensor.from_dict(item) for item in data.get('sensors', [])}
            arming_status = ArmingStatus[data.get('arming_status', ArmingStatus.DISARMED.name)]
            alarm_status = AlarmStatus[data.get('alarm_status', AlarmStatus.NO_ALARM.name)]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.error(f"Error loading state from {self.data_file}: {e}. Using defaults.")
            return

        with self._lock:
            self._sensors = sensors
            self._arming_status = arming_status
            self._alarm_status = alarm_status
        logger.info(f"Loaded {len(sensors)} sensors from {self.data_file}")

    def _commit(self, previous) -> None:
        # Memory only keeps a write once it is on disk
        try:
            self.save()
        except OSError:
            self._restore(previous)
            logger.error(f"Could not write {self.data_file}, change rolled back")
            raise

    @retry_on_error(max_attempts=SYSTEM_CONSTANTS["REPOSITORY_WRITE_ATTEMPTS"],
                    delay=SYSTEM_CONSTANTS["REPOSITORY_RETRY_DELAY_SECONDS"],
                    exceptions=[OSError])
    def save(self) -> None:
        """Write the current state to the data file."""
        directory = os.path.dirname(self.data_file)
        if directory:
            os.makedirs(directory, exist_ok=True)

        tmp_path = f"{self.data_file}.tmp"
        with open(tmp_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        os.replace(tmp_path, self.data_file)


def create_repository(kind: str, data_file: Optional[str] = None) -> SecurityRepositoryInterface:
    """Build the repository named in the configuration."""
    if kind == "memory":
        return InMemorySecurityRepository()
    if kind == "json":
        if not data_file:
            raise ValueError("The json repository needs a data file")
        return JsonFileSecurityRepository(data_file)
    raise ValueError(f"Unknown repository: {kind}")
