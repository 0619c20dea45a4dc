"""Flask JSON API for the catpoint security system."""

import threading
from collections import deque
from datetime import datetime
from typing import Any, Dict, List, Optional

import cv2
import numpy as np
from flask import Flask, jsonify, request

from ..config.defaults import SYSTEM_CONSTANTS
from ..config_manager import ConfigManager
from ..models.sensor import Sensor, SensorType
from ..models.status import ArmingStatus, AlarmStatus
from ..services.interfaces import StatusListener
from ..services.image_service import create_image_service
from ..services.repository import create_repository
from ..services.security_service import SecurityService
from ..logging_config import get_logger

logger = get_logger("web")


class EventLogListener(StatusListener):
    """Keeps the most recent service notifications for the events endpoint."""

    def __init__(self, max_events: int = 100):
        self._events = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def on_alarm_status_changed(self, alarm_status: AlarmStatus) -> None:
        self._record('alarm_status_changed', {'alarm_status': alarm_status.name})

    def on_sensor_status_changed(self, sensor: Sensor, active: bool) -> None:
        self._record('sensor_status_changed', {'sensor': sensor.name, 'active': active})

    def on_cat_detected(self, cat_detected: bool) -> None:
        self._record('cat_detected', {'cat_detected': cat_detected})

    def _record(self, event_type: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._events.append({
                'timestamp': datetime.now().isoformat(),
                'type': event_type,
                'data': data
            })

    def get_events(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return recorded events, newest last."""
        with self._lock:
            events = list(self._events)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events


class SecurityWebApp:
    """Flask application exposing the security service over HTTP."""

    def __init__(self, security_service: SecurityService, event_history_size: int = 100):
        self.app = Flask(__name__)
        self.app.config['MAX_CONTENT_LENGTH'] = SYSTEM_CONSTANTS["MAX_UPLOAD_SIZE_MB"] * 1024 * 1024

        self.security_service = security_service
        self.event_log = EventLogListener(event_history_size)
        self.security_service.add_status_listener(self.event_log)

        self._setup_routes()

        logger.info("Security web application initialized")

    def _find_sensor(self, sensor_type: str, name: str) -> Optional[Sensor]:
        """Sensor identified by (type, name); None for unknown types or names."""
        if sensor_type not in SensorType.__members__:
            return None
        for sensor in self.security_service.get_sensors():
            if sensor.sensor_type is SensorType[sensor_type] and sensor.name == name:
                return sensor
        return None

    @staticmethod
    def _json_body() -> Optional[Dict[str, Any]]:
        """Request JSON object, {} when there is no body, None for anything else."""
        data = request.get_json(silent=True)
        if data is None:
            return {}
        return data if isinstance(data, dict) else None

    @staticmethod
    def _bad_body():
        return jsonify({
            'success': False,
            'error': 'Request body must be a JSON object'
        }), 400

    def _status_payload(self) -> Dict[str, Any]:
        arming_status = self.security_service.get_arming_status()
        alarm_status = self.security_service.get_alarm_status()
        return {
            'arming_status': arming_status.name,
            'arming_description': arming_status.description,
            'alarm_status': alarm_status.name,
            'alarm_description': alarm_status.description,
            'cat_detected': self.security_service.cat_detected
        }

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/api/status')
        def api_status():
            """Get arming and alarm status."""
            try:
                return jsonify({
                    'success': True,
                    'data': self._status_payload()
                })
            except Exception as e:
                logger.error(f"Error getting status: {e}")
                return jsonify({
                    'success': False,
                    'error': str(e)
                }), 500

        @self.app.route('/api/arming', methods=['POST'])
        def api_set_arming():
            """Set the arming status."""
            data = self._json_body()
            if data is None:
                return self._bad_body()
            try:
                arming_status = ArmingStatus[data.get('status', '')]
            except (KeyError, TypeError):
                return jsonify({
                    'success': False,
                    'error': f"Unknown arming status: {data.get('status')}"
                }), 400

            try:
                self.security_service.set_arming_status(arming_status)
                return jsonify({
                    'success': True,
                    'data': self._status_payload()
                })
            except Exception as e:
                logger.error(f"Error setting arming status: {e}")
                return jsonify({
                    'success': False,
                    'error': str(e)
                }), 500

        @self.app.route('/api/sensors', methods=['GET'])
        def api_get_sensors():
            """List sensors."""
            try:
                sensors = sorted(self.security_service.get_sensors(), key=lambda s: s.name)
                return jsonify({
                    'success': True,
                    'data': [sensor.to_dict() for sensor in sensors]
                })
            except Exception as e:
                logger.error(f"Error listing sensors: {e}")
                return jsonify({
                    'success': False,
                    'error': str(e)
                }), 500

        @self.app.route('/api/sensors', methods=['POST'])
        def api_add_sensor():
            """Add a sensor."""
            data = self._json_body()
            if data is None:
                return self._bad_body()
            name = data.get('name')
            if not name or not isinstance(name, str):
                return jsonify({
                    'success': False,
                    'error': 'Sensor name is required and must be a string'
                }), 400
            try:
                sensor_type = SensorType[data.get('sensor_type', '')]
            except (KeyError, TypeError):
                return jsonify({
                    'success': False,
                    'error': f"Unknown sensor type: {data.get('sensor_type')}"
                }), 400

            try:
                sensor = Sensor(name, sensor_type)
                self.security_service.add_sensor(sensor)
                return jsonify({
                    'success': True,
                    'data': sensor.to_dict()
                }), 201
            except Exception as e:
                logger.error(f"Error adding sensor: {e}")
                return jsonify({
                    'success': False,
                    'error': str(e)
                }), 500

        @self.app.route('/api/sensors/<sensor_type>/<name>', methods=['DELETE'])
        def api_remove_sensor(sensor_type, name):
            """Remove a sensor."""
            sensor = self._find_sensor(sensor_type, name)
            if sensor is None:
                return jsonify({
                    'success': False,
                    'error': f"Sensor not found: {sensor_type}/{name}"
                }), 404

            try:
                self.security_service.remove_sensor(sensor)
                return jsonify({
                    'success': True,
                    'message': f"Sensor {name} removed"
                })
            except Exception as e:
                logger.error(f"Error removing sensor: {e}")
                return jsonify({
                    'success': False,
                    'error': str(e)
                }), 500

        @self.app.route('/api/sensors/<sensor_type>/<name>/activation', methods=['POST'])
        def api_sensor_activation(sensor_type, name):
            """Change a sensor's activation; without "active" the sensor reports inactive."""
            sensor = self._find_sensor(sensor_type, name)
            if sensor is None:
                return jsonify({
                    'success': False,
                    'error': f"Sensor not found: {sensor_type}/{name}"
                }), 404

            data = self._json_body()
            if data is None:
                return self._bad_body()
            active = data.get('active')
            if active is not None and not isinstance(active, bool):
                return jsonify({
                    'success': False,
                    'error': '"active" must be a boolean'
                }), 400

            try:
                self.security_service.change_sensor_activation_status(sensor, active)
                return jsonify({
                    'success': True,
                    'data': {
                        'sensor': sensor.to_dict(),
                        'status': self._status_payload()
                    }
                })
            except Exception as e:
                logger.error(f"Error changing sensor activation: {e}")
                return jsonify({
                    'success': False,
                    'error': str(e)
                }), 500

        @self.app.route('/api/image', methods=['POST'])
        def api_process_image():
            """Analyze an uploaded camera image."""
            upload = request.files.get('image')
            if upload is None:
                return jsonify({
                    'success': False,
                    'error': 'No image provided'
                }), 400

            buffer = np.frombuffer(upload.read(), dtype=np.uint8)
            image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
            if image is None:
                return jsonify({
                    'success': False,
                    'error': 'Could not decode image'
                }), 400

            try:
                self.security_service.process_image(image)
                return jsonify({
                    'success': True,
                    'data': self._status_payload()
                })
            except Exception as e:
                logger.error(f"Error processing image: {e}")
                return jsonify({
                    'success': False,
                    'error': str(e)
                }), 500

        @self.app.route('/api/events')
        def api_events():
            """Get recent notifications."""
            limit = request.args.get('limit', 50, type=int)
            return jsonify({
                'success': True,
                'data': self.event_log.get_events(limit)
            })

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({
                'success': False,
                'error': 'Not found'
            }), 404

        @self.app.errorhandler(413)
        def too_large(error):
            return jsonify({
                'success': False,
                'error': 'Uploaded image is too large'
            }), 413

    def run(self, host: str = '0.0.0.0', port: int = 5000, debug: bool = False):
        """Run the web application."""
        logger.info(f"Starting web server on {host}:{port}")
        self.app.run(host=host, port=port, debug=debug, threaded=True)


def build_security_service(config_manager: ConfigManager) -> SecurityService:
    """Wire repository and image service from the configuration."""
    config = config_manager.get_config()
    repository = create_repository(config.repository, config.data_file)
    image_service = create_image_service(config.image_service, config.cascade_path, config.random_seed)
    return SecurityService(repository, image_service, config.confidence_threshold)


def create_app(config_manager: Optional[ConfigManager] = None,
               security_service: Optional[SecurityService] = None) -> SecurityWebApp:
    """Create the web application, building the service from configuration if needed."""
    config_manager = config_manager or ConfigManager()
    if security_service is None:
        security_service = build_security_service(config_manager)
    return SecurityWebApp(security_service, config_manager.get_config().event_history_size)
