"""Unit tests for web application."""

import io
import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import cv2
import numpy as np

from catpoint_security.config_manager import ConfigManager
from catpoint_security.models.sensor import Sensor, SensorType
from catpoint_security.models.status import ArmingStatus, AlarmStatus
from catpoint_security.services.interfaces import ImageServiceInterface
from catpoint_security.services.repository import InMemorySecurityRepository
from catpoint_security.services.security_service import SecurityService
from catpoint_security.services.image_service import FakeImageService
from catpoint_security.web.app import SecurityWebApp, EventLogListener, create_app


def encode_png(image):
    ok, buffer = cv2.imencode('.png', image)
    return io.BytesIO(buffer.tobytes())


class TestSecurityWebApp(unittest.TestCase):
    """Test cases for SecurityWebApp."""

    def setUp(self):
        """Set up test fixtures."""
        self.repository = InMemorySecurityRepository()
        self.image_service = Mock(spec=ImageServiceInterface)
        self.image_service.image_contains_cat.return_value = False
        self.service = SecurityService(self.repository, self.image_service)

        self.web_app = SecurityWebApp(self.service)
        self.web_app.app.config['TESTING'] = True
        self.client = self.web_app.app.test_client()

    def test_status(self):
        response = self.client.get('/api/status')
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data['success'])
        self.assertEqual(data['data']['arming_status'], 'DISARMED')
        self.assertEqual(data['data']['alarm_status'], 'NO_ALARM')
        self.assertFalse(data['data']['cat_detected'])

    def test_set_arming(self):
        response = self.client.post('/api/arming', json={'status': 'ARMED_AWAY'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['data']['arming_status'], 'ARMED_AWAY')
        self.assertEqual(self.repository.get_arming_status(), ArmingStatus.ARMED_AWAY)

    def test_set_arming_unknown_status(self):
        response = self.client.post('/api/arming', json={'status': 'ARMED_MOON'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.get_json()['success'])

    def test_add_and_list_sensors(self):
        response = self.client.post('/api/sensors', json={'name': 'front-door', 'sensor_type': 'DOOR'})
        self.assertEqual(response.status_code, 201)

        response = self.client.get('/api/sensors')
        self.assertEqual(response.get_json()['data'], [
            {'name': 'front-door', 'sensor_type': 'DOOR', 'active': False}
        ])

    def test_add_sensor_validation(self):
        response = self.client.post('/api/sensors', json={'sensor_type': 'DOOR'})
        self.assertEqual(response.status_code, 400)

        response = self.client.post('/api/sensors', json={'name': 'x', 'sensor_type': 'LASER'})
        self.assertEqual(response.status_code, 400)

    def test_remove_sensor(self):
        self.repository.add_sensor(Sensor('hall', SensorType.MOTION))

        response = self.client.delete('/api/sensors/MOTION/hall')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.repository.get_sensors(), set())

        response = self.client.delete('/api/sensors/MOTION/hall')
        self.assertEqual(response.status_code, 404)

    def test_sensor_activation_drives_alarm(self):
        self.repository.add_sensor(Sensor('front-door', SensorType.DOOR))
        self.client.post('/api/arming', json={'status': 'ARMED_HOME'})

        response = self.client.post('/api/sensors/DOOR/front-door/activation', json={'active': True})
        self.assertEqual(response.status_code, 200)
        data = response.get_json()['data']
        self.assertTrue(data['sensor']['active'])
        self.assertEqual(data['status']['alarm_status'], 'PENDING_ALARM')

        response = self.client.post('/api/sensors/DOOR/front-door/activation', json={})
        self.assertEqual(response.get_json()['data']['status']['alarm_status'], 'NO_ALARM')

    def test_sensor_activation_validation(self):
        self.repository.add_sensor(Sensor('front-door', SensorType.DOOR))

        response = self.client.post('/api/sensors/DOOR/front-door/activation', json={'active': 'yes'})
        self.assertEqual(response.status_code, 400)

        response = self.client.post('/api/sensors/DOOR/back-door/activation', json={'active': True})
        self.assertEqual(response.status_code, 404)

        response = self.client.post('/api/sensors/LASER/front-door/activation', json={'active': True})
        self.assertEqual(response.status_code, 404)

    def test_sensors_sharing_a_name_are_addressed_by_type(self):
        door = Sensor('porch', SensorType.DOOR)
        motion = Sensor('porch', SensorType.MOTION)
        self.repository.add_sensor(door)
        self.repository.add_sensor(motion)

        response = self.client.post('/api/sensors/MOTION/porch/activation', json={'active': True})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['data']['sensor']['sensor_type'], 'MOTION')
        self.assertTrue(motion.active)
        self.assertFalse(door.active)

        response = self.client.delete('/api/sensors/DOOR/porch')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.repository.get_sensors(), {motion})

    def test_malformed_json_bodies_rejected(self):
        self.repository.add_sensor(Sensor('front-door', SensorType.DOOR))

        requests = [
            ('/api/arming', ['ARMED_HOME']),
            ('/api/arming', {'status': ['ARMED_HOME']}),
            ('/api/arming', {'status': {'a': 1}}),
            ('/api/sensors', ['front-door']),
            ('/api/sensors', {'name': 'x', 'sensor_type': {'a': 1}}),
            ('/api/sensors', {'name': 'x', 'sensor_type': ['DOOR']}),
            ('/api/sensors', {'name': 42, 'sensor_type': 'DOOR'}),
            ('/api/sensors', {'name': ['x'], 'sensor_type': 'DOOR'}),
            ('/api/sensors/DOOR/front-door/activation', [True]),
            ('/api/sensors/DOOR/front-door/activation', 'active'),
        ]
        for url, body in requests:
            with self.subTest(url=url, body=body):
                response = self.client.post(url, json=body)
                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.get_json()['success'])

        self.assertEqual(self.repository.get_arming_status(), ArmingStatus.DISARMED)
        self.assertEqual(self.repository.get_sensors(), {Sensor('front-door', SensorType.DOOR)})

    def test_process_image(self):
        self.client.post('/api/arming', json={'status': 'ARMED_HOME'})
        self.image_service.image_contains_cat.return_value = True
        image = np.zeros((32, 32, 3), dtype=np.uint8)

        response = self.client.post('/api/image', data={'image': (encode_png(image), 'frame.png')},
                                    content_type='multipart/form-data')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()['data']
        self.assertEqual(data['alarm_status'], 'ALARM')
        self.assertTrue(data['cat_detected'])
        decoded = self.image_service.image_contains_cat.call_args[0][0]
        self.assertEqual(decoded.shape, (32, 32, 3))

    def test_process_image_validation(self):
        response = self.client.post('/api/image', data={}, content_type='multipart/form-data')
        self.assertEqual(response.status_code, 400)

        response = self.client.post('/api/image', data={'image': (io.BytesIO(b'not an image'), 'x.png')},
                                    content_type='multipart/form-data')
        self.assertEqual(response.status_code, 400)
        self.image_service.image_contains_cat.assert_not_called()

    def test_process_image_error(self):
        self.image_service.image_contains_cat.side_effect = RuntimeError("classifier down")
        image = np.zeros((8, 8, 3), dtype=np.uint8)

        response = self.client.post('/api/image', data={'image': (encode_png(image), 'frame.png')},
                                    content_type='multipart/form-data')

        self.assertEqual(response.status_code, 500)
        self.assertIn('classifier down', response.get_json()['error'])

    def test_events(self):
        self.repository.add_sensor(Sensor('front-door', SensorType.DOOR))
        self.client.post('/api/arming', json={'status': 'ARMED_HOME'})
        self.client.post('/api/sensors/DOOR/front-door/activation', json={'active': True})

        response = self.client.get('/api/events')
        events = response.get_json()['data']
        types = [event['type'] for event in events]
        self.assertEqual(types, ['sensor_status_changed', 'sensor_status_changed', 'alarm_status_changed'])
        self.assertEqual(events[-1]['data'], {'alarm_status': 'PENDING_ALARM'})

        response = self.client.get('/api/events?limit=1')
        self.assertEqual(len(response.get_json()['data']), 1)

    def test_unknown_route(self):
        response = self.client.get('/api/nothing')
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.get_json()['success'])


class TestEventLogListener(unittest.TestCase):
    """Test cases for EventLogListener."""

    def test_history_is_bounded(self):
        listener = EventLogListener(max_events=3)
        for status in (AlarmStatus.PENDING_ALARM, AlarmStatus.ALARM, AlarmStatus.NO_ALARM):
            listener.on_alarm_status_changed(status)
        listener.on_cat_detected(True)

        events = listener.get_events()
        self.assertEqual(len(events), 3)
        self.assertEqual(events[-1]['type'], 'cat_detected')
        self.assertEqual(listener.get_events(0), [])


class TestCreateApp(unittest.TestCase):
    """Test cases for the application factory."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = tempfile.mkdtemp()
        self.config_manager = ConfigManager(os.path.join(self.test_dir, "config.json"))

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_builds_service_from_config(self):
        self.config_manager.update_config(
            repository="json",
            data_file=os.path.join(self.test_dir, "state.json"),
            confidence_threshold=0.9,
            random_seed=7
        )

        web_app = create_app(self.config_manager)

        self.assertIsInstance(web_app.security_service.image_service, FakeImageService)
        self.assertEqual(web_app.security_service.confidence_threshold, 0.9)

        client = web_app.app.test_client()
        client.post('/api/sensors', json={'name': 'door', 'sensor_type': 'DOOR'})
        self.assertTrue(os.path.exists(os.path.join(self.test_dir, "state.json")))


if __name__ == '__main__':
    unittest.main()
