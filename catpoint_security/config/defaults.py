"""Default configuration values and constants."""

from typing import Dict, Any

# Default system configuration
DEFAULT_CONFIG: Dict[str, Any] = {
    # Image analysis settings
    "confidence_threshold": 0.5,
    "image_service": "fake",
    "cascade_path": None,
    "random_seed": None,

    # Repository settings
    "repository": "memory",
    "data_file": "data/security_state.json",

    # Web API settings
    "web_host": "0.0.0.0",
    "web_port": 5000,
    "event_history_size": 100,

    # Logging settings
    "log_level": "INFO",
    "log_dir": "logs"
}

# System constants
SYSTEM_CONSTANTS = {
    "REPOSITORY_WRITE_ATTEMPTS": 3,
    "REPOSITORY_RETRY_DELAY_SECONDS": 0.1,
    "MAX_UPLOAD_SIZE_MB": 16,
    "LOG_ROTATION_SIZE_MB": 10
}

# File paths and directories
DEFAULT_PATHS = {
    "config_file": "config.json",
    "data_dir": "data",
    "logs_dir": "logs"
}

# Haar cascade settings for the OpenCV image service
MODEL_SETTINGS = {
    "cascade_files": (
        "haarcascade_frontalcatface.xml",
        "haarcascade_frontalcatface_extended.xml"
    ),
    "scale_factor": 1.1,
    "min_neighbors": 3,
    "min_size": (30, 30),
    "max_size": (300, 300)
}

IMAGE_SERVICES = ("fake", "opencv")
REPOSITORIES = ("memory", "json")
