"""Configuration data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SystemConfig:
    """System configuration settings."""
    # Image analysis settings
    confidence_threshold: float = 0.5
    image_service: str = "fake"  # fake, opencv
    cascade_path: Optional[str] = None
    random_seed: Optional[int] = None

    # Repository settings
    repository: str = "memory"  # memory, json
    data_file: str = "data/security_state.json"

    # Web API settings
    web_host: str = "0.0.0.0"
    web_port: int = 5000
    event_history_size: int = 100

    # Logging settings
    log_level: str = "INFO"
    log_dir: str = "logs"
