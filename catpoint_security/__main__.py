"""Entry point for the catpoint security web service."""

import argparse
import sys
from typing import List, Optional

from .config_manager import ConfigManager
from .logging_config import setup_logging, get_logger
from .web.app import create_app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='catpoint-security',
        description='Run the catpoint home security service and its JSON API.'
    )
    parser.add_argument('--config', default=None,
                        help='Path to the JSON configuration file (default: config.json)')
    parser.add_argument('--host', default=None, help='Override the configured web host')
    parser.add_argument('--port', type=int, default=None, help='Override the configured web port')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the security service."""
    args = parse_args(argv)

    config_manager = ConfigManager(args.config)
    config = config_manager.get_config()
    setup_logging(config.log_level, config.log_dir)
    logger = get_logger("main")

    if not config_manager.validate_config():
        logger.error(f"Invalid configuration in {config_manager.config_path}")
        return 1

    logger.info("Starting catpoint security service")
    try:
        web_app = create_app(config_manager)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Security service failed to start: {e}")
        return 1

    try:
        web_app.run(host=args.host or config.web_host, port=args.port or config.web_port)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    return 0


if __name__ == "__main__":
    sys.exit(main())
