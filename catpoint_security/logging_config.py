"""Centralized logging configuration for the catpoint security system."""

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from typing import Optional, Dict, Any
from pathlib import Path

ROOT_LOGGER_NAME = "catpoint"


class StructuredFormatter(logging.Formatter):
    """Formatter that appends the record's context dictionary, if any."""

    def __init__(self, include_context: bool = True):
        self.include_context = include_context
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        base_format = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"

        if self.include_context and hasattr(record, 'context'):
            context_str = " | ".join([f"{k}={v}" for k, v in record.context.items()])
            base_format += f" | Context: {context_str}"

        if record.levelno >= logging.ERROR and record.exc_info:
            base_format += " | %(pathname)s:%(lineno)d"

        formatter = logging.Formatter(base_format)
        return formatter.format(record)


class ContextFilter(logging.Filter):
    """Filter that tags records with the component and process id."""

    def __init__(self, component_name: Optional[str] = None):
        super().__init__()
        self.component_name = component_name
        self.process_id = os.getpid()

    def filter(self, record: logging.LogRecord) -> bool:
        record.process_id = self.process_id
        if self.component_name:
            record.component = self.component_name
        return True


class LoggingManager:
    """Owns the handlers of the ``catpoint`` logger hierarchy.

    Component loggers can be requested before any handler is installed;
    records simply propagate to whatever handlers exist at the time.
    ``configure`` installs a console handler and, when a log directory is
    given, rotating main and error log files.
    """

    def __init__(self):
        self.log_dir: Optional[Path] = None
        self.log_level = logging.INFO
        self.max_log_size = 10 * 1024 * 1024  # 10MB
        self.backup_count = 5
        self.component_loggers: Dict[str, logging.Logger] = {}
        self._handlers = []

    def configure(self, log_level: int = logging.INFO, log_dir: Optional[str] = None,
                  console: bool = True) -> None:
        """Install handlers on the package logger, replacing earlier ones."""
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers = []

        self.log_level = log_level
        root_logger.setLevel(log_level)

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(StructuredFormatter(include_context=False))
            self._add_handler(root_logger, console_handler)

        if log_dir:
            self.log_dir = Path(log_dir)
            self.log_dir.mkdir(parents=True, exist_ok=True)

            main_file_handler = logging.handlers.RotatingFileHandler(
                self.log_dir / "catpoint.log",
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            main_file_handler.setLevel(logging.DEBUG)
            main_file_handler.setFormatter(StructuredFormatter(include_context=True))
            self._add_handler(root_logger, main_file_handler)

            # Errors and critical only
            error_file_handler = logging.handlers.RotatingFileHandler(
                self.log_dir / "errors.log",
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(StructuredFormatter(include_context=True))
            self._add_handler(root_logger, error_file_handler)

        root_logger.info("Logging system initialized")

    def _add_handler(self, logger: logging.Logger, handler: logging.Handler) -> None:
        logger.addHandler(handler)
        self._handlers.append(handler)

    def get_component_logger(self, component_name: str) -> logging.Logger:
        """Get or create a logger for a specific component."""
        if component_name in self.component_loggers:
            return self.component_loggers[component_name]

        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component_name}")
        logger.addFilter(ContextFilter(component_name))

        self.component_loggers[component_name] = logger
        return logger

    def log_with_context(self, logger: logging.Logger, level: int,
                         message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log message with an attached context dictionary."""
        if context:
            logger.log(level, message, extra={'context': context})
        else:
            logger.log(level, message)

    def get_log_stats(self) -> Dict[str, Any]:
        """Get logging statistics."""
        stats = {
            "log_directory": str(self.log_dir) if self.log_dir else None,
            "log_files": {},
            "active_loggers": list(self.component_loggers.keys()),
            "log_level": logging.getLevelName(self.log_level)
        }

        if self.log_dir is not None:
            for log_file in self.log_dir.glob("*.log"):
                stats["log_files"][log_file.name] = {
                    "size_mb": log_file.stat().st_size / (1024 * 1024),
                    "modified": datetime.fromtimestamp(log_file.stat().st_mtime).isoformat()
                }

        return stats


# Global logging manager instance
logging_manager = LoggingManager()


def get_logger(component_name: str) -> logging.Logger:
    """Convenience function to get a component logger."""
    return logging_manager.get_component_logger(component_name)


def log_with_context(logger: logging.Logger, level: int, message: str,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Convenience wrapper around ``LoggingManager.log_with_context``."""
    logging_manager.log_with_context(logger, level, message, context)


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs") -> LoggingManager:
    """Setup centralized logging system."""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging_manager.configure(numeric_level, log_dir)
    return logging_manager
