"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path

from common.constants import LOG_DIR, TRANSFER_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO):
        self.logs_dir = Path(logs_dir)

        # Set up main logger
        self.logger = logging.getLogger('remote_file_shell')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        # Set up file paths
        self.transfer_log_path = self.logs_dir / TRANSFER_LOG_FILE

    def set_level(self, log_level: int):
        """Change the level of the logger and its handlers."""
        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr: tuple, service: str = 'shell'):
        """Log client connection."""
        self.info(f"Client accepted on {service}. IP: {addr}")

    def log_disconnect(self, addr: tuple, service: str = 'shell'):
        """Log client disconnect."""
        self.info(f"Client logged out of {service}. IP: {addr}")

    def log_command(self, addr: tuple, line: str):
        """Log received shell command."""
        self.debug(f"Command from {addr}: {line!r}")

    def log_tree_failure(self, action: str, path, reason: str):
        """Log a single failed entry of a copy or delete."""
        self.warning(f"{action} failed for {path}: {reason}")

    def log_file_upload(self, filename: str, size: int, addr: tuple):
        """Log file upload."""
        self.info(f"✓ FILE UPLOAD SUCCESS: '{filename}' ({size} bytes) from {addr}")
        self._write_to_file(self.transfer_log_path, f"{datetime.now().isoformat()} | UPLOAD | {filename} | FROM: {addr} | SIZE: {size} bytes")

    def log_file_download(self, filename: str, size: int, addr: tuple):
        """Log file download."""
        self.info(f"✓ FILE DOWNLOAD SUCCESS: '{filename}' ({size} bytes) to {addr}")
        self._write_to_file(self.transfer_log_path, f"{datetime.now().isoformat()} | DOWNLOAD | {filename} | TO: {addr} | SIZE: {size} bytes")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except Exception as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
