"""
Logging helpers shared by the handshake client and the user service.

- LogTimer: time a block and log how long it took
- RequestLogger: one line per served HTTP request
"""

import logging
import time
from typing import Optional

from PlayGate.core.logging import get_logger


class LogTimer:
    """
    Context manager for timing operations and logging the duration.

    Example:
        with LogTimer("login exchange", logger):
            response = await session.post(url, json=payload)
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        level: int = logging.DEBUG
    ):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.level = level
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> 'LogTimer':
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return

        self.duration = time.perf_counter() - self.start_time
        if exc_type is not None:
            self.logger.log(
                self.level,
                "Operation '%s' failed after %.4f seconds: %s",
                self.operation, self.duration, exc_val
            )
        else:
            self.logger.log(
                self.level,
                "Operation '%s' completed in %.4f seconds",
                self.operation, self.duration
            )


class RequestLogger:
    """
    Utility for logging served HTTP requests.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger(__name__)

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration: float,
    ) -> None:
        """
        Log an HTTP request.

        Args:
            method: HTTP method
            path: Request path
            status_code: Response status code
            duration: Request duration in seconds
        """
        level = logging.INFO if status_code < 400 else logging.WARNING
        self.logger.log(level, "%s %s - %d (%.4fs)", method, path, status_code, duration)


__all__ = [
    'LogTimer',
    'RequestLogger',
]
