"""
Logging utilities.

Context-carrying logger adapter and execution timing decorator used by
repositories, services and the API layer.
"""

import logging
import time
from contextvars import ContextVar
from functools import wraps
from typing import Optional

# Context variable for request tracking
request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)


class LoggerAdapter:
    """Logger wrapper that stamps the current request ID onto every record."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level: int, message: str, *args, **kwargs):
        """Internal log method with request context"""
        extra = dict(kwargs.get('extra') or {})
        req_id = request_id.get()
        if req_id and 'request_id' not in extra:
            extra['request_id'] = req_id
        kwargs['extra'] = extra

        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs):
        self._log(logging.CRITICAL, message, *args, **kwargs)

    def isEnabledFor(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)


def get_logger(name: Optional[str] = None) -> LoggerAdapter:
    """
    Get configured logger instance.

    Args:
        name: Logger name (defaults to caller's module)

    Returns:
        Enhanced logger adapter
    """
    if name is None:
        import inspect
        frame = inspect.currentframe()
        caller_frame = frame.f_back
        name = caller_frame.f_globals.get('__name__', 'lodging')

    return LoggerAdapter(logging.getLogger(name))


def log_execution_time(operation_name: Optional[str] = None, logger_name: Optional[str] = None):
    """
    Decorator to log function execution time.

    Args:
        operation_name: Label used in the log line (defaults to the function name)
        logger_name: Custom logger name
    """
    def decorator(func):
        logger = get_logger(logger_name or func.__module__)
        label = operation_name or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - started
                logger.error(
                    f"Operation '{label}' failed after {elapsed:.3f}s: {e}",
                    extra={'operation': label, 'execution_time': elapsed, 'error_type': type(e).__name__},
                )
                raise

            elapsed = time.perf_counter() - started
            logger.info(
                f"Operation '{label}' completed in {elapsed:.3f}s",
                extra={'operation': label, 'execution_time': elapsed},
            )
            return result

        return wrapper

    return decorator


__all__ = [
    'get_logger',
    'log_execution_time',
    'LoggerAdapter',
    'request_id',
]
