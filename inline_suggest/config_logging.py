"""
InlineSuggest Logging & Errors
==============================
Structured logging and the exception hierarchy shared by every component.

Logging settings come from the ``logging`` section of the engine configuration
(see config.py). Errors carry a code and details so hosts can surface them as
diagnostics instead of interruptions.
"""

import sys
import json
import logging
import uuid
import time
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from contextlib import contextmanager
import threading
from contextvars import ContextVar

from .config import LoggingConfig, get_config

__version__ = "1.0.0"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread- and task-safe structured JSON logger with correlation IDs."""

    # Each thread and each asyncio task sees its own id
    _correlation_id: ContextVar = ContextVar('correlation_id', default=None)

    def __init__(self, name: str, config: Optional[LoggingConfig] = None):
        self.name = name
        self.config = config or get_config().logging
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.level.upper(), logging.INFO))
        self.logger.handlers.clear()
        self.logger.propagate = self.config.propagate

        if self.config.format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if self.config.to_file:
            from logging.handlers import RotatingFileHandler
            self.config.log_dir.mkdir(parents=True, exist_ok=True)
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for the current context."""
        cls._correlation_id.set(correlation_id)

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for the current context."""
        return cls._correlation_id.get() or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _build_log_record(self, level: str, message: str, **kwargs) -> Dict[str, Any]:
        """Build a structured log record."""
        return {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': level,
            'logger': self.name,
            'correlation_id': self.get_correlation_id(),
            'message': message,
            **kwargs
        }

    def _render(self, level: str, message: str, **kwargs) -> str:
        if self.config.format != 'json':
            return message
        return json.dumps(self._build_log_record(level, message, **kwargs), default=str)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self.logger.debug(self._render('DEBUG', message, **kwargs))

    def info(self, message: str, **kwargs):
        """Log info message."""
        self.logger.info(self._render('INFO', message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(self._render('WARNING', message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        if exc_info and self.config.format == 'json':
            import traceback
            kwargs['traceback'] = traceback.format_exc()
        self.logger.error(self._render('ERROR', message, **kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
            duration_ms = (time.time() - start_time) * 1000
            self.info(f"{operation} completed", operation=operation, status='completed',
                      duration_ms=round(duration_ms, 2), **context)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), exc_info=True, **context)
            raise


class JsonFormatter(logging.Formatter):
    """JSON log formatter.

    Messages produced by StructuredLogger are already JSON documents and are
    passed through; records from other loggers are wrapped.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if message.startswith('{') and not record.exc_info:
            return message

        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': message,
        }
        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


_loggers: Dict[str, StructuredLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance (one per name)."""
    with _loggers_lock:
        logger = _loggers.get(name)
        if logger is None:
            logger = StructuredLogger(name, get_config().logging)
            _loggers[name] = logger
        return logger


def reset_loggers():
    """Drop cached loggers so the next get_logger() picks up new config."""
    with _loggers_lock:
        _loggers.clear()


# =============================================================================
# ERROR HANDLING
# =============================================================================

class InlineSuggestError(Exception):
    """Base exception for InlineSuggest."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a diagnostics dict."""
        return {
            'code': self.code,
            'message': self.message,
            'details': self.details
        }


class MappingError(InlineSuggestError):
    """A linear offset or structured coordinate could not be mapped."""
    def __init__(self, message: str, code: str = "MAPPING_ERROR", **kwargs):
        super().__init__(message, code=code, details=kwargs)


class OutOfRange(MappingError):
    """Offset lies outside the block's flattened text."""
    def __init__(self, offset: int, total: int, **kwargs):
        super().__init__(f"Offset {offset} outside block of length {total}",
                         code="OUT_OF_RANGE", offset=offset, total=total, **kwargs)


class UnknownSegment(MappingError):
    """Coordinate refers to a segment that is not in the current index."""
    def __init__(self, path, **kwargs):
        super().__init__(f"Segment {tuple(path)} is not part of the current index",
                         code="UNKNOWN_SEGMENT", path=tuple(path), **kwargs)


class SourceUnavailable(InlineSuggestError):
    """A remote collaborator failed or returned garbage."""
    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        super().__init__(message, code="SOURCE_UNAVAILABLE",
                         details={'source': source, **kwargs})


class InvalidRule(InlineSuggestError):
    """A user-defined rule pattern cannot be compiled or is unsafe to run."""
    def __init__(self, message: str, pattern: Optional[str] = None, **kwargs):
        super().__init__(message, code="INVALID_RULE",
                         details={'pattern': pattern, **kwargs})
