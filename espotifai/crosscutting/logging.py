import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from contextvars import ContextVar

# Context variables for correlation
operation_var: ContextVar[Optional[str]] = ContextVar('operation', default=None)
playlist_var: ContextVar[Optional[str]] = ContextVar('playlist', default=None)


class SecretMasker:
    """Masks sensitive information in log messages."""

    def __init__(self):
        """Initialize secret masker with patterns."""
        self.patterns = [
            # API tokens and keys
            r'(?i)(token|key|secret|password|auth)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{10,})["\']?',
            # Spotify access tokens
            r'(?i)(spotify_access_token|access_token)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{50,})["\']?',
            # Client secrets
            r'(?i)(client_secret)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{20,})["\']?',
            # Bearer headers
            r'(?i)(bearer)[\s]+([a-zA-Z0-9\-_\.]{20,})',
        ]

        self.compiled_patterns = [re.compile(pattern) for pattern in self.patterns]
        self.sensitive_keys = {'token', 'access_token', 'client_secret', 'secret'}

    def mask_value(self, secret: str) -> str:
        """Keep first 4 and last 4 characters, mask the rest."""
        if len(secret) > 8:
            return secret[:4] + '*' * (len(secret) - 8) + secret[-4:]
        return '*' * len(secret)

    def mask_secrets(self, text: str) -> str:
        """Mask sensitive information in text."""
        if not text:
            return text

        masked_text = text

        for pattern in self.compiled_patterns:
            def replace_match(match):
                return f"{match.group(1)}: {self.mask_value(match.group(2))}"

            masked_text = pattern.sub(replace_match, masked_text)

        return masked_text

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask sensitive information in dictionary."""
        if not data:
            return data

        masked_data = {}

        for key, value in data.items():
            if isinstance(value, str) and key.lower() in self.sensitive_keys:
                masked_data[key] = self.mask_value(value)
            elif isinstance(value, str):
                masked_data[key] = self.mask_secrets(value)
            elif isinstance(value, dict):
                masked_data[key] = self.mask_dict(value)
            elif isinstance(value, list):
                masked_data[key] = [self.mask_dict(item) if isinstance(item, dict)
                                  else self.mask_secrets(item) if isinstance(item, str)
                                  else item for item in value]
            else:
                masked_data[key] = value

        return masked_data


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self):
        """Initialize formatter."""
        super().__init__()
        self.masker = SecretMasker()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        operation = operation_var.get()
        playlist = playlist_var.get()

        log_entry = {
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': self.masker.mask_secrets(record.getMessage()),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if operation:
            log_entry['operation'] = operation
        if playlist:
            log_entry['playlist'] = playlist

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'fields') and record.fields:
            log_entry['fields'] = self.masker.mask_dict(record.fields)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class CorrelationContext:
    """Context manager for correlation data."""

    def __init__(self, operation: Optional[str] = None, playlist: Optional[str] = None):
        """Initialize correlation context."""
        self.operation = operation
        self.playlist = playlist
        self._tokens = []

    def __enter__(self):
        """Set correlation context."""
        if self.operation is not None:
            self._tokens.append((operation_var, operation_var.set(self.operation)))
        if self.playlist is not None:
            self._tokens.append((playlist_var, playlist_var.set(self.playlist)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Restore correlation context."""
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> logging.Logger:
    """Setup structured logging for the espotifai logger tree."""
    logger = logging.getLogger('espotifai')
    logger.setLevel(getattr(logging, level.upper()))

    logger.handlers.clear()

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = 'espotifai') -> logging.Logger:
    """Get logger with structured formatting."""
    return logging.getLogger(name)


def log_with_fields(logger: logging.Logger, level: str, message: str,
                   fields: Optional[Dict[str, Any]] = None, exc_info=None, **kwargs):
    """Log message with additional fields."""
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    if exc_info is True:
        exc_info = sys.exc_info()

    record = logger.makeRecord(
        logger.name, levelno, '', 0, message, (), exc_info or None
    )

    merged = dict(fields or {})
    merged.update(kwargs)
    if merged:
        record.fields = merged

    logger.handle(record)


def log_dispatch(logger: logging.Logger, operation: str, outcome: str, **kwargs):
    """Log the outcome delivered to a listener."""
    level = 'INFO' if outcome == 'success' else 'WARNING'
    log_with_fields(logger, level, f'{operation} {outcome}', {
        'operation': operation,
        'outcome': outcome,
        **kwargs
    })


def log_error(logger: logging.Logger, message: str, error: Exception, **kwargs):
    """Log error with exception details."""
    log_with_fields(logger, 'ERROR', message, {
        'error_type': type(error).__name__,
        'error_message': str(error),
        **kwargs
    }, exc_info=(type(error), error, error.__traceback__))
