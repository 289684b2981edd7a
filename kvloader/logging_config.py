"""
Logging Configuration for kvloader.

Provides centralized logging setup with a verbose toggle and text or JSON
output. Library modules only call logging.getLogger(__name__); handlers are
installed by setup_logging(), which the kvctl CLI calls at startup.

Usage:
    from kvloader.logging_config import setup_logging, get_logger

    setup_logging(verbose=True)
    logger = get_logger('kvloader.cli')
    logger.info("Loaded pairs", extra={'extra_data': {'count': 3}})

Secret values are never passed to the logger; only keys, paths and counts.
"""

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO


# =============================================================================
# CONFIGURATION STATE
# =============================================================================

@dataclass
class LoggingState:
    """Current logging configuration."""
    verbose: bool = False
    log_file: Optional[str] = None
    json_format: bool = False
    initialized: bool = False


_state = LoggingState()


# =============================================================================
# CUSTOM FORMATTER
# =============================================================================

class KvFormatter(logging.Formatter):
    """Formatter with color support and structured output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33;1m',  # Bold yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[31;1m', # Bold red
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True, json_format: bool = False, stream: Optional[TextIO] = None):
        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()
        self.json_format = json_format
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        if self.json_format:
            return self._format_json(record)
        return self._format_text(record)

    def _format_text(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        level_name = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level_name, '')
            reset = self.COLORS['RESET']
            level_str = f"{color}{level_name:8}{reset}"
        else:
            level_str = f"{level_name:8}"

        component = self._extract_component(record.name)
        msg = record.getMessage()

        extra_str = ""
        if hasattr(record, 'extra_data') and record.extra_data:
            extra_items = [f"{k}={v}" for k, v in record.extra_data.items()]
            extra_str = f" | {', '.join(extra_items)}"

        text = f"{timestamp} {level_str} [{component}] {msg}{extra_str}"
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text

    def _format_json(self, record: logging.LogRecord) -> str:
        data = {
            'timestamp': datetime.now().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'component': self._extract_component(record.name),
        }

        if hasattr(record, 'extra_data') and record.extra_data:
            data['extra'] = record.extra_data

        if record.exc_info:
            data['exception'] = self.formatException(record.exc_info)

        return json.dumps(data)

    def _extract_component(self, logger_name: str) -> str:
        """kvloader.crypto.decrypt -> crypto"""
        parts = logger_name.split('.')
        if len(parts) >= 2 and parts[0] == 'kvloader':
            return parts[1]
        return parts[0] if parts[0] else 'core'


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Initialize logging for the kvloader package.

    Console output goes to stderr so that stdout stays clean for loaded
    values.

    Args:
        verbose: Log at DEBUG instead of WARNING
        log_file: Optional file path for log output
        json_format: Use JSON format for logs
        stream: Console stream (stderr by default)
    """
    stream = stream if stream is not None else sys.stderr
    level = logging.DEBUG if verbose else logging.WARNING

    _state.verbose = verbose
    _state.log_file = log_file
    _state.json_format = json_format

    package_logger = logging.getLogger('kvloader')
    package_logger.setLevel(level)

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(level)
    console_handler.setFormatter(KvFormatter(use_colors=True, json_format=json_format, stream=stream))
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(KvFormatter(use_colors=False, json_format=json_format))
        package_logger.addHandler(file_handler)

    _state.initialized = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the kvloader namespace."""
    if not name.startswith('kvloader'):
        name = f"kvloader.{name}"
    return logging.getLogger(name)


def is_verbose() -> bool:
    return _state.verbose
