import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(funcName)s:%(lineno)d %(message)s'
SIMPLE_FORMAT = '%(asctime)s %(levelname)s %(message)s'

AGENT_LOGGERS = [
    'specdraft_api.agent.executor',
    'specdraft_api.agent.controller',
    'specdraft_api.agent.generation',
    'specdraft_api.agent.observers',
    'specdraft_api.agent.router',
]


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    enable_structured_logging: bool = False,
) -> None:
    """Configure logging with optional file rotation and structured output."""

    env_level = os.getenv('SPECDRAFT_LOG_LEVEL', '').upper()
    if env_level in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
        level = getattr(logging, env_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(_build_formatter(enable_structured_logging))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(_build_formatter(enable_structured_logging))
        root_logger.addHandler(file_handler)

    configure_agent_loggers(level)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured - Level: {logging.getLevelName(level)}")
    if log_file:
        logger.info(f"Log file: {log_file}")


def _build_formatter(structured: bool) -> logging.Formatter:
    if structured:
        return StructuredFormatter()
    return logging.Formatter(LOG_FORMAT)


def configure_agent_loggers(level: int) -> None:
    """Align the agent component loggers with the root level."""
    for logger_name in AGENT_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)

    # Executor and controller carry the per-action trace
    if level == logging.DEBUG:
        logging.getLogger('specdraft_api.agent.executor').setLevel(logging.DEBUG)
        logging.getLogger('specdraft_api.agent.controller').setLevel(logging.DEBUG)


class StructuredFormatter(logging.Formatter):
    """Structured JSON formatter for production logging."""

    EXTRA_FIELDS = ('request_id', 'action_type', 'section', 'format')

    def format(self, record: logging.LogRecord) -> str:
        import json
        from datetime import datetime, timezone

        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        return json.dumps(log_entry, ensure_ascii=False)


def get_agent_logger(name: str) -> logging.Logger:
    """Get a logger namespaced under the agent package."""
    return logging.getLogger(f'specdraft_api.agent.{name}')


def log_agent_operation(
    logger: logging.Logger,
    operation: str,
    request_id: Optional[str] = None,
    action_type: Optional[str] = None,
    section: Optional[str] = None,
    level: int = logging.INFO,
    **kwargs
) -> None:
    """Log an agent operation with structured context."""
    extra = {}
    if request_id:
        extra['request_id'] = request_id
    if action_type:
        extra['action_type'] = action_type
    if section:
        extra['section'] = section

    extra.update(kwargs)

    logger.log(level, operation, extra=extra)
