"""
Logging configuration with JSON formatter for structured logging.

Records emitted inside a ``LogContext`` carry the reservation and user ids of
the operation being processed.
"""
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from core.config import Settings, settings as default_settings


_context: ContextVar[Dict[str, Any]] = ContextVar("reservation_log_context", default={})


class ReservationContextFilter(logging.Filter):
    """Copies the active ``LogContext`` fields onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding service metadata to each record."""

    def __init__(self, *args: Any, app_name: str = "", environment: str = "", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.app_name = app_name
        self.environment = environment

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['app_name'] = self.app_name
        log_record['environment'] = self.environment

        if record.exc_info:
            log_record['exc_info'] = self.formatException(record.exc_info)


def build_formatter(config: Settings) -> logging.Formatter:
    """JSON in staging/production, plain text everywhere else."""
    if config.app_env in ["production", "staging"]:
        return CustomJsonFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            app_name=config.app_name,
            environment=config.app_env,
        )
    return logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def setup_logging(config: Optional[Settings] = None) -> None:
    """
    Configure application logging.

    Args:
        config: Settings to read level and environment from
    """
    config = config or default_settings
    formatter = build_formatter(config)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(ReservationContextFilter())
    root_logger.addHandler(console_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if config.is_development and config.debug else logging.WARNING
    )

    logging.info(
        "Logging configured",
        extra={
            "log_level": config.log_level,
            "environment": config.app_env,
            "json_logging": isinstance(formatter, CustomJsonFormatter)
        }
    )


class LogContext:
    """
    Scope a reservation operation for logging.

    Every record logged inside the block carries the given fields. A failure
    leaving the block is logged once at WARNING with the same fields and then
    propagates.
    """

    def __init__(self, logger: logging.Logger, **fields: Any):
        self.logger = logger
        self.fields = {key: value for key, value in fields.items() if value is not None}
        self._token = None

    def __enter__(self) -> 'LogContext':
        self._token = _context.set({**_context.get(), **self.fields})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.logger.warning(f"{exc_type.__name__}: {exc_val}", extra=self.fields)
        _context.reset(self._token)

    @staticmethod
    def current() -> Dict[str, Any]:
        """Fields of the innermost active context."""
        return dict(_context.get())
