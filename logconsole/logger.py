"""
stdlib logging integration: JSON records rendered through a ConsoleWriter.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, FrozenSet, Iterable, Optional, TextIO, Union

from logconsole.formatters import (
    CALLER_FIELD_NAME,
    CONTEXT_FIELD_NAME,
    DEFAULT_TIME_FORMAT,
    ERROR_FIELD_NAME,
    LEVEL_FIELD_NAME,
    MESSAGE_FIELD_NAME,
    MODE_FIELD_NAME,
    TIMESTAMP_FIELD_NAME,
)
from logconsole.writer import ConsoleWriter

TRACE = 5
logging.addLevelName(TRACE, 'TRACE')

STACK_FIELD_NAME = 'stack'

# Upper bound of each stdlib level range and the record value it maps to
LEVEL_VALUES = (
    (TRACE, 'trace'),
    (logging.DEBUG, 'debug'),
    (logging.INFO, 'info'),
    (logging.WARNING, 'warn'),
    (logging.ERROR, 'error'),
)

LEVEL_ALIASES = {
    'trace': TRACE,
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'fatal': logging.CRITICAL,
    'critical': logging.CRITICAL,
}


def level_value(levelno: int) -> str:
    """Record level string for a stdlib level number"""
    for upper, value in LEVEL_VALUES:
        if levelno <= upper:
            return value
    return 'fatal'


def resolve_level(level: Union[int, str]) -> int:
    """Accept a level number or a case-insensitive level name"""
    if isinstance(level, int):
        return level
    try:
        return LEVEL_ALIASES[level.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level '{level}'. "
            f"Valid levels: {', '.join(LEVEL_ALIASES)}"
        )


class JSONFormatter(logging.Formatter):
    """
    Formats a LogRecord as one JSON record for ConsoleWriter.

    Output format:
    {
        "time": "2026-02-08T20:30:00.123456+01:00",
        "level": "info",
        "message": "User logged in",
        "ctx": "auth",          # from extra={'ctx': ...}
        "mode": "dry-run",      # from extra={'mode': ...}
        "user_id": 123          # from extra={'fields': {...}}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data = {
            TIMESTAMP_FIELD_NAME: datetime.fromtimestamp(record.created).astimezone().isoformat(),
            LEVEL_FIELD_NAME: level_value(record.levelno),
            MESSAGE_FIELD_NAME: record.getMessage(),
        }

        ctx = getattr(record, CONTEXT_FIELD_NAME, None)
        if ctx:
            log_data[CONTEXT_FIELD_NAME] = ctx

        mode = getattr(record, MODE_FIELD_NAME, None)
        if mode:
            log_data[MODE_FIELD_NAME] = mode

        # Extra fields never replace the standard ones
        extra_fields = getattr(record, 'fields', None)
        if extra_fields:
            for key, value in extra_fields.items():
                log_data.setdefault(str(key), value)

        if record.exc_info:
            log_data[ERROR_FIELD_NAME] = str(record.exc_info[1])
            log_data[STACK_FIELD_NAME] = self.formatException(record.exc_info)

        # Add source location in debug mode
        if record.levelno <= logging.DEBUG:
            log_data[CALLER_FIELD_NAME] = f'{record.pathname}:{record.lineno}'

        return json.dumps(log_data, default=str)


class ConsoleHandler(logging.Handler):
    """Handler that renders each record on a ConsoleWriter"""

    def __init__(self, writer: Optional[ConsoleWriter] = None, level: int = logging.NOTSET, **options):
        super().__init__(level)
        self.writer = writer or ConsoleWriter(**options)
        self.setFormatter(JSONFormatter())

    def flush(self):
        self.acquire()
        try:
            out = self.writer.out
            if out is not None and hasattr(out, 'flush'):
                out.flush()
        finally:
            self.release()

    def emit(self, record: logging.LogRecord):
        try:
            self.writer.write(self.format(record))
            self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


@dataclass
class LoggingConfig:
    """Settings for init_logging()"""
    name: str = 'logconsole'
    level: Union[int, str] = logging.INFO
    no_color: bool = False
    time_format: str = DEFAULT_TIME_FORMAT
    out: Optional[TextIO] = None
    parts_exclude: FrozenSet[str] = field(default_factory=frozenset)
    fields_exclude: FrozenSet[str] = field(default_factory=frozenset)


def init_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure a named logger to render through a ConsoleHandler.

    Calling it again for the same name replaces the handler instead of
    adding a second one.

    Args:
        config: Logging settings (default: LoggingConfig())

    Returns:
        Configured logger instance

    Example:
        logger = init_logging(LoggingConfig(name='worker', level='debug'))
        logger.info('Job done', extra={'ctx': 'jobs', 'fields': {'id': 7}})
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(config.name)
    teardown_logging(logger)

    logger.setLevel(resolve_level(config.level))
    writer = ConsoleWriter(
        out=config.out,
        no_color=config.no_color,
        time_format=config.time_format,
        parts_exclude=config.parts_exclude,
        fields_exclude=config.fields_exclude
    )
    logger.addHandler(ConsoleHandler(writer))
    return logger


def teardown_logging(logger: logging.Logger) -> None:
    """Remove and close the ConsoleHandlers attached to logger"""
    for handler in list(logger.handlers):
        if isinstance(handler, ConsoleHandler):
            logger.removeHandler(handler)
            handler.close()


def set_level(logger: logging.Logger, level: Union[int, str]) -> None:
    logger.setLevel(resolve_level(level))


def get_level(logger: logging.Logger) -> int:
    return logger.level


def logger_for_level(logger: logging.Logger, level: str) -> Callable[..., None]:
    """Logging method for a level name; unknown names log at info"""
    methods = {
        'debug': logger.debug,
        'info': logger.info,
        'warn': logger.warning,
        'error': logger.error,
        'fatal': logger.critical,
    }
    return methods.get(level, logger.info)


def line_sink(reader: Iterable[str], logger: logging.Logger, level: int) -> None:
    """Log every line read from reader (e.g. a child process pipe) at level"""
    for line in reader:
        logger.log(level, line.rstrip('\r\n'))


def debug_sink(reader: Iterable[str], logger: logging.Logger) -> None:
    line_sink(reader, logger, logging.DEBUG)


def warn_sink(reader: Iterable[str], logger: logging.Logger) -> None:
    line_sink(reader, logger, logging.WARNING)


def error_sink(reader: Iterable[str], logger: logging.Logger) -> None:
    line_sink(reader, logger, logging.ERROR)
