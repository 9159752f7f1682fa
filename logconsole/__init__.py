"""
logconsole: Human-friendly console rendering of JSON log records

Turns one structured JSON record per call into a colorized single line:
parts (time, level, ctx, mode, message) first, then sorted name=value fields.
"""

from logconsole.codec import Number, decode_record, marshal_value
from logconsole.colors import ColorCode, colorize
from logconsole.errors import (
    ConfigError,
    DecodeError,
    ExtensionError,
    LogConsoleError,
    MarshalError,
)
from logconsole.formatters import Formatters, default_formatters
from logconsole.logger import ConsoleHandler, JSONFormatter, LoggingConfig, init_logging, teardown_logging
from logconsole.pool import BufferPool
from logconsole.writer import ConsoleWriter, WriterConfig

__all__ = [
    'BufferPool',
    'ColorCode',
    'ConfigError',
    'ConsoleHandler',
    'ConsoleWriter',
    'DecodeError',
    'ExtensionError',
    'Formatters',
    'JSONFormatter',
    'LogConsoleError',
    'LoggingConfig',
    'MarshalError',
    'Number',
    'WriterConfig',
    'colorize',
    'decode_record',
    'default_formatters',
    'init_logging',
    'marshal_value',
    'teardown_logging',
]
__version__ = '1.0.0'
