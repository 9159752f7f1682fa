"""
Default formatters for record parts and fields.

A formatter turns one decoded value into display text. Formatters holds one
optional override per role; resolve() fills the unset roles from the
built-in defaults returned by default_formatters().
"""

from dataclasses import dataclass, fields
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from logconsole.codec import Number
from logconsole.colors import ColorCode, colorize

Formatter = Callable[[Any], str]

TIMESTAMP_FIELD_NAME = 'time'
LEVEL_FIELD_NAME = 'level'
MESSAGE_FIELD_NAME = 'message'
CALLER_FIELD_NAME = 'caller'
ERROR_FIELD_NAME = 'error'
CONTEXT_FIELD_NAME = 'ctx'
MODE_FIELD_NAME = 'mode'

CONTEXT_DEFAULT = 'core'
CONTEXT_WIDTH = 6

DEFAULT_PARTS_ORDER = (
    TIMESTAMP_FIELD_NAME,
    LEVEL_FIELD_NAME,
    CONTEXT_FIELD_NAME,
    MODE_FIELD_NAME,
    MESSAGE_FIELD_NAME,
)

# Reference encodings of the record timestamp
TIME_FIELD_RFC3339 = 'rfc3339'
TIME_FIELD_UNIX = 'unix'
TIME_FIELD_UNIX_MS = 'unixms'
TIME_FIELD_UNIX_MICRO = 'unixmicro'
TIME_FIELD_UNIX_NANO = 'unixnano'

EPOCH_UNITS_PER_SECOND = {
    TIME_FIELD_UNIX: 1,
    TIME_FIELD_UNIX_MS: 1_000,
    TIME_FIELD_UNIX_MICRO: 1_000_000,
    TIME_FIELD_UNIX_NANO: 1_000_000_000,
}

# Short local time of day, e.g. 03:04PM
DEFAULT_TIME_FORMAT = '%I:%M%p'

LEVEL_ABBREVIATIONS = {
    'trace': ('TRC', ColorCode.MAGENTA, False),
    'debug': ('DBG', ColorCode.YELLOW, False),
    'info': ('INF', ColorCode.GREEN, False),
    'warn': ('WRN', ColorCode.RED, False),
    'error': ('ERR', ColorCode.RED, True),
    'fatal': ('FTL', ColorCode.RED, True),
    'panic': ('PNC', ColorCode.RED, True),
}
LEVEL_WIDTH = 3


@dataclass(frozen=True)
class Formatters:
    """Per-role formatter overrides; None means use the default"""
    timestamp: Optional[Formatter] = None
    level: Optional[Formatter] = None
    message: Optional[Formatter] = None
    context: Optional[Formatter] = None
    mode: Optional[Formatter] = None
    field_name: Optional[Formatter] = None
    field_value: Optional[Formatter] = None
    error_field_name: Optional[Formatter] = None
    error_field_value: Optional[Formatter] = None

    def resolve(self, defaults: 'Formatters') -> 'Formatters':
        """Return a copy with every unset role taken from defaults"""
        resolved = {}
        for f in fields(self):
            override = getattr(self, f.name)
            resolved[f.name] = override if override is not None else getattr(defaults, f.name)
        return Formatters(**resolved)


def parse_time_string(value: str, time_field_format: str) -> Optional[datetime]:
    """Parse a string timestamp in the reference encoding, as local time"""
    if time_field_format in EPOCH_UNITS_PER_SECOND:
        return None
    try:
        if time_field_format == TIME_FIELD_RFC3339:
            ts = datetime.fromisoformat(value)
        else:
            ts = datetime.strptime(value, time_field_format)
        # Shifting an instant near year 1 or 9999 can leave the datetime range
        return ts.astimezone()
    except (ValueError, OverflowError, OSError):
        return None


def epoch_to_datetime(epoch: int, time_field_format: str) -> datetime:
    """Convert an integer epoch to local time; unit from time_field_format"""
    per_second = EPOCH_UNITS_PER_SECOND.get(time_field_format, 1)
    seconds, fraction = divmod(epoch, per_second)
    ts = datetime.fromtimestamp(seconds, tz=timezone.utc)
    ts += timedelta(microseconds=fraction * 1_000_000 // per_second)
    return ts.astimezone()


def format_timestamp(
    time_format: str = DEFAULT_TIME_FORMAT,
    time_field_format: str = TIME_FIELD_RFC3339,
    no_color: bool = False
) -> Formatter:
    if not time_format:
        time_format = DEFAULT_TIME_FORMAT

    def formatter(value: Any) -> str:
        text = '<nil>'
        if isinstance(value, str):
            ts = parse_time_string(value, time_field_format)
            text = value
            if ts is not None:
                try:
                    text = ts.strftime(time_format)
                except (OverflowError, OSError, ValueError):
                    pass
        elif isinstance(value, Number):
            text = value.token
            if value.is_integer():
                try:
                    text = epoch_to_datetime(int(value), time_field_format).strftime(time_format)
                except (OverflowError, OSError, ValueError):
                    pass
        return colorize(text, ColorCode.DARK_GRAY, no_color)

    return formatter


def format_level(no_color: bool = False) -> Formatter:
    def formatter(value: Any) -> str:
        if value is None:
            return colorize('???', ColorCode.BOLD, no_color)
        if isinstance(value, str) and value in LEVEL_ABBREVIATIONS:
            abbrev, color, bold = LEVEL_ABBREVIATIONS[value]
            text = colorize(abbrev, color, no_color)
            return colorize(text, ColorCode.BOLD, no_color) if bold else text
        text = str(value).upper()[:LEVEL_WIDTH].ljust(LEVEL_WIDTH)
        return colorize(text, ColorCode.BOLD, no_color)

    return formatter


def format_context(no_color: bool = False) -> Formatter:
    def formatter(value: Any) -> str:
        if value is None:
            value = CONTEXT_DEFAULT
        return colorize(f'{value}'.ljust(CONTEXT_WIDTH), ColorCode.BOLD, no_color)

    return formatter


def format_mode(no_color: bool = False) -> Formatter:
    def formatter(value: Any) -> str:
        if value is None:
            return ''
        return colorize(f'{value}: ', ColorCode.RED, no_color)

    return formatter


def format_message(value: Any) -> str:
    if value is None:
        return ''
    return f'{value}'


def format_field_name(no_color: bool = False) -> Formatter:
    def formatter(value: Any) -> str:
        return colorize(f'{value}=', ColorCode.CYAN, no_color)

    return formatter


def format_field_value(value: Any) -> str:
    if value is None:
        return ''
    return f'{value}'


def format_error_field_value(no_color: bool = False) -> Formatter:
    def formatter(value: Any) -> str:
        return colorize(f'{value}', ColorCode.RED, no_color)

    return formatter


def default_formatters(
    no_color: bool = False,
    time_format: str = DEFAULT_TIME_FORMAT,
    time_field_format: str = TIME_FIELD_RFC3339
) -> Formatters:
    """Built-in formatter for every role"""
    return Formatters(
        timestamp=format_timestamp(time_format, time_field_format, no_color),
        level=format_level(no_color),
        message=format_message,
        context=format_context(no_color),
        mode=format_mode(no_color),
        field_name=format_field_name(no_color),
        field_value=format_field_value,
        error_field_name=format_field_name(no_color),
        error_field_value=format_error_field_value(no_color),
    )
