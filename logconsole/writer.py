"""
Console writer: renders one JSON log record per call as a colorized,
human-friendly line.

Output layout:

    <time> <level> <ctx> <mode>: <message>  error=<e> a=1 b=2

Parts come first in the configured order, then the remaining fields sorted by
name with "error" pulled to the front.
"""

import json
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Optional, TextIO, Tuple, Union

import colorama

from logconsole.codec import Number, decode_record, marshal_value
from logconsole.colors import ColorCode, colorize
from logconsole.errors import ExtensionError
from logconsole.formatters import (
    CALLER_FIELD_NAME,
    CONTEXT_FIELD_NAME,
    DEFAULT_PARTS_ORDER,
    DEFAULT_TIME_FORMAT,
    ERROR_FIELD_NAME,
    LEVEL_FIELD_NAME,
    MESSAGE_FIELD_NAME,
    MODE_FIELD_NAME,
    TIME_FIELD_RFC3339,
    TIMESTAMP_FIELD_NAME,
    Formatter,
    Formatters,
    default_formatters,
)
from logconsole.pool import BufferPool, console_buffer_pool

# Keys rendered as parts (or dropped) and never listed as fields
RESERVED_FIELD_NAMES = frozenset({
    LEVEL_FIELD_NAME,
    TIMESTAMP_FIELD_NAME,
    MESSAGE_FIELD_NAME,
    CALLER_FIELD_NAME,
    CONTEXT_FIELD_NAME,
    MODE_FIELD_NAME,
})

ExtraFormatter = Callable[[Dict[str, Any], Any], None]


@dataclass(frozen=True)
class WriterConfig:
    """
    Settings of a ConsoleWriter. Never mutated after construction.

    Attributes:
        out: Text sink (default: sys.stderr)
        no_color: Disable ANSI colors
        time_format: strftime pattern used to display timestamps
        time_field_format: Encoding of the record timestamp ("rfc3339",
            "unix", "unixms", "unixmicro", "unixnano" or a strptime pattern)
        parts_order: Order of the parts at the start of the line
        parts_exclude: Parts not to display
        fields_exclude: Fields not to display
        formatters: Formatter overrides
        format_extra: Hook called with (record, buffer) after the fields
        marshal: Serializer for values that are neither str nor Number
    """
    out: Optional[TextIO] = None
    no_color: bool = False
    time_format: str = DEFAULT_TIME_FORMAT
    time_field_format: str = TIME_FIELD_RFC3339
    parts_order: Tuple[str, ...] = DEFAULT_PARTS_ORDER
    parts_exclude: FrozenSet[str] = frozenset()
    fields_exclude: FrozenSet[str] = frozenset()
    formatters: Formatters = field(default_factory=Formatters)
    format_extra: Optional[ExtraFormatter] = None
    marshal: Callable[[Any], str] = marshal_value

    def __post_init__(self):
        parts_order = DEFAULT_PARTS_ORDER if self.parts_order is None else tuple(self.parts_order)
        object.__setattr__(self, 'parts_order', parts_order)
        object.__setattr__(self, 'parts_exclude', frozenset(self.parts_exclude or ()))
        object.__setattr__(self, 'fields_exclude', frozenset(self.fields_exclude or ()))
        if self.formatters is None:
            object.__setattr__(self, 'formatters', Formatters())


def needs_quote(s: str) -> bool:
    """True when s has to be quoted to stay a single token"""
    for c in s:
        if c < ' ' or c > '~' or c in ' \\"':
            return True
    return False


class ConsoleWriter:
    """
    Parses JSON records and writes them in a human-friendly form to out.

    Keyword options override the matching WriterConfig attribute:

        writer = ConsoleWriter(no_color=True, fields_exclude={'pid'})
        writer.write(b'{"level":"info","message":"ready","pid":1}')
    """

    def __init__(
        self,
        config: Optional[WriterConfig] = None,
        pool: Optional[BufferPool] = None,
        **options: Any
    ):
        config = config or WriterConfig()
        if options:
            config = replace(config, **options)
        self.config = config
        self.pool = pool if pool is not None else console_buffer_pool

        self.out = config.out if config.out is not None else sys.stderr
        if self.out is sys.stdout or self.out is sys.stderr:
            # Enables ANSI handling on Windows consoles; no-op elsewhere
            colorama.just_fix_windows_console()

        self.formatters = config.formatters.resolve(default_formatters(
            no_color=config.no_color,
            time_format=config.time_format,
            time_field_format=config.time_field_format
        ))
        self._part_formatters: Dict[str, Formatter] = {
            TIMESTAMP_FIELD_NAME: self.formatters.timestamp,
            LEVEL_FIELD_NAME: self.formatters.level,
            MESSAGE_FIELD_NAME: self.formatters.message,
            CONTEXT_FIELD_NAME: self.formatters.context,
            MODE_FIELD_NAME: self.formatters.mode,
        }
        self._hidden_fields = RESERVED_FIELD_NAMES | config.fields_exclude

    def write(self, data: Union[bytes, bytearray, str]) -> int:
        """
        Render one encoded record and write it to out as a single line.

        Args:
            data: Exactly one JSON object

        Returns:
            Number of bytes in data; str input is counted in UTF-8

        Raises:
            DecodeError: data is not one JSON object; nothing is written
            ExtensionError: format_extra failed; nothing is written
            Exception: whatever out.write raises, unchanged
        """
        record = decode_record(data)

        with self.pool.acquire() as buf:
            for part in self.config.parts_order:
                self._write_part(buf, record, part)

            self._write_fields(buf, record)

            if self.config.format_extra is not None:
                try:
                    self.config.format_extra(record, buf)
                except ExtensionError:
                    raise
                except Exception as e:
                    raise ExtensionError(f"extension hook failed: {e}") from e

            buf.write('\n')
            self.out.write(buf.getvalue())

        if isinstance(data, str):
            return len(data.encode('utf-8', 'surrogatepass'))
        return len(data)

    def _write_part(self, buf, record: Dict[str, Any], part: str) -> None:
        """Append one formatted part to buf"""
        if part in self.config.parts_exclude:
            return

        formatter = self._part_formatters.get(part, self.formatters.field_value)
        text = formatter(record.get(part))

        if text:
            if buf.tell() > 0:
                buf.write(' ')
            buf.write(text)

    def _write_fields(self, buf, record: Dict[str, Any]) -> None:
        """Append the formatted name=value pairs to buf"""
        # Code point order is the same as UTF-8 byte order
        names = sorted(name for name in record if name not in self._hidden_fields)
        if not names:
            return

        if ERROR_FIELD_NAME in names:
            names.remove(ERROR_FIELD_NAME)
            names.insert(0, ERROR_FIELD_NAME)

        if buf.tell() > 0:
            buf.write('  ')

        for i, name in enumerate(names):
            if i > 0:
                buf.write(' ')

            if name == ERROR_FIELD_NAME:
                format_name = self.formatters.error_field_name
                format_value = self.formatters.error_field_value
            else:
                format_name = self.formatters.field_name
                format_value = self.formatters.field_value

            buf.write(format_name(name))

            value = record[name]
            if isinstance(value, str):
                if needs_quote(value):
                    value = json.dumps(value, ensure_ascii=False)
                buf.write(format_value(value))
            elif isinstance(value, Number):
                buf.write(format_value(value))
            else:
                try:
                    text = self.config.marshal(value)
                except (TypeError, ValueError) as e:
                    buf.write(colorize(f'[error: {e}]', ColorCode.RED, self.config.no_color))
                else:
                    buf.write(format_value(text))
