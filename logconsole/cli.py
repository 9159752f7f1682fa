#!/usr/bin/env python3
"""
Pretty-print JSON log lines from files or stdin.

Usage: tail -f app.log | logconsole --exclude-field pid
"""

import sys
from dataclasses import replace
from typing import Optional, Tuple

import click

from logconsole.config import load_config
from logconsole.errors import ConfigError, DecodeError
from logconsole.writer import ConsoleWriter, WriterConfig


def _split_parts(ctx, param, value: Optional[str]):
    if value is None:
        return None
    return [part.strip() for part in value.split(',') if part.strip()]


def render_stream(stream, writer: ConsoleWriter, strict: bool = False) -> int:
    """
    Render every line of stream through writer.

    Lines that are not JSON objects are echoed unchanged unless strict.

    Returns:
        Number of lines rendered as records

    Raises:
        DecodeError: On the first undecodable line when strict
    """
    rendered = 0
    for line in stream:
        if not line.strip():
            continue
        try:
            writer.write(line)
            rendered += 1
        except DecodeError:
            if strict:
                raise
            writer.out.write(line if line.endswith('\n') else line + '\n')
    return rendered


@click.command()
@click.argument('files', nargs=-1, type=click.File('r'))
@click.option('--config', type=click.Path(exists=True), default=None, help='Path to config.yml')
@click.option('--no-color', is_flag=True, envvar='NO_COLOR', help='Disable ANSI colors')
@click.option('--time-format', default=None, help='strftime pattern for timestamps')
@click.option('--time-field-format', default=None,
              help='Record timestamp encoding: rfc3339, unix, unixms, unixmicro, unixnano')
@click.option('--parts-order', callback=_split_parts, default=None,
              help='Comma separated part order, e.g. time,level,message')
@click.option('--exclude-part', multiple=True, help='Part to hide (repeatable)')
@click.option('--exclude-field', multiple=True, help='Field to hide (repeatable)')
@click.option('--strict', is_flag=True, help='Fail on lines that are not JSON objects')
def main(
    files: Tuple,
    config: Optional[str],
    no_color: bool,
    time_format: Optional[str],
    time_field_format: Optional[str],
    parts_order,
    exclude_part: Tuple[str, ...],
    exclude_field: Tuple[str, ...],
    strict: bool
):
    """Render JSON log records as colorized, human-readable lines"""
    try:
        writer_config = load_config(config) if config else WriterConfig()
    except ConfigError as e:
        click.echo(f"Config error: {e}", err=True)
        sys.exit(1)

    options = {'out': sys.stdout}
    if no_color:
        options['no_color'] = True
    if time_format is not None:
        options['time_format'] = time_format
    if time_field_format is not None:
        options['time_field_format'] = time_field_format
    if parts_order is not None:
        options['parts_order'] = parts_order
    if exclude_part:
        options['parts_exclude'] = writer_config.parts_exclude | set(exclude_part)
    if exclude_field:
        options['fields_exclude'] = writer_config.fields_exclude | set(exclude_field)

    writer = ConsoleWriter(replace(writer_config, **options))

    streams = files or (click.open_file('-'),)
    for stream in streams:
        try:
            render_stream(stream, writer, strict=strict)
        except DecodeError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)


if __name__ == '__main__':
    main()
