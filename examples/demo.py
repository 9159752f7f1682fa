#!/usr/bin/env python3
"""
Demo script showing logconsole usage.

This example demonstrates:
1. Logging through the stdlib logging integration
2. Writing raw JSON records straight to a ConsoleWriter
3. Appending a stack trace with an extension hook
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import json
import time

from logconsole import ConsoleWriter, LoggingConfig, init_logging, teardown_logging


def demo_logging():
    """Demo stdlib logging rendered on the console"""
    print("\n=== Logging Demo ===")

    logger = init_logging(LoggingConfig(name='demo', level='debug', out=sys.stdout))

    logger.info("Application started", extra={'ctx': 'app'})
    logger.info("User login", extra={'ctx': 'auth', 'fields': {'user_id': 123, 'ip': '192.168.1.1'}})
    logger.warning("High memory usage", extra={'fields': {'memory_percent': 85.5}})
    logger.info("Would delete 3 files", extra={'ctx': 'gc', 'mode': 'dry-run'})

    try:
        raise ValueError("Something went wrong")
    except ValueError:
        logger.error("Error processing request", exc_info=True, extra={'fields': {'request_id': 'req-456'}})

    teardown_logging(logger)


def demo_raw_records():
    """Demo rendering JSON records emitted by another process"""
    print("\n=== Raw Record Demo ===")

    writer = ConsoleWriter(out=sys.stdout, time_field_format='unixnano', time_format='%H:%M:%S.%f')
    now_ns = time.time_ns()

    writer.write(json.dumps({'time': now_ns, 'level': 'debug', 'ctx': 'build', 'message': 'cache hit'}))
    writer.write(b'{"level":"trace","message":"exact","counter":123456789012345678901}')
    writer.write(json.dumps({'level': 'panic', 'message': 'worker crashed', 'error': 'oom', 'rss_mb': 4096}))


def demo_extension_hook():
    """Demo appending content after the fields"""
    print("\n=== Extension Hook Demo ===")

    def print_stack(record, buf):
        stack = record.get('stack')
        if stack:
            buf.write('\n' + '\n'.join('    ' + line for line in stack.splitlines()))

    writer = ConsoleWriter(out=sys.stdout, fields_exclude={'stack'}, format_extra=print_stack)
    writer.write(json.dumps({
        'level': 'error',
        'message': 'request failed',
        'error': 'timeout',
        'stack': 'Traceback (most recent call last):\n  File "app.py", line 10\nTimeoutError'
    }))


if __name__ == '__main__':
    demo_logging()
    demo_raw_records()
    demo_extension_hook()
