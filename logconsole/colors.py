"""
ANSI color helpers.
"""

from enum import IntEnum
from typing import Any


class ColorCode(IntEnum):
    """SGR codes used by the default formatters"""
    BOLD = 1
    BLACK = 30
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    MAGENTA = 35
    CYAN = 36
    WHITE = 37
    DARK_GRAY = 90


RESET = '\x1b[0m'


def colorize(value: Any, code: int, disabled: bool = False) -> str:
    """
    Wrap value in an ANSI set/reset pair.

    Already colorized text can be wrapped again to combine codes, e.g.
    colorize(colorize('ERR', ColorCode.RED), ColorCode.BOLD).

    Args:
        value: Anything with a text representation
        code: SGR code
        disabled: Return the plain text with no escape bytes

    Returns:
        The (possibly) colorized text
    """
    if disabled:
        return f'{value}'
    return f'\x1b[{int(code)}m{value}{RESET}'
