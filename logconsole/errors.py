"""
Error types raised while rendering log records.
"""


class LogConsoleError(Exception):
    """Base class for logconsole errors"""
    pass


class DecodeError(LogConsoleError, ValueError):
    """Input is not exactly one well-formed JSON object"""
    pass


class MarshalError(LogConsoleError, TypeError):
    """A field value cannot be serialized to text"""
    pass


class ExtensionError(LogConsoleError):
    """The extension hook failed; the line was not written"""
    pass


class ConfigError(LogConsoleError):
    """Configuration validation error"""
    pass
