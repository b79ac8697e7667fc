"""
db_exceptions.py - Errors raised by the simpledb store and its command interpreter.
"""


class SimpleDBError(Exception):
    """Base exception for simpledb errors."""
    pass


class CommandError(SimpleDBError):
    """Raised when a command line cannot be turned into an engine call."""

    def __init__(self, verb: str, message: str):
        super().__init__(message)
        self.verb = verb


class UnknownCommandError(CommandError):
    def __init__(self, verb: str):
        super().__init__(verb, f"Invalid command {verb}")


class CommandArgumentError(CommandError):
    def __init__(self, verb: str, expected: int, got: int):
        super().__init__(verb, f"Invalid arguments for {verb}")
        self.expected = expected
        self.got = got


class IndexCorruptionError(SimpleDBError):
    """Raised when the frequency index disagrees with the stored data."""
    pass
