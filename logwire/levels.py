"""Severity levels retained by the log sink, mapped onto stdlib logging."""

import enum
import logging

# stdlib has no TRACE; register it below DEBUG so logger.log(TRACE, ...) renders nicely.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class Severity(str, enum.Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"

    @property
    def label(self) -> str:
        """Uppercase name used in stored log items, e.g. ``"WARN"``."""
        return self.name

    @property
    def python_level(self) -> int:
        return _PYTHON_LEVELS[self]

    def at_least(self, minimum: "Severity") -> bool:
        """Return True if this level is at least as severe as *minimum*."""
        return self.python_level >= minimum.python_level

    @classmethod
    def parse(cls, value) -> "Severity":
        """Map a configuration label to a severity.

        Labels are case-sensitive. Anything unrecognised falls back to
        ERROR instead of raising.
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return cls.ERROR

    @classmethod
    def from_python_level(cls, levelno: int) -> "Severity":
        """Bucket a stdlib numeric level downwards (CRITICAL becomes ERROR)."""
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        if levelno >= logging.DEBUG:
            return cls.DEBUG
        return cls.TRACE


_PYTHON_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARN: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
    Severity.TRACE: TRACE,
}
