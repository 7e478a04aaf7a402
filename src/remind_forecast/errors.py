from __future__ import annotations

from typing import Sequence


class ForecastError(RuntimeError):
    """Base class for failures that end a forecast run."""


class ParseError(ForecastError):
    """Raised when a line from the calendar tool cannot be understood."""

    def __init__(self, message: str, lineno: int = 0, line: str = "") -> None:
        self.lineno = lineno
        self.line = line
        if lineno:
            message = f"line {lineno}: {message}: {line!r}"
        super().__init__(message)


class SourceError(ForecastError):
    """Raised when the external calendar command fails or prints nothing."""

    def __init__(self, message: str, command: Sequence[str] = (), stderr: str = "") -> None:
        self.command = list(command)
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)


class ConfigError(ForecastError):
    """Raised when the configuration file or environment holds bad values."""
