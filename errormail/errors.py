"""Exceptions raised by errormail itself."""

from typing import Optional


class ErrorMailError(Exception):
    """Base exception for errormail."""


class ConfigError(ErrorMailError):
    """Raised when configuration is invalid."""


class InstallError(ErrorMailError):
    """Raised when the host refuses to register the reporter."""


class DeliveryError(ErrorMailError):
    """Raised when a single sink (log file or mail recipient) fails."""

    def __init__(self, message: str, sink: Optional[str] = None) -> None:
        super().__init__(message)
        self.sink = sink
