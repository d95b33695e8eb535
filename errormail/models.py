"""Data models for error reporting."""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Tuple, Union

from .constants import EXCEPTION, SEVERITY_NAMES


@dataclass(frozen=True)
class StackFrame:
    """Call stack frame information."""

    file: str
    line: int
    function: str
    owner: Optional[str] = None
    operator: Optional[str] = None


@dataclass(frozen=True)
class ErrorEvent:
    """A single runtime error or uncaught exception raised by the host."""

    kind: Union[int, str]
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    context: Any = None  # opaque, passed through to chained handlers
    include_stack: bool = True
    stack: Tuple[StackFrame, ...] = field(default_factory=tuple)

    @classmethod
    def exception(cls, text: str) -> "ErrorEvent":
        """Create an event for an uncaught exception.

        The text is expected to already describe where the exception was
        raised, so no location or stack is attached.
        """
        return cls(kind=EXCEPTION, message=text, include_stack=False)

    @property
    def is_exception(self) -> bool:
        return self.kind == EXCEPTION

    @property
    def type_name(self) -> str:
        """Display name of the event kind, or its raw value when unknown."""
        name = SEVERITY_NAMES.get(self.kind)
        if name is None:
            return str(int(self.kind)) if isinstance(self.kind, int) else str(self.kind)
        return name


@dataclass(frozen=True)
class Report:
    """Formatted report, built once per event."""

    subject: str
    body: str
    timestamp: datetime


@dataclass(frozen=True)
class MailAddress:
    """Mail address with an optional display name."""

    address: str
    name: Optional[str] = None

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


@dataclass(frozen=True)
class FatalErrorRecord:
    """Last fatal error as recorded by the host."""

    severity: int
    message: str
    file: Optional[str] = None
    line: Optional[int] = None


class Handled(enum.Enum):
    """Result handed back to host hooks."""

    HANDLED = True
    UNHANDLED = False

    def __bool__(self) -> bool:
        return self.value
