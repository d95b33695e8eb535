"""Interfaces the reporter consumes from its host application."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol

from .models import FatalErrorRecord, Handled, MailAddress

# (severity, message, file, line, context) -> Any
ErrorHandler = Callable[[int, str, Optional[str], Optional[int], Any], Any]
ShutdownHandler = Callable[[], Any]
ExceptionHandler = Callable[[str], Handled]


@dataclass(frozen=True)
class HostContext:
    """Snapshot of the request the error happened in."""

    site_name: str = ""
    server: str = ""
    request_uri: str = ""
    title: Optional[str] = None
    user_name: str = ""
    client_ip: str = ""
    query: Mapping[str, Any] = field(default_factory=dict)
    form: Mapping[str, Any] = field(default_factory=dict)
    cookies: Mapping[str, Any] = field(default_factory=dict)
    install_root: Optional[str] = None

    @property
    def url(self) -> str:
        return f"{self.server}{self.request_uri}"


class Host(Protocol):
    """Registration primitives and accessors provided by the host."""

    def set_error_handler(self, callback: ErrorHandler) -> Optional[ErrorHandler]:
        """Install ``callback`` as the active error handler, returning the
        previous one (or None)."""
        ...

    def register_shutdown(self, callback: ShutdownHandler) -> None: ...

    def add_exception_hook(self, category: str, callback: ExceptionHandler) -> None: ...

    def reporting_mask(self) -> int: ...

    def suppression_depth(self) -> int: ...

    def last_fatal_error(self) -> Optional[FatalErrorRecord]: ...

    def context(self) -> HostContext: ...


class Mailer(Protocol):
    """Mail transport."""

    def send(
        self,
        to: MailAddress,
        sender: MailAddress,
        subject: str,
        body: str,
        content_type: str,
    ) -> None: ...


class ErrorSink(abc.ABC):
    """Handler that was active before the reporter was installed."""

    def __bool__(self) -> bool:
        return False

    @abc.abstractmethod
    def invoke(
        self,
        severity: int,
        message: str,
        file: Optional[str],
        line: Optional[int],
        context: Any,
    ) -> None: ...

    @staticmethod
    def wrap(handler: Optional[ErrorHandler]) -> "ErrorSink":
        if handler is None:
            return NullSink()
        return DelegateSink(handler)


class NullSink(ErrorSink):
    """No previous handler."""

    def invoke(self, severity, message, file, line, context) -> None:
        pass


class DelegateSink(ErrorSink):
    """Forwards to the previously installed handler."""

    def __init__(self, handler: ErrorHandler) -> None:
        self.handler = handler

    def __bool__(self) -> bool:
        return True

    def invoke(self, severity, message, file, line, context) -> None:
        self.handler(severity, message, file, line, context)

    def __repr__(self) -> str:
        return f"DelegateSink({self.handler!r})"
