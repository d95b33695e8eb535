"""Host binding for a plain Python process.

Warnings stand in for runtime errors: the reporter is installed as
``warnings.showwarning`` and each warning category maps onto a severity.
Uncaught exceptions come from ``sys.excepthook`` (the ``"exception"``
hook) and ``threading.excepthook`` (the ``"raw"`` hook), shutdown runs
through ``atexit``.

Request details are bound per thread with ``RuntimeHost.request()``::

    host = RuntimeHost(HostContext(site_name="wiki", install_root="/srv/wiki"))
    errormail.install(config, host)

    with host.request(HostContext(...)):
        handle_request()
"""

import atexit
import logging
import os
import socket
import sys
import threading
import traceback
import warnings
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Type

from .constants import Severity
from .host import ErrorHandler, ExceptionHandler, HostContext, ShutdownHandler
from .models import FatalErrorRecord

logger = logging.getLogger(__name__)

# Checked in order, first match wins.
WARNING_SEVERITIES = (
    (DeprecationWarning, Severity.E_DEPRECATED),
    (PendingDeprecationWarning, Severity.E_DEPRECATED),
    (FutureWarning, Severity.E_USER_DEPRECATED),
    (SyntaxWarning, Severity.E_COMPILE_WARNING),
    (RuntimeWarning, Severity.E_WARNING),
    (ResourceWarning, Severity.E_NOTICE),
    (BytesWarning, Severity.E_STRICT),
    (ImportWarning, Severity.E_STRICT),
    (UnicodeWarning, Severity.E_STRICT),
)


def severity_for_warning(category: Type[Warning]) -> Severity:
    for base, severity in WARNING_SEVERITIES:
        if issubclass(category, base):
            return severity
    return Severity.E_USER_WARNING


@dataclass(frozen=True)
class WarningContext:
    """Original ``showwarning`` arguments, kept for chaining."""

    message: Any
    category: Type[Warning]
    file: Any = None
    line: Optional[str] = None


class RuntimeHost:
    """Binds an error reporter to the running Python interpreter."""

    def __init__(
        self,
        context: Optional[HostContext] = None,
        reporting_mask: int = int(Severity.E_ALL),
    ) -> None:
        if context is None:
            context = HostContext(site_name=socket.gethostname(), install_root=os.getcwd())
        self.default_context = context
        self._mask = reporting_mask
        self._handler: Optional[ErrorHandler] = None
        self._fatal: Optional[FatalErrorRecord] = None
        self._local = threading.local()

    # ---- registration --------------------------------------------------------

    def set_error_handler(self, callback: ErrorHandler) -> Optional[ErrorHandler]:
        original = warnings.showwarning

        def showwarning(message, category, filename, lineno, file=None, line=None):
            callback(
                severity_for_warning(category),
                str(message),
                filename,
                lineno,
                WarningContext(message, category, file, line),
            )

        def previous(severity, message, file, line, context):
            if isinstance(context, WarningContext):
                original(context.message, context.category, file, line, context.file, context.line)
            else:
                original(message, UserWarning, file, line)

        warnings.showwarning = showwarning
        self._handler = callback
        logger.debug("Replaced warnings.showwarning %r", original)
        return previous

    def register_shutdown(self, callback: ShutdownHandler) -> None:
        atexit.register(callback)

    def add_exception_hook(self, category: str, callback: ExceptionHandler) -> None:
        if category == "exception":
            previous_hook = sys.excepthook

            def excepthook(exc_type, exc, tb):
                text = "".join(traceback.format_exception(exc_type, exc, tb))
                if not callback(text.rstrip()):
                    previous_hook(exc_type, exc, tb)

            sys.excepthook = excepthook
            logger.debug("Replaced sys.excepthook %r", previous_hook)
        elif category == "raw":
            previous_thread_hook = threading.excepthook

            def thread_excepthook(args):
                if args.exc_type is SystemExit:
                    previous_thread_hook(args)
                    return
                text = "".join(
                    traceback.format_exception(args.exc_type, args.exc_value, args.exc_traceback)
                )
                name = args.thread.name if args.thread is not None else "unknown"
                if not callback(f"Exception in thread {name}:\n{text.rstrip()}"):
                    previous_thread_hook(args)

            threading.excepthook = thread_excepthook
            logger.debug("Replaced threading.excepthook %r", previous_thread_hook)
        else:
            raise ValueError(f"unknown exception hook category: {category!r}")

    # ---- raising -------------------------------------------------------------

    def trigger(
        self, message: str, severity: int = Severity.E_USER_NOTICE, stacklevel: int = 1
    ) -> Any:
        """Raise a user-level error at the caller's location."""
        frame = sys._getframe(stacklevel)
        if self._handler is None:
            warnings.warn(message, UserWarning, stacklevel=stacklevel + 1)
            return None
        return self._handler(severity, message, frame.f_code.co_filename, frame.f_lineno, None)

    def record_fatal_error(
        self,
        severity: int,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
    ) -> None:
        """Remember a fatal error for the shutdown handler."""
        self._fatal = FatalErrorRecord(severity, message, file, line)

    def last_fatal_error(self) -> Optional[FatalErrorRecord]:
        return self._fatal

    # ---- reporting state -----------------------------------------------------

    def reporting_mask(self) -> int:
        mask = getattr(self._local, "mask", None)
        return self._mask if mask is None else mask

    def set_reporting_mask(self, mask: int) -> int:
        """Set the live reporting mask, returning the old one."""
        old, self._mask = self._mask, int(mask)
        return old

    def suppression_depth(self) -> int:
        return getattr(self._local, "depth", 0)

    @contextmanager
    def suppressed(self, mask: int = 0) -> Iterator[None]:
        """Silence error reporting in this thread, keeping only ``mask``."""
        outer = getattr(self._local, "mask", None)
        self._local.mask = int(mask)
        self._local.depth = self.suppression_depth() + 1
        try:
            yield
        finally:
            self._local.depth -= 1
            self._local.mask = outer

    # ---- request context -----------------------------------------------------

    def context(self) -> HostContext:
        return getattr(self._local, "context", None) or self.default_context

    @contextmanager
    def request(self, context: HostContext) -> Iterator[HostContext]:
        """Bind request details to this thread while the block runs."""
        outer = getattr(self._local, "context", None)
        self._local.context = context
        try:
            yield context
        finally:
            self._local.context = outer
