"""Core functionality: the error reporter and its host registration."""

import logging
import sys
import threading
from dataclasses import replace
from datetime import datetime
from types import FrameType
from typing import Any, Callable, Optional

from .config import ErrorMailConfig
from .constants import EXCEPTION_HOOKS, FATAL_SEVERITIES
from .delivery import DeliveryOutcome, SmtpMailer, deliver
from .errors import InstallError
from .filtering import should_report
from .formatter import build_report
from .host import ErrorSink, Host, Mailer, NullSink
from .models import ErrorEvent, Handled
from .runtime import RuntimeHost
from .utils import capture_stack

logger = logging.getLogger(__name__)


class ErrorReporter:
    """
    Reports host errors and uncaught exceptions by mail and/or log file.

    Parameters:
      config: sinks, severity mask and mail identity.
      host: registration primitives and request context accessors.
      mailer: mail transport; defaults to an SmtpMailer built from config
        when recipients are configured.
      clock: returns the report time; defaults to datetime.now.
    """

    def __init__(
        self,
        config: ErrorMailConfig,
        host: Host,
        mailer: Optional[Mailer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config
        self.host = host
        if mailer is None and config.recipients:
            mailer = SmtpMailer.from_config(config)
        self.mailer = mailer
        self.clock = clock or datetime.now
        self.previous: ErrorSink = NullSink()
        self.installed = False
        self.last_outcome: Optional[DeliveryOutcome] = None
        self._local = threading.local()

    # ---- registration --------------------------------------------------------

    def install(self) -> None:
        """
        Make this reporter the host's active error handler, chaining the
        previous one, and hook shutdown and uncaught exceptions.
        """
        if self.installed:
            logger.warning("Error reporter already installed, ignoring")
            return
        try:
            self.previous = ErrorSink.wrap(self.host.set_error_handler(self.handle))
            self.host.register_shutdown(self.shutdown_handler)
            for category in EXCEPTION_HOOKS:
                self.host.add_exception_hook(category, self.exception_handler)
        except Exception as e:
            raise InstallError(f"cannot register error reporter: {e}") from e
        self.installed = True
        logger.info(
            "Error reporter installed (log=%r, recipients=%d, previous=%r)",
            self.config.log_file,
            len(self.config.recipients),
            self.previous,
        )

    @property
    def in_progress(self) -> bool:
        """True while a report is being formatted or delivered in this thread."""
        return getattr(self._local, "in_progress", False)

    # ---- host callbacks ------------------------------------------------------

    def handle(
        self,
        severity: int,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
        context: Any = None,
        include_stack: bool = True,
    ) -> Handled:
        """Main handler for runtime errors of a numeric severity."""
        event = ErrorEvent(
            kind=severity,
            message=message,
            file=file,
            line=line,
            context=context,
            include_stack=include_stack,
        )
        return self.process(event, sys._getframe(1))

    def shutdown_handler(self) -> Handled:
        """Report the fatal error the host recorded, if any."""
        error = self.host.last_fatal_error()
        if error is None or error.severity not in FATAL_SEVERITIES:
            return Handled.UNHANDLED
        return self.handle(
            error.severity, error.message, error.file, error.line, None, include_stack=False
        )

    def exception_handler(self, text: str) -> Handled:
        """Report an uncaught exception from its formatted text."""
        return self.process(ErrorEvent.exception(text))

    # ---- pipeline ------------------------------------------------------------

    def process(self, event: ErrorEvent, frame: Optional[FrameType] = None) -> Handled:
        """
        Filter, report and chain a single event.

        ``frame`` is the innermost frame of the stack trace, the caller of
        the host callback.
        """
        try:
            live_mask = self.host.reporting_mask()
            depth = self.host.suppression_depth()
        except Exception:
            logger.warning("Cannot read reporting state for %s", event.type_name, exc_info=True)
            return Handled.UNHANDLED

        handled = Handled.UNHANDLED
        if should_report(event, self.config, live_mask, depth, self.in_progress):
            if event.include_stack:
                event = replace(event, stack=tuple(capture_stack(frame)))
            handled = self._report(event)
        self._chain(event)
        return handled

    def _report(self, event: ErrorEvent) -> Handled:
        self._local.in_progress = True
        try:
            report = build_report(event, self.host.context(), now=self.clock())
            self.last_outcome = deliver(report, self.config, self.mailer)
        except Exception:
            logger.warning("Error report for %s failed", event.type_name, exc_info=True)
            return Handled.UNHANDLED
        finally:
            self._local.in_progress = False
        return Handled.HANDLED

    def _chain(self, event: ErrorEvent) -> None:
        # exceptions carry no severity and are never chained
        if event.is_exception or not self.previous:
            return
        try:
            live_mask = self.host.reporting_mask()
        except Exception:
            logger.warning("Cannot read reporting mask, not chaining", exc_info=True)
            return
        if live_mask & int(event.kind):
            logger.debug("Chaining %s to %r", event.type_name, self.previous)
            self.previous.invoke(event.kind, event.message, event.file, event.line, event.context)


def install(
    config: Optional[ErrorMailConfig] = None,
    host: Optional[Host] = None,
    mailer: Optional[Mailer] = None,
) -> ErrorReporter:
    """
    Create and install a reporter for the running process.

    Configuration is read from the environment and errors are taken from
    the Python runtime unless given.
    """
    if config is None:
        config = ErrorMailConfig.from_env()
    if host is None:
        host = RuntimeHost()
    reporter = ErrorReporter(config, host, mailer)
    reporter.install()
    return reporter
