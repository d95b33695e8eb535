"""
errormail - Report runtime errors and uncaught exceptions by mail and/or log file.

The reporter installs itself as the host's error handler, chaining the
handler that was active before, and also hooks shutdown and uncaught
exceptions. Qualifying events are formatted into a plain text report
(site, request, location, message, stack trace, request parameters) and
appended to a log file and/or mailed to a list of recipients.

Example usage:
    >>> import errormail
    >>> config = errormail.ErrorMailConfig(log_file="/var/log/app/errors.log")
    >>> reporter = errormail.install(config)
    >>> import warnings
    >>> warnings.warn("bad thing", RuntimeWarning)  # appended as E_WARNING
"""

from .constants import (
    EXCEPTION,
    EXCEPTION_HOOKS,
    FATAL_SEVERITIES,
    LOG_SEPARATOR,
    SEVERITY_NAMES,
    Severity,
)
from .errors import ErrorMailError, ConfigError, DeliveryError, InstallError
from .models import (
    StackFrame,
    ErrorEvent,
    Report,
    MailAddress,
    FatalErrorRecord,
    Handled,
)
from .config import ErrorMailConfig
from .host import HostContext, Host, Mailer, ErrorSink, NullSink, DelegateSink
from .filtering import effective_mask, should_report
from .formatter import build_report, format_stack
from .delivery import DeliveryOutcome, SmtpMailer, append_log, deliver
from .runtime import RuntimeHost, severity_for_warning
from .core import ErrorReporter, install
from .utils import capture_stack, export_value, rewrite_path

__version__ = "0.1.0"
__description__ = "Report runtime errors and uncaught exceptions by mail and/or log file"

# Main API exports
__all__ = [
    # Core functionality
    "ErrorReporter",
    "install",
    "RuntimeHost",

    # Pipeline stages
    "should_report",
    "effective_mask",
    "build_report",
    "format_stack",
    "deliver",
    "append_log",
    "SmtpMailer",
    "DeliveryOutcome",

    # Data models
    "ErrorEvent",
    "Report",
    "StackFrame",
    "MailAddress",
    "FatalErrorRecord",
    "Handled",
    "HostContext",

    # Host interfaces
    "Host",
    "Mailer",
    "ErrorSink",
    "NullSink",
    "DelegateSink",

    # Configuration
    "ErrorMailConfig",

    # Errors
    "ErrorMailError",
    "ConfigError",
    "DeliveryError",
    "InstallError",

    # Constants
    "Severity",
    "SEVERITY_NAMES",
    "FATAL_SEVERITIES",
    "EXCEPTION",
    "EXCEPTION_HOOKS",
    "LOG_SEPARATOR",

    # Utilities (primarily for testing and advanced usage)
    "capture_stack",
    "export_value",
    "rewrite_path",
    "severity_for_warning",

    # Version info
    "__version__",
]
