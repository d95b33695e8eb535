"""Constants used throughout the errormail library."""

import enum


class Severity(enum.IntFlag):
    """Bitmask of reportable error levels."""

    E_ERROR = 1
    E_WARNING = 2
    E_PARSE = 4
    E_NOTICE = 8
    E_CORE_ERROR = 16
    E_CORE_WARNING = 32
    E_COMPILE_ERROR = 64
    E_COMPILE_WARNING = 128
    E_USER_ERROR = 256
    E_USER_WARNING = 512
    E_USER_NOTICE = 1024
    E_STRICT = 2048
    E_RECOVERABLE_ERROR = 4096
    E_DEPRECATED = 8192
    E_USER_DEPRECATED = 16384
    E_ALL = 32767


# Kind tag of uncaught exceptions; they carry no numeric severity.
EXCEPTION = "exception"

SEVERITY_NAMES = {
    Severity.E_ERROR: "E_ERROR",
    Severity.E_WARNING: "E_WARNING",
    Severity.E_PARSE: "E_PARSE",
    Severity.E_NOTICE: "E_NOTICE",
    Severity.E_CORE_ERROR: "E_CORE_ERROR",
    Severity.E_CORE_WARNING: "E_CORE_WARNING",
    Severity.E_COMPILE_ERROR: "E_COMPILE_ERROR",
    Severity.E_COMPILE_WARNING: "E_COMPILE_WARNING",
    Severity.E_USER_ERROR: "E_USER_ERROR",
    Severity.E_USER_WARNING: "E_USER_WARNING",
    Severity.E_USER_NOTICE: "E_USER_NOTICE",
    Severity.E_STRICT: "E_STRICT",
    Severity.E_RECOVERABLE_ERROR: "E_RECOVERABLE_ERROR",
    Severity.E_DEPRECATED: "E_DEPRECATED",
    Severity.E_USER_DEPRECATED: "E_USER_DEPRECATED",
    EXCEPTION: "Exception",
}

# Severities that end execution before the regular handler can run; the
# host records them and they are picked up at shutdown.
FATAL_SEVERITIES = frozenset(
    {
        Severity.E_ERROR,
        Severity.E_PARSE,
        Severity.E_CORE_ERROR,
        Severity.E_CORE_WARNING,
        Severity.E_COMPILE_ERROR,
        Severity.E_COMPILE_WARNING,
    }
)

# Exception hook categories registered at install time.
EXCEPTION_HOOKS = ("exception", "raw")

LOG_SEPARATOR = "-" * 80

MAIL_CONTENT_TYPE = "text/plain; charset=UTF-8"
