"""Reporter configuration with validation and defaults.

Values are set once, before the reporter is installed, and read on every
event. ``ErrorMailConfig.from_env`` resolves the ``ERRORMAIL_*``
environment variables; anything unset keeps the dataclass default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .constants import Severity
from .errors import ConfigError
from .models import MailAddress

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def parse_bool(value: str, label: str) -> bool:
    """Parse a boolean environment value."""
    low = value.strip().lower()
    if low in _TRUE:
        return True
    if low in _FALSE:
        return False
    raise ConfigError(f"{label} is not a boolean: {value!r}")


def parse_severity_mask(value: str, label: str = "ERRORMAIL_LEVELS") -> int:
    """Parse a severity mask.

    Accepts an integer (``32767``, ``0x7fff``, ``~0``) or severity names
    joined by ``|`` (``E_WARNING|E_NOTICE``).
    """
    text = value.strip()
    if not text:
        raise ConfigError(f"{label} is empty")
    if text == "~0":
        return int(Severity.E_ALL)
    try:
        return int(text, 0)
    except ValueError:
        pass
    mask = 0
    for part in text.split("|"):
        name = part.strip().upper()
        try:
            mask |= Severity[name]
        except KeyError:
            raise ConfigError(f"{label} has unknown severity {part.strip()!r}") from None
    return int(mask)


def parse_recipients(value: str) -> Tuple[str, ...]:
    return tuple(r.strip() for r in value.split(",") if r.strip())


@dataclass(frozen=True)
class ErrorMailConfig:
    """Validated configuration for an error reporter."""

    # Sinks
    recipients: Tuple[str, ...] = field(default_factory=tuple)
    log_file: str = ""

    # Filtering
    severity_mask: int = int(Severity.E_ALL)
    report_exceptions: bool = True

    # Mail identity and transport
    sender_address: str = ""
    sender_name: str = "errormail"
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_timeout: float = 10.0

    def __post_init__(self) -> None:
        if isinstance(self.recipients, str):
            object.__setattr__(self, "recipients", parse_recipients(self.recipients))
        else:
            object.__setattr__(self, "recipients", tuple(self.recipients))
        for rcpt in self.recipients:
            if not isinstance(rcpt, str) or "@" not in rcpt:
                raise ConfigError(f"recipient is not a mail address: {rcpt!r}")
        if self.recipients and not self.sender_address:
            raise ConfigError("sender_address is required when recipients are set")
        if self.severity_mask < 0:
            raise ConfigError(f"severity_mask must not be negative: {self.severity_mask}")
        if self.smtp_port <= 0:
            raise ConfigError(f"smtp_port must be positive: {self.smtp_port}")
        if self.smtp_timeout <= 0:
            raise ConfigError(f"smtp_timeout must be positive: {self.smtp_timeout}")

    @property
    def has_sink(self) -> bool:
        return bool(self.recipients or self.log_file)

    @property
    def sender(self) -> MailAddress:
        return MailAddress(self.sender_address, self.sender_name or None)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ErrorMailConfig:
        """Load config from environment variables with validation."""
        env = os.environ if environ is None else environ
        defaults = cls()

        try:
            smtp_port = int(env.get("ERRORMAIL_SMTP_PORT", str(defaults.smtp_port)))
            smtp_timeout = float(
                env.get("ERRORMAIL_SMTP_TIMEOUT", str(defaults.smtp_timeout))
            )
        except ValueError as e:
            raise ConfigError(f"invalid SMTP setting: {e}") from e

        levels = env.get("ERRORMAIL_LEVELS")
        exceptions = env.get("ERRORMAIL_EXCEPTIONS")

        return cls(
            recipients=parse_recipients(env.get("ERRORMAIL_RECIPIENTS", "")),
            log_file=env.get("ERRORMAIL_LOG", defaults.log_file),
            severity_mask=(
                parse_severity_mask(levels) if levels is not None else defaults.severity_mask
            ),
            report_exceptions=(
                parse_bool(exceptions, "ERRORMAIL_EXCEPTIONS")
                if exceptions is not None
                else defaults.report_exceptions
            ),
            sender_address=env.get("ERRORMAIL_SENDER", defaults.sender_address),
            sender_name=env.get("ERRORMAIL_SENDER_NAME", defaults.sender_name),
            smtp_host=env.get("ERRORMAIL_SMTP_HOST", defaults.smtp_host),
            smtp_port=smtp_port,
            smtp_timeout=smtp_timeout,
        )
