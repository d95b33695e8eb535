"""Report delivery to the log file and to mail recipients.

Delivery is best-effort: every sink is tried once, failures are logged and
collected in the returned ``DeliveryOutcome`` and never raised.
"""

import logging
import smtplib
from dataclasses import dataclass, field
from email.headerregistry import Address
from email.message import EmailMessage
from typing import List, Optional

from .config import ErrorMailConfig
from .constants import LOG_SEPARATOR, MAIL_CONTENT_TYPE
from .errors import DeliveryError
from .host import Mailer
from .models import MailAddress, Report

logger = logging.getLogger(__name__)


@dataclass
class DeliveryOutcome:
    """What happened to one report."""

    logged: bool = False
    sent: List[str] = field(default_factory=list)
    failed: List[DeliveryError] = field(default_factory=list)


def append_log(path: str, body: str) -> None:
    """Append one record to the log file, creating it if needed."""
    record = f"{body}{LOG_SEPARATOR}\n\n"
    try:
        # single write so records from concurrent writers stay whole
        with open(path, "a", encoding="utf-8") as f:
            f.write(record)
    except OSError as e:
        raise DeliveryError(f"cannot append to {path}: {e}", sink=path) from e


class SmtpMailer:
    """Sends plain text mail through an SMTP relay."""

    def __init__(self, host: str = "localhost", port: int = 25, timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: ErrorMailConfig) -> "SmtpMailer":
        return cls(config.smtp_host, config.smtp_port, config.smtp_timeout)

    @staticmethod
    def build_message(
        to: MailAddress,
        sender: MailAddress,
        subject: str,
        body: str,
        content_type: str = MAIL_CONTENT_TYPE,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = Address(display_name=sender.name or "", addr_spec=sender.address)
        msg["To"] = Address(display_name=to.name or "", addr_spec=to.address)
        msg["Subject"] = subject
        subtype = content_type.split(";", 1)[0].split("/", 1)[-1].strip() or "plain"
        msg.set_content(body, subtype=subtype, charset="utf-8")
        return msg

    def send(
        self,
        to: MailAddress,
        sender: MailAddress,
        subject: str,
        body: str,
        content_type: str = MAIL_CONTENT_TYPE,
    ) -> None:
        msg = self.build_message(to, sender, subject, body, content_type)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"cannot send mail to {to}: {e}", sink=to.address) from e

    def __repr__(self) -> str:
        return f"SmtpMailer({self.host!r}, {self.port!r})"


def deliver(
    report: Report, config: ErrorMailConfig, mailer: Optional[Mailer] = None
) -> DeliveryOutcome:
    """Write the report to every configured sink."""
    outcome = DeliveryOutcome()

    if config.log_file:
        try:
            append_log(config.log_file, report.body)
            outcome.logged = True
        except DeliveryError as e:
            logger.warning("Error report not logged: %s", e, exc_info=True)
            outcome.failed.append(e)

    if config.recipients:
        if mailer is None:
            mailer = SmtpMailer.from_config(config)
        for rcpt in config.recipients:
            try:
                mailer.send(
                    MailAddress(rcpt),
                    config.sender,
                    report.subject,
                    report.body,
                    MAIL_CONTENT_TYPE,
                )
                outcome.sent.append(rcpt)
            except Exception as e:
                logger.warning("Error report not mailed to %s: %s", rcpt, e, exc_info=True)
                if isinstance(e, DeliveryError):
                    outcome.failed.append(e)
                else:
                    outcome.failed.append(DeliveryError(str(e), sink=rcpt))

    return outcome
