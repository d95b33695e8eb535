"""Formatting of error events into human-readable reports."""

from datetime import datetime
from typing import Iterable, List, Optional

from .host import HostContext
from .models import ErrorEvent, Report, StackFrame
from .utils import export_value, rewrite_path


def format_stack(frames: Iterable[StackFrame], install_root: Optional[str] = None) -> List[str]:
    """Render stack frames, innermost first, one line per frame."""
    lines = []
    for i, frame in enumerate(frames):
        prefix = ""
        if frame.owner:
            prefix = f"{frame.owner}{frame.operator or ''}"
        file = rewrite_path(frame.file, install_root)
        lines.append(f"#{i}: {prefix}{frame.function} at {file}:{frame.line}")
    return lines


def format_subject(event: ErrorEvent, context: HostContext) -> str:
    subject = f"[{context.site_name}] {event.type_name}"
    if context.title:
        subject += f" at {context.title}"
    return subject


def build_report(
    event: ErrorEvent, context: HostContext, *, now: Optional[datetime] = None
) -> Report:
    """
    Build the report for an event.

    Parameters:
        event: the error or exception being reported
        context: request snapshot supplied by the host
        now: report time; defaults to the current local time

    Returns:
        A Report whose body is ready for the log file and for mail
    """
    if now is None:
        now = datetime.now()
    now = now.replace(microsecond=0)

    lines = []

    # Header
    lines.append(
        f"[{now:%Y-%m-%d %H:%M:%S}] {context.site_name}, Title: {context.title or '-'}"
    )
    lines.append(f"User: {context.user_name}, IP: {context.client_ip}")
    lines.append("")

    # Exception messages already name their location
    if not event.is_exception:
        lines.append(f"{event.type_name} at {event.file}:{event.line}")
    lines.append(event.message.strip())
    lines.append("")

    if event.include_stack:
        lines.append("Stack trace:")
        lines.extend(format_stack(event.stack, context.install_root))
        lines.append("")

    # Request details
    lines.append(f"URL: {context.url}")
    lines.append("")
    lines.append(f"query = {export_value(dict(context.query))}")
    lines.append(f"form = {export_value(dict(context.form))}")
    lines.append(f"cookies = {export_value(dict(context.cookies))}")

    return Report(
        subject=format_subject(event, context),
        body="\n".join(lines) + "\n",
        timestamp=now,
    )
