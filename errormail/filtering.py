"""Decide whether an event qualifies for reporting."""

import logging

from .config import ErrorMailConfig
from .models import ErrorEvent

logger = logging.getLogger(__name__)


def effective_mask(configured: int, live: int, suppression_depth: int) -> int:
    """
    Severity mask to test events against.

    Explicit suppression in the host (a zero live mask or a positive
    suppression depth) replaces the configured mask with the live one.
    """
    if live == 0 or suppression_depth > 0:
        return live
    return configured


def should_report(
    event: ErrorEvent,
    config: ErrorMailConfig,
    live_mask: int,
    suppression_depth: int = 0,
    in_progress: bool = False,
) -> bool:
    if in_progress:
        logger.debug("Report already in progress, skipping %s", event.type_name)
        return False
    if not config.has_sink:
        return False
    if event.is_exception:
        return config.report_exceptions
    mask = effective_mask(config.severity_mask, live_mask, suppression_depth)
    return bool(mask & int(event.kind))
