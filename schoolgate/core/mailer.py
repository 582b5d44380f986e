"""
Outbound mail.

No SMTP transport is wired yet: messages are written to the log so that
invite links can be picked up in development.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from schoolgate.core.config import settings

logger = logging.getLogger(__name__)


async def send_mail(*, to: str, subject: str, text: str, html: str | None = None) -> bool:
    logger.info(
        "Sending email from=%s to=%s subject=%r at=%s\n%s",
        settings.MAIL_FROM,
        to,
        subject,
        datetime.now(timezone.utc).isoformat(),
        text,
    )
    if html:
        logger.debug("HTML body for %s: %s", to, html)
    return True
