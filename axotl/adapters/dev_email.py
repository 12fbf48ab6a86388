"""
Logging mailer.

Notifications flagged for email are handed to this adapter, which logs the
message instead of delivering it. Messages are also kept in memory so tests
can assert on what would have been sent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


@dataclass
class LoggedEmail:
    """Record of a logged email for test assertions."""

    recipient_id: int
    subject: str
    body: str
    logged_at: datetime


@dataclass
class LoggingMailer:
    sent: list[LoggedEmail] = field(default_factory=list)

    log_level: int = logging.INFO
    body_preview_length: int = 100

    def send(self, recipient_id: int, subject: str, body: str) -> bool:
        self.sent.append(
            LoggedEmail(
                recipient_id=recipient_id,
                subject=subject,
                body=body,
                logged_at=datetime.now(UTC),
            )
        )

        preview = body[: self.body_preview_length]
        if len(body) > self.body_preview_length:
            preview += "..."
        logger.log(
            self.log_level,
            "EMAIL (not sent): To=user:%s, Subject=%s, Body=%s",
            recipient_id,
            subject,
            preview,
        )
        return True

    # --- Test Helper Methods ---

    def get_emails_to(self, recipient_id: int) -> list[LoggedEmail]:
        return [e for e in self.sent if e.recipient_id == recipient_id]

    def clear(self) -> None:
        self.sent.clear()
