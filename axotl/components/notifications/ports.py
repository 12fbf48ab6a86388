"""
Notification component port definitions.
"""

from __future__ import annotations

from axotl.ports.clock import ClockPort
from axotl.ports.mailer import MailerPort
from axotl.ports.repo import NotificationRepoPort, PublicationRepoPort, UserRepoPort

__all__ = [
    "ClockPort",
    "MailerPort",
    "NotificationRepoPort",
    "PublicationRepoPort",
    "UserRepoPort",
]
