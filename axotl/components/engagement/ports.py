"""
Engagement component port definitions.
"""

from __future__ import annotations

from axotl.ports.clock import ClockPort
from axotl.ports.gateway import GatewayPort
from axotl.ports.repo import CommentRepoPort, FavoriteRepoPort, PublicationRepoPort

__all__ = [
    "ClockPort",
    "CommentRepoPort",
    "FavoriteRepoPort",
    "GatewayPort",
    "PublicationRepoPort",
]
