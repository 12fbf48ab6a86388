"""
Publication component port definitions.
"""

from __future__ import annotations

from axotl.ports.clock import ClockPort
from axotl.ports.gateway import GatewayPort
from axotl.ports.repo import (
    PublicationImageRepoPort,
    PublicationRepoPort,
    PublicationTypeRepoPort,
)
from axotl.ports.roles import RoleCapabilityPort

__all__ = [
    "ClockPort",
    "GatewayPort",
    "PublicationImageRepoPort",
    "PublicationRepoPort",
    "PublicationTypeRepoPort",
    "RoleCapabilityPort",
]
