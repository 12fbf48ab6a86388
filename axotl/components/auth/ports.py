from axotl.ports.auth import AuthPort
from axotl.ports.clock import ClockPort
from axotl.ports.repo import UserRepoPort
from axotl.ports.roles import RoleCapabilityPort

__all__ = ["AuthPort", "ClockPort", "RoleCapabilityPort", "UserRepoPort"]
