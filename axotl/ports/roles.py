from collections.abc import Sequence
from typing import Protocol


class RoleCapabilityPort(Protocol):
    def has_role(self, user_id: int, allowed_roles: Sequence[str]) -> bool:
        """True if the user exists and holds one of allowed_roles."""
        ...
