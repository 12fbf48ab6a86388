from collections.abc import Sequence

from axotl.domain.entities import Publication
from axotl.rules.models import RolesRules


class PolicyEngine:
    """
    Maps capabilities to the roles that hold them.

    Role strings are only compared here and in the role capability adapter;
    components ask for a capability and pass the resulting role list on.
    """

    def __init__(self, rules: RolesRules):
        self.rules = rules

    def roles_for(self, capability: str) -> list[str]:
        return list(self.rules.capabilities.get(capability, []))

    def role_allows(self, role: str | None, capability: str) -> bool:
        if role is None:
            return False
        return role in self.roles_for(capability)

    def is_valid_role(self, role: str) -> bool:
        return role in self.rules.valid

    @staticmethod
    def owns(user_id: int, resource: Publication) -> bool:
        return resource.owner_id == user_id

    @staticmethod
    def any_role(user_role: str, allowed: Sequence[str]) -> bool:
        return user_role in allowed
