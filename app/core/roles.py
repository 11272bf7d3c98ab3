"""
Roles and capabilities.

Every authorization decision goes through ``has_capability``; role strings
coming from the identity provider are parsed once into ``Role``.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional


class Role(str, Enum):
    CAPACITY_ADMIN = "capacity_admin"
    NSIGHT_ADMIN = "nsight_admin"
    USER = "user"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        if isinstance(value, Role):
            return value
        if not value:
            return cls.USER
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.USER


class Capability(str, Enum):
    AUTO_APPROVE = "auto_approve"
    APPROVE = "approve"
    MANAGE_USERS = "manage_users"
    VIEW_ALL_DATA = "view_all_data"


_ADMIN: FrozenSet[Capability] = frozenset(Capability)

ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.CAPACITY_ADMIN: _ADMIN,
    Role.NSIGHT_ADMIN: _ADMIN,
    Role.USER: frozenset(),
}


def has_capability(role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES[Role.parse(role)]
