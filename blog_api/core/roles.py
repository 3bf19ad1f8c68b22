from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Union

from ..exceptions import ValidationError


class Role(str, Enum):
    ADMIN = "admin"
    AUTHOR = "author"
    READER = "reader"


DEFAULT_ROLE = Role.READER

# Roles whose permissions each role subsumes.
ROLE_HIERARCHY: Mapping[Role, FrozenSet[Role]] = MappingProxyType({
    Role.ADMIN: frozenset({Role.ADMIN, Role.AUTHOR, Role.READER}),
    Role.AUTHOR: frozenset({Role.AUTHOR, Role.READER}),
    Role.READER: frozenset({Role.READER}),
})

VALID_ROLES = tuple(role.value for role in Role)


def _coerce(value: Union[Role, str, None]) -> Optional[Role]:
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def permits(held_role: Union[Role, str, None], required_role: Union[Role, str]) -> bool:
    """True when ``held_role`` carries the permissions of ``required_role``.

    Unknown or missing roles never grant anything.
    """
    held = _coerce(held_role)
    required = _coerce(required_role)
    if held is None or required is None:
        return False
    return required in ROLE_HIERARCHY[held]


def parse_role(value: Union[Role, str, None]) -> Role:
    role = _coerce(value)
    if role is None:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(VALID_ROLES)}")
    return role
