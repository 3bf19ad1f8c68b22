from enum import Enum
from typing import Optional, Union

from .roles import Role, permits
from .security import Claims
from ..exceptions import AuthenticationError, AuthorizationError


class Decision(str, Enum):
    ALLOW = "allow"
    FORBIDDEN = "forbidden"
    UNAUTHENTICATED = "unauthenticated"


def check_role(claims: Optional[Claims], required: Union[Role, str]) -> Decision:
    if claims is None:
        return Decision.UNAUTHENTICATED
    if permits(claims.role, required):
        return Decision.ALLOW
    return Decision.FORBIDDEN


def _enforce(decision: Decision, claims: Optional[Claims]) -> Claims:
    if decision is Decision.UNAUTHENTICATED:
        raise AuthenticationError()
    if decision is Decision.FORBIDDEN:
        raise AuthorizationError()
    return claims


def require_role(claims: Optional[Claims], required: Union[Role, str]) -> Claims:
    return _enforce(check_role(claims, required), claims)


def check_owner_or_role(
    claims: Optional[Claims],
    resource_owner_id: Optional[str],
    required: Union[Role, str],
) -> Decision:
    if claims is None:
        return Decision.UNAUTHENTICATED
    if resource_owner_id is not None and claims.subject_id == resource_owner_id:
        return Decision.ALLOW
    return check_role(claims, required)


def require_owner_or_role(
    claims: Optional[Claims],
    resource_owner_id: Optional[str],
    required: Union[Role, str],
) -> Claims:
    """Allow the resource owner, or anyone holding ``required``."""
    return _enforce(check_owner_or_role(claims, resource_owner_id, required), claims)
