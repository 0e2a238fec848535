"""Authenticated principal types.

The token's ``role`` claim selects one of four concrete user types. Code that
needs role-specific behaviour branches on the concrete class instead of
inspecting a loose role string.
"""

import enum
from typing import Annotated, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter


class UserRole(str, enum.Enum):
    COACH = "COACH"
    PARTICIPANT = "PARTICIPANT"
    PARTNER = "PARTNER"
    ADMIN = "ADMIN"


# Permissions every user of a role holds without an explicit grant.
ROLE_PERMISSIONS: dict[UserRole, FrozenSet[str]] = {
    UserRole.COACH: frozenset({"sprint:create", "sprint:edit", "sprint:submit"}),
    UserRole.PARTICIPANT: frozenset({"sprint:enroll", "milestone:claim"}),
    UserRole.PARTNER: frozenset({"sprint:enroll", "milestone:claim"}),
    UserRole.ADMIN: frozenset(),
}


class _PrincipalBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)


class CoachUser(_PrincipalBase):
    role: Literal["COACH"] = "COACH"


class ParticipantUser(_PrincipalBase):
    role: Literal["PARTICIPANT"] = "PARTICIPANT"


class PartnerUser(_PrincipalBase):
    """Referral partner; takes sprints like a participant."""

    role: Literal["PARTNER"] = "PARTNER"


class AdminUser(_PrincipalBase):
    role: Literal["ADMIN"] = "ADMIN"


AuthUser = Union[CoachUser, ParticipantUser, PartnerUser, AdminUser]

_auth_user_adapter: TypeAdapter = TypeAdapter(
    Annotated[AuthUser, Field(discriminator="role")]
)


def parse_auth_user(claims: dict) -> AuthUser:
    """Build the concrete principal from decoded token claims."""
    return _auth_user_adapter.validate_python(claims)


def has_permission(user: AuthUser, permission: str) -> bool:
    """Admins hold every permission; other roles hold their defaults plus explicit grants."""
    if isinstance(user, AdminUser):
        return True
    if isinstance(user, (CoachUser, ParticipantUser, PartnerUser)):
        role = UserRole(user.role)
        return permission in ROLE_PERMISSIONS[role] or permission in user.permissions
    raise TypeError(f"Unknown principal type: {type(user).__name__}")


def is_participant_like(user: AuthUser) -> bool:
    return isinstance(user, (ParticipantUser, PartnerUser))
