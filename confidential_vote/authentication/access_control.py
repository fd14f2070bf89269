# confidential_vote/authentication/access_control.py

from enum import Enum
from functools import wraps
import logging

from confidential_vote.election.errors import AdministratorCannotParticipate, NotAuthorized

# Caller gating for election operations: the administrator runs the election,
# everyone else may only take part in it.

logger = logging.getLogger(__name__)


class Role(Enum):
    ADMINISTRATOR = "administrator"
    PARTICIPANT = "participant"


class Permission(Enum):
    REGISTER = "register"
    VOTE = "vote"
    ADVANCE_STAGE = "advance_stage"
    REVEAL_WINNER = "reveal_winner"
    RESET = "reset"
    WITHDRAW = "withdraw"


# Role -> Permissions mapping
ROLE_PERMISSIONS = {
    Role.PARTICIPANT: [
        Permission.REGISTER,
        Permission.VOTE,
    ],
    Role.ADMINISTRATOR: [
        Permission.ADVANCE_STAGE,
        Permission.REVEAL_WINNER,
        Permission.RESET,
        Permission.WITHDRAW,
    ],
}


def normalize_principal(principal):
    if not isinstance(principal, str) or not principal.strip():
        raise NotAuthorized("Missing caller principal")
    return principal.strip().lower()


class AccessPolicy:
    def __init__(self, administrator):
        self.administrator = normalize_principal(administrator)

    def role_of(self, principal):
        if normalize_principal(principal) == self.administrator:
            return Role.ADMINISTRATOR
        return Role.PARTICIPANT

    def has_permission(self, role, permission):
        if isinstance(role, str):
            role = Role(role)
        if isinstance(permission, str):
            permission = Permission(permission)
        return permission in ROLE_PERMISSIONS.get(role, [])


# Decorator for election methods taking the caller as first argument.
# The wrapped object must expose `policy` (an AccessPolicy).
def require_permission(permission):
    def decorator(func):
        @wraps(func)
        def wrapper(self, caller, *args, **kwargs):
            caller = normalize_principal(caller)
            role = self.policy.role_of(caller)
            if not self.policy.has_permission(role, permission):
                logger.warning(f"{role.value} {caller} denied {permission.value}")
                if role is Role.ADMINISTRATOR:
                    raise AdministratorCannotParticipate("Administrator cannot perform this action")
                raise NotAuthorized("Caller is not the administrator")
            return func(self, caller, *args, **kwargs)
        return wrapper
    return decorator
