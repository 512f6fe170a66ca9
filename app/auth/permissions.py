# app/auth/permissions.py
# Role based access for the leave / attendance ledger

from dataclasses import dataclass
from typing import Iterable, Optional
import logging

from app.core.exceptions import PermissionDeniedError
from app.models.shared.enums import Role

logger = logging.getLogger(__name__)

PRIVILEGED_ROLES = frozenset({Role.HR, Role.EXECUTIVE, Role.SYSTEM_ADMIN})
ELEVATED_ROLES = frozenset({Role.EXECUTIVE, Role.SYSTEM_ADMIN})


@dataclass(frozen=True)
class Actor:
    """Identity context of the caller: who is acting and with which role"""
    employee_id: int
    role: Role
    email: Optional[str] = None


class RoleChecker:
    """
    Check an actor's role against allowed roles.
    System Admin passes every check.
    """
    
    def __init__(self, actor: Actor):
        self.actor = actor
    
    def has_role(self, allowed_roles: Iterable[Role]) -> bool:
        if self.actor.role == Role.SYSTEM_ADMIN:
            return True
        return self.actor.role in set(allowed_roles)
    
    @property
    def is_privileged(self) -> bool:
        return self.has_role(PRIVILEGED_ROLES)
    
    def require(self, allowed_roles: Iterable[Role], custom_message: Optional[str] = None):
        """
        Require one of the roles or raise PermissionDeniedError
        """
        allowed_roles = list(allowed_roles)
        if not self.has_role(allowed_roles):
            message = custom_message or (
                "Access denied. Required role: " + " or ".join(r.value for r in allowed_roles)
            )
            logger.warning(f"Role check failed for employee {self.actor.employee_id} ({self.actor.role.value}): {message}")
            raise PermissionDeniedError(message)
    
    def require_privileged(self, custom_message: Optional[str] = None):
        self.require(PRIVILEGED_ROLES, custom_message)
    
    def resolve_target(self, employee_id: Optional[int], resource: str) -> int:
        """
        Employees may only look at their own records; HR / Executive / System Admin
        may look at anyone's. Returns the employee id the query should target.
        """
        if employee_id is None or employee_id == self.actor.employee_id:
            return self.actor.employee_id
        if not self.is_privileged:
            raise PermissionDeniedError(f"You don't have permission to view this {resource}")
        return employee_id
    
    def ensure_can_view(self, owner_id: int, resource: str):
        if owner_id != self.actor.employee_id and not self.is_privileged:
            raise PermissionDeniedError(f"You don't have permission to view this {resource}")
