from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.auth.jwt_handler import decode_access_token
from app.auth.permissions import Actor, RoleChecker, PRIVILEGED_ROLES
from app.core.request_context import get_request_context
from app.models.shared.enums import Role
import logging

security = HTTPBearer()
logger = logging.getLogger(__name__)

def _unauthorized(detail: str = "Invalid authentication credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

async def get_current_actor(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Actor:
    """Resolve the calling employee and role from the bearer token"""
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized()

    try:
        employee_id = int(payload.get("sub"))
        role = Role(payload.get("role"))
    except (TypeError, ValueError):
        raise _unauthorized()

    actor = Actor(employee_id=employee_id, role=role, email=payload.get("email"))

    # Add request info to context
    request.state.actor = actor
    return actor

def get_audit_context(request: Request) -> Dict[str, Optional[str]]:
    """Client details attached to audit entries"""
    return get_request_context(request)

def require_roles(*roles: Role):
    """
    Dependency to require one of the given roles for an endpoint

    Examples:
        require_roles(Role.HR, Role.EXECUTIVE)
    """
    async def role_dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        RoleChecker(actor).require(roles)
        return actor

    return role_dependency

require_privileged = require_roles(*PRIVILEGED_ROLES)
