"""FastAPI dependencies for authentication and authorization.

This module provides dependency injection functions for:
- Extracting and validating bearer tokens from requests
- Building the caller's Session from token claims (stateless, no DB lookup)
- Enforcing role-based access control

Usage:
    @router.get("/kyc/me")
    async def my_kyc(session: Session = Depends(get_current_session)):
        ...

    @router.post("/admin/kyc/{kyc_id}/approve")
    async def approve(admin: Session = Depends(get_current_admin)):
        ...
"""

from datetime import datetime, timezone
from typing import Callable, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from domain.kyc.models import Session
from observability.context import bind_actor
from .jwt import decode_token
from .roles import UserRole, has_permission


# Missing credentials are reported as 401 below rather than FastAPI's default
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Session:
    """Validate the bearer token and return the caller's Session.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired, or has
            no subject claim
    """
    if credentials is None:
        raise _unauthorized("Not authenticated, please log in again.")

    token = credentials.credentials
    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Your session has expired, please log in again.")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(str(e))
    except ValueError as e:
        raise _unauthorized(f"Invalid token claims: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: missing user ID claim")

    bind_actor(str(user_id), payload.get("role"))

    exp = payload.get("exp")
    return Session(
        user_id=str(user_id),
        access_token=token,
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
        role=payload.get("role"),
        email=payload.get("email"),
    )


def require_role(required_role: UserRole) -> Callable:
    """Create a dependency that enforces the role hierarchy.

    Raises:
        HTTPException 403: If the caller's role is missing or insufficient
    """

    def role_dependency(session: Session = Depends(get_current_session)) -> Session:
        try:
            user_role = UserRole(session.role)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Unknown role: {session.role}",
            )

        if not has_permission(user_role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {required_role.value}",
            )

        return session

    return role_dependency


def get_current_seller(session: Session = Depends(require_role(UserRole.SELLER))) -> Session:
    return session


def get_current_admin(session: Session = Depends(require_role(UserRole.ADMIN))) -> Session:
    """Convenience dependency for admin-only endpoints."""
    return session

