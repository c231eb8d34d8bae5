"""Role-Based Access Control (RBAC) utilities."""

from enum import Enum
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from stockflow.core.security import decode_access_token


class UserRole(str, Enum):
    """User roles for RBAC."""

    OWNER = "owner"
    MANAGER = "manager"
    STAFF = "staff"


# Role hierarchy: owner > manager > staff
ROLE_HIERARCHY = {
    UserRole.OWNER: 3,
    UserRole.MANAGER: 2,
    UserRole.STAFF: 1,
}


class TokenData:
    """Decoded token data.

    Attributes:
        user_id: The user's id at the identity provider. Trusted verbatim
            as the acting user on operations and ledger entries.
        email: The user's email address.
        role: The user's role (owner/manager/staff).
    """

    def __init__(self, user_id: int, email: str, role: UserRole):
        self.user_id = user_id
        self.email = email
        self.role = role


def token_payload_from_request(request: Request) -> Optional[dict]:
    # Authorization header first, then the HttpOnly cookie
    payload = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]
        if token:
            payload = decode_access_token(token)

    if payload is None:
        cookie_token = request.cookies.get("access_token")
        if cookie_token:
            payload = decode_access_token(cookie_token)
    return payload


async def get_current_user(request: Request) -> TokenData:
    """Get the current authenticated user from the JWT token."""
    payload = token_payload_from_request(request)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    email = payload.get("email")
    role = payload.get("role")

    if user_id is None or email is None or role is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        user_role = UserRole(role)
        user_id = int(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    return TokenData(user_id=user_id, email=email, role=user_role)


def require_role(minimum_role: UserRole):
    """Dependency to require a minimum role level."""

    async def role_checker(
        current_user: Annotated[TokenData, Depends(get_current_user)]
    ) -> TokenData:
        user_level = ROLE_HIERARCHY.get(current_user.role, 0)
        required_level = ROLE_HIERARCHY.get(minimum_role, 0)

        if user_level < required_level:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role {minimum_role.value} or higher",
            )
        return current_user

    return role_checker


# Common role dependencies
RequireManager = Annotated[TokenData, Depends(require_role(UserRole.MANAGER))]
CurrentUser = Annotated[TokenData, Depends(get_current_user)]
