# backoffice/core/auth.py
import uuid
from dataclasses import dataclass
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from backoffice.core.config import get_settings
from backoffice.models.enums import UserRole

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so require_auth can answer with a consistent 401.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    """
    Who is calling: resolved once per request from the bearer token and
    passed explicitly into every self-service operation.
    """

    user_id: uuid.UUID
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMINISTRATOR


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token (JWT).

    Verification:
      - signature (JWT_ALG using JWT_SECRET)
      - expiration time (exp), when present
      - audience is NOT verified

    Args:
        token: raw JWT from the Authorization header.

    Returns:
        Decoded JWT claims.

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def context_from_claims(payload: dict[str, Any]) -> RequestContext:
    """
    Build a RequestContext from decoded claims.

    Expected claims:
      - sub:   user id (UUID string)
      - email: login email
      - role:  CLIENT | ADMINISTRATOR (defaults to CLIENT)

    Raises:
        HTTPException(401): if a claim is missing or malformed.
    """
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )

    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )

    try:
        role = UserRole(str(payload.get("role", UserRole.CLIENT.value)).upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid role in token",
        )

    return RequestContext(user_id=user_id, email=email, role=role)


def get_request_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> RequestContext | None:
    """
    Resolve the caller from the Authorization header.

    Returns:
        RequestContext if a token was sent, else None.
    """
    if credentials is None:
        return None
    payload = decode_access_token(credentials.credentials)
    return context_from_claims(payload)


def require_auth(
    ctx: RequestContext | None = Depends(get_request_context),
) -> RequestContext:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if no token was sent.
    """
    if ctx is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return ctx


def require_admin(ctx: RequestContext = Depends(require_auth)) -> RequestContext:
    """
    Enforce the ADMINISTRATOR role.

    Raises:
        HTTPException(403): if role is not ADMINISTRATOR.
    """
    if not ctx.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return ctx
