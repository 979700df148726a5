import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from jose import jwt as jose_jwt
from pydantic import BaseModel

from .config import JWT_ALGORITHM, JWT_EXPIRY_HOURS, SECRET_KEY
from .constants import Role

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Identity carried by a verified access token"""

    userId: int
    role: Role


def create_access_token(user_id: int, role: Role, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token

    Args:
        user_id: ID of the authenticated user
        role: Role granted to the token holder
        expires_delta: Token lifetime (default JWT_EXPIRY_HOURS)
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=JWT_EXPIRY_HOURS))
    payload = {"userId": user_id, "role": Role(role).value, "exp": expire}
    return jose_jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_access_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode an access token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Authentication required. Please log in.")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Authentication required. Please log in.")

    try:
        return CurrentUser(userId=payload.get("userId"), role=payload.get("role"))
    except ValueError as e:
        logger.warning(f"⚠️ Token payload rejected: {e}")
        raise HTTPException(status_code=401, detail="Invalid token payload") from e


def require_roles(*roles: Role):
    """Dependency factory restricting an endpoint to the given roles"""

    async def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            logger.warning(
                f"🚫 User {current_user.userId} ({current_user.role.value}) denied, requires {[r.value for r in roles]}"
            )
            raise HTTPException(status_code=403, detail="Access denied. Insufficient permissions.")
        return current_user

    return checker
