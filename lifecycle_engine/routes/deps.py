"""
Shared route dependencies.

Tokens are issued by the platform's auth service; this engine only reads
the admin identity (the `sub` claim) to attribute workflow changes.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from lifecycle_engine.config import settings

security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


def get_admin_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Admin identity from the bearer token. None if no token or invalid token."""
    if credentials is None:
        return None
    try:
        payload = jwt.decode(credentials.credentials, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    return str(sub) if sub is not None else None
