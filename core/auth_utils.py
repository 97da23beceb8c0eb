# core/auth_utils.py
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError

from core.errors import Unauthorized

# -------------------------------------------------------------------
# Settings
# -------------------------------------------------------------------
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))

# Read at import time (expects .env to be loaded before importing this module)
SECRET_KEY = os.getenv("SECRET_KEY", "").strip()
if not SECRET_KEY:
    raise RuntimeError("Missing SECRET_KEY environment variable")


# -------------------------------------------------------------------
# JWT helpers (Access token)
# -------------------------------------------------------------------
def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise Unauthorized("Token expired") from e
    except PyJWTError as e:
        raise Unauthorized("Invalid token") from e

    if not payload.get("sub"):
        raise Unauthorized("Invalid token")
    return payload


# -------------------------------------------------------------------
# FastAPI dependency
# -------------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Returns authenticated user id (JWT 'sub').

    - No Authorization header -> 401
    - Not Bearer -> 401
    - Invalid/expired -> 401
    """
    try:
        if creds is None:
            raise Unauthorized("Missing Authorization header")
        if creds.scheme.lower() != "bearer":
            raise Unauthorized("Invalid auth scheme")
        payload = decode_access_token(creds.credentials)
    except Unauthorized as e:
        raise HTTPException(status_code=401, detail=e.message) from e
    return str(payload["sub"])
