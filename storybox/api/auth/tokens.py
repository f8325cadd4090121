"""JWT session token generation and verification.

The ``sub`` claim is the user's uid. The Firebase ID token obtained at
sign-in travels in the ``id_token`` claim so generation calls can be made
on the user's behalf.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

# Secret key for signing tokens - must be set in production
SECRET_KEY = os.getenv("JWT_SECRET", "dev-secret-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 1  # Firebase ID tokens expire after an hour


def create_access_token(
    subject: str,
    id_token: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT session token.

    Args:
        subject: The user's uid
        id_token: Firebase ID token to forward to the generation service
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)

    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "exp": now + expires_delta,
        "iat": now,
    }
    if id_token:
        payload["id_token"] = id_token
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Verify a JWT token and return its payload, or None if invalid/expired."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.InvalidTokenError:
        return None
