"""
JWT authentication for operator endpoints.

Security measures implemented:
- HS256 signing algorithm with a shared secret (JWT_SECRET)
- Token expiration (24 hours)
- Tokens accepted from the Authorization header or the session cookie
"""

import os
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import HTTPException, Request

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = 24
OPERATOR_ROLE = "operator"


def create_jwt(operator_id: str, operator_name: str) -> str:
    """
    Create a signed JWT token for an operator.

    Args:
        operator_id: Stable operator identifier
        operator_name: Display name

    Returns:
        Signed JWT token string
    """
    if not JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable not set")

    now = datetime.now(timezone.utc)
    payload = {
        "sub": operator_id,
        "name": operator_name,
        "role": OPERATOR_ROLE,
        "iat": now,
        "exp": now + timedelta(hours=JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_jwt(token: str) -> dict | None:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token string

    Returns:
        Decoded payload dict if valid, None if invalid
    """
    if not JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable not set")

    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def _extract_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get("session")


async def require_operator(request: Request) -> dict:
    """
    FastAPI dependency for operator-only endpoints.

    Returns:
        The decoded JWT payload

    Raises:
        HTTPException: 401 if not authenticated, 403 if not an operator
    """
    token = _extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = verify_jwt(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if payload.get("role") != OPERATOR_ROLE:
        raise HTTPException(status_code=403, detail="Operator access required")

    return payload
