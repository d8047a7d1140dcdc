"""JWT token generation and validation

This module handles JWT access token creation and validation for authentication.
Tokens are issued by the identity provider; KYC only validates them and reads
the caller's identity and role.

JWT Token Claims Structure:
===========================

Standard JWT Claims:
- sub (Subject): Seller or admin user ID
  Example: "b7d1c9e2-4f1a-4d0e-9a53-2f7f1d9e0c11"
  Purpose: Identifies the user this token belongs to

- iat (Issued At): Unix timestamp when token was created
- exp (Expiration): Unix timestamp when token expires
  Purpose: Enforce token lifetime (default 60 minutes)

Custom Claims:
- role: "seller" | "admin"
  Purpose: Separates the seller KYC endpoints from the admin review endpoints

- email: User's email address
  Purpose: Display and log correlation

Example Token Payload:
{
  "sub": "b7d1c9e2-4f1a-4d0e-9a53-2f7f1d9e0c11",
  "role": "seller",
  "email": "seller@shop.in",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from config import get_settings


def _get_jwt_secret() -> str:
    """Get JWT_SECRET from settings.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    secret = get_settings().JWT_SECRET
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def create_access_token(
    user_id: str,
    role: str,
    email: Optional[str] = None,
    expires_in_minutes: Optional[int] = None,
) -> str:
    """Create a signed JWT access token.

    Args:
        user_id: User ID (becomes the `sub` claim)
        role: "seller" or "admin"
        email: User's email address
        expires_in_minutes: Override for JWT_EXPIRY_MINUTES

    Returns:
        str: Signed JWT token

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    settings = get_settings()
    secret = _get_jwt_secret()
    if expires_in_minutes is None:
        expires_in_minutes = settings.JWT_EXPIRY_MINUTES

    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=expires_in_minutes)

    payload = {
        'sub': str(user_id),
        'role': role,
        'email': email,
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp())
    }

    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Returns:
        dict: Decoded token payload with claims

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
        ValueError: If JWT_SECRET is not set
    """
    secret = _get_jwt_secret()
    algorithm = get_settings().JWT_ALGORITHM

    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")
