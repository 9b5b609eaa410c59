import hashlib
from datetime import datetime, timedelta, UTC

import bcrypt
from jose import JWTError, jwt
from app.config import settings
from app.core.exceptions import UnauthorizedException


def create_access_token(user_id: int, organization_id: int, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed access token.

    Args:
        user_id: Internal user ID, stored in the 'sub' claim
        organization_id: Organization ID, stored in the 'org' claim
        expires_delta: Lifetime override (default ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        Encoded JWT
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": str(user_id), "org": organization_id, "iat": now, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        # Validate expiration (jose checks this automatically)
        exp = payload.get("exp")
        if exp is None:
            raise UnauthorizedException("Token missing expiration")

        # Extract user_id from 'sub' claim
        user_id: str = payload.get("sub")
        if user_id is None:
            raise UnauthorizedException("Token missing user identifier")

        return payload

    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")


def extract_user_id(token: str) -> int:
    """Extract internal user ID from JWT token"""
    payload = decode_jwt(token)
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedException("Token has malformed user identifier")


def _prehash(plain: str) -> bytes:
    # bcrypt ignores bytes past 72, SHA-256 hex digest is 64
    return hashlib.sha256(plain.encode("utf-8")).hexdigest().encode()


def hash_password(plain: str) -> str:
    """Hash a plaintext password with bcrypt"""
    return bcrypt.hashpw(_prehash(plain), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str | None) -> bool:
    """Verify a plaintext password against its bcrypt hash"""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_prehash(plain), hashed.encode())
    except ValueError:
        return False
