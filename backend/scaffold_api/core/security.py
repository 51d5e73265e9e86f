"""Security utilities - JWT, password hashing, opaque token secrets"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from jose import JWTError, jwt
import bcrypt
from scaffold_api.config import settings
from scaffold_api.core.durations import parse_duration
import secrets

# bcrypt ignores (and bcrypt 5 rejects) input past this length
BCRYPT_MAX_PASSWORD_BYTES = 72

ACCESS_TOKEN_TYPE = "access"
OAUTH_STATE_TOKEN_TYPE = "oauth_state"

REFRESH_TOKEN_SEPARATOR = "."


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password

    Returns:
        bool: True if password matches
    """
    password_bytes = plain_password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(
        password_bytes,
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    ).decode('utf-8')


def generate_refresh_token() -> Tuple[str, str, str]:
    """
    Generate a new opaque refresh token

    The raw value is ``<selector>.<verifier>``. The selector is a non-secret
    lookup key; the verifier holds 320 bits of entropy and is only ever
    stored as a bcrypt hash.

    Returns:
        Tuple of (raw token, selector, verifier)
    """
    selector = secrets.token_hex(12)
    verifier = secrets.token_urlsafe(40)
    return f"{selector}{REFRESH_TOKEN_SEPARATOR}{verifier}", selector, verifier


def split_refresh_token(raw_token: str) -> Optional[Tuple[str, str]]:
    """Split a raw refresh token into (selector, verifier), or None if malformed."""
    if not raw_token or REFRESH_TOKEN_SEPARATOR not in raw_token:
        return None
    selector, verifier = raw_token.split(REFRESH_TOKEN_SEPARATOR, 1)
    if not selector or not verifier:
        return None
    return selector, verifier


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Claims to encode in token
        expires_delta: Token expiration time

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta is None:
        expires_delta = parse_duration(settings.ACCESS_TOKEN_EXPIRES_IN)

    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "jti": secrets.token_urlsafe(32),  # Unique token ID
        "typ": ACCESS_TOKEN_TYPE,
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify any JWT issued by this service

    Args:
        token: JWT token string

    Returns:
        Optional[Dict]: Decoded claims or None if the signature or expiry is invalid
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify an access token

    Args:
        token: JWT token string

    Returns:
        Optional[Dict]: Decoded token data or None if invalid
    """
    payload = decode_token(token)
    if not payload or payload.get("typ") != ACCESS_TOKEN_TYPE:
        return None
    return payload


def create_oauth_state(provider: str) -> str:
    """Create a short-lived signed state value for an OAuth round trip."""
    now = datetime.now(timezone.utc)
    claims = {
        "provider": provider,
        "nonce": secrets.token_urlsafe(16),
        "iat": now,
        "exp": now + parse_duration(settings.OAUTH_STATE_EXPIRES_IN),
        "typ": OAUTH_STATE_TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_oauth_state(state: str, provider: str) -> bool:
    """Check that an OAuth state value was issued by us for this provider and is unexpired."""
    payload = decode_token(state)
    if not payload or payload.get("typ") != OAUTH_STATE_TOKEN_TYPE:
        return False
    return payload.get("provider") == provider
