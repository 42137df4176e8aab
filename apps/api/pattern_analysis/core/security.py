"""Security utilities for JWT session tokens and webhook signatures."""

import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from pattern_analysis.core.config import settings


# =============================================================================
# Session Token (JWT in cookie)
# =============================================================================

def create_session_token(
    user_id: UUID,
    role: str,
    token_version: int,
) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET).
    Token contains user identity, role and revocation version.
    """
    payload = {
        "sub": str(user_id),
        "role": role,
        "token_version": token_version,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore


# =============================================================================
# Payment webhook signature
# =============================================================================

def sign_payment_payload(payload: bytes) -> str:
    """Return the X-Payment-Signature header value for a payload."""
    digest = hmac.new(
        settings.PAYMENT_WEBHOOK_SECRET.encode(), payload, hashlib.sha256
    ).hexdigest()
    return f"sha256={digest}"


def verify_payment_signature(payload: bytes, signature: str) -> bool:
    """
    Verify X-Payment-Signature HMAC signature.

    Args:
        payload: Raw request body bytes
        signature: Value of X-Payment-Signature header

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature or not signature.startswith("sha256="):
        return False

    if not settings.PAYMENT_WEBHOOK_SECRET:
        return False

    return hmac.compare_digest(sign_payment_payload(payload), signature)
