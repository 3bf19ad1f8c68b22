# =============================================================================
# Credential tokens
# =============================================================================
#
# Signed, time-bound bearer tokens carrying identity and role claims.
# Verification is stateless: there is no revocation list, so a role change
# only takes effect once the holder logs in again and receives a new token.
#
# =============================================================================

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import jwt

from .config import settings
from .roles import Role
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "exp", "role"]


@dataclass(frozen=True)
class Claims:
    """Verified token claims. Produced only by :func:`verify_token`."""
    subject_id: str
    email: str
    role: str
    expires_at: datetime


class TokenError(AuthenticationError):
    """Base exception for token errors."""
    default_detail = "Invalid token"


class TokenMalformedError(TokenError):
    default_detail = "Malformed token"


class TokenSignatureError(TokenError):
    default_detail = "Invalid token signature"


class TokenExpiredError(TokenError):
    default_detail = "Token has expired"


def _secret(secret_key: Optional[str]) -> str:
    secret = secret_key if secret_key is not None else settings.SECRET_KEY
    if not secret:
        raise ValueError("SECRET_KEY not properly configured")
    return secret


def issue_token(
    subject_id: str,
    email: str,
    role,
    ttl: Optional[timedelta] = None,
    *,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """Sign a token for ``subject_id``. The role is embedded as given."""
    now = datetime.now(timezone.utc)
    if ttl is None:
        ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": subject_id,
        "email": email,
        "role": role.value if isinstance(role, Role) else role,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, _secret(secret_key), algorithm=algorithm or settings.ALGORITHM)


def verify_token(
    token: str,
    *,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> Claims:
    """
    Decode and validate a token.

    Raises:
        TokenMalformedError: not a three-part JWT, or required claims missing
        TokenSignatureError: wrong key, or a header algorithm other than ours
        TokenExpiredError: ``exp`` is in the past
    """
    if not token or token.count(".") != 2:
        raise TokenMalformedError()
    try:
        payload = jwt.decode(
            token,
            _secret(secret_key),
            algorithms=[algorithm or settings.ALGORITHM],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError):
        raise TokenSignatureError()
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected malformed token: {e}")
        raise TokenMalformedError()

    subject_id = payload.get("sub")
    role = payload.get("role")
    if not isinstance(subject_id, str) or not isinstance(role, str):
        raise TokenMalformedError()

    return Claims(
        subject_id=subject_id,
        email=payload.get("email") or "",
        role=role,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def parse_bearer(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        raise TokenMalformedError("Authorization header is required")
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise TokenMalformedError("Invalid authorization header format")
    return parts[1]
