"""JWT utilities: token signing and verification"""
import time
import uuid
from typing import Any, Dict, NamedTuple, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.errors import TokenExpiredError, TokenInvalidError
from app.utils.logger import logger


class TokenClaims(NamedTuple):
    """Decoded identity carried by an access token."""
    user_id: str
    email: str
    issued_at: int
    expires_at: int
    jti: Optional[str] = None


# ---------------------------------------------------------------------------
# Token creation
# ---------------------------------------------------------------------------

def create_access_token(
    user_id: str,
    email: str,
    secret: str,
    algorithm: str,
    expires_in: int,
    now: Optional[int] = None,
) -> str:
    """Sign and return a JWT access token.

    Args:
        user_id:    Value for the 'userId' claim.
        email:      Value for the 'email' claim.
        secret:     HMAC signing secret.
        algorithm:  JOSE algorithm name (HS256 by default).
        expires_in: Lifetime in seconds, added to 'iat' for 'exp'.
        now:        Issue time as a unix timestamp; defaults to the current time.

    Returns:
        Signed JWT string.
    """
    issued_at = int(time.time()) if now is None else now

    payload: Dict[str, Any] = {
        "userId": user_id,
        "email": email,
        "jti": str(uuid.uuid4()),
        "iat": issued_at,
        "exp": issued_at + expires_in,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------

def decode_access_token(token: str, secret: str, algorithm: str, verify_exp: bool = True) -> TokenClaims:
    """Verify a JWT signature (and expiry unless disabled) and return its claims.

    Raises:
        TokenExpiredError: 'exp' is in the past.
        TokenInvalidError: bad signature, malformed token, or missing claims.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"verify_exp": verify_exp},
        )
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as exc:
        logger.debug(f"JWT decode failed: {exc}")
        raise TokenInvalidError()

    user_id = payload.get("userId")
    email = payload.get("email")
    exp = payload.get("exp")
    if not user_id or not email or not isinstance(exp, int):
        raise TokenInvalidError()

    return TokenClaims(
        user_id=str(user_id),
        email=email,
        issued_at=int(payload.get("iat", 0)),
        expires_at=exp,
        jti=payload.get("jti"),
    )
