"""User registration, login, and the access token lifecycle.

Tokens move through ``issued -> valid -> expired | revoked``. Revocation is a
``blacklist:<token>`` cache entry whose TTL is the token's remaining lifetime,
so the blacklist cleans itself up.
"""
import time
from datetime import datetime
from typing import Any, Callable, Dict, NamedTuple, Optional

from sqlalchemy.exc import IntegrityError

from app.cache import CacheGateway, blacklist_key
from app.config import settings
from app.database import Database
from app.errors import (
    AuthenticationError,
    CacheError,
    ConflictError,
    NotFoundError,
    TokenError,
    TokenRevokedError,
    ValidationError,
)
from app.models.user import User
from app.utils.auth import (
    hash_password,
    normalize_email,
    validate_name,
    validate_password,
    verify_password,
)
from app.utils.jwt_utils import TokenClaims, create_access_token, decode_access_token
from app.utils.logger import logger


class AuthContext(NamedTuple):
    """Outcome of an optional authentication check.

    ``claims`` is set for an authenticated caller. For an anonymous caller it
    is None and ``reason`` says why a supplied token was rejected (None when
    no token was supplied at all).
    """
    claims: Optional[TokenClaims]
    reason: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.claims is not None


ANONYMOUS = AuthContext(claims=None)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def public_user(user: User) -> Dict[str, Any]:
    """User fields that are safe to return to clients (never the hash)"""
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "emailVerified": user.email_verified,
        "subscriptionTier": user.subscription_tier,
        "createdAt": _isoformat(user.created_at),
        "lastLogin": _isoformat(user.last_login),
    }


class AuthService:
    def __init__(
        self,
        database: Database,
        cache: CacheGateway,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_seconds: Optional[int] = None,
        bcrypt_rounds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.database = database
        self.cache = cache
        self.secret = secret or settings.JWT_SECRET
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.expire_seconds = settings.JWT_EXPIRE_SECONDS if expire_seconds is None else expire_seconds
        self.bcrypt_rounds = bcrypt_rounds or settings.BCRYPT_ROUNDS
        self._clock = clock
        self._dummy_hash: Optional[str] = None

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_token(self, user: User) -> str:
        return create_access_token(
            user_id=user.id,
            email=user.email,
            secret=self.secret,
            algorithm=self.algorithm,
            expires_in=self.expire_seconds,
            now=int(self._clock()),
        )

    def verify_token(self, token: str) -> TokenClaims:
        """Return the token's claims if it is signed, unexpired, and not revoked.

        Raises:
            TokenExpiredError, TokenInvalidError, TokenRevokedError
        """
        claims = decode_access_token(token, self.secret, self.algorithm)
        if self.cache.exists(blacklist_key(token)):
            raise TokenRevokedError()
        return claims

    def optional_verify(self, token: Optional[str]) -> AuthContext:
        if not token:
            return ANONYMOUS
        try:
            return AuthContext(claims=self.verify_token(token))
        except TokenError as exc:
            logger.debug(f"Optional auth ignored token: {exc.message}")
            return AuthContext(claims=None, reason=exc.message)

    def logout(self, token: str) -> None:
        """Revoke a token for the rest of its lifetime.

        Forged tokens still raise TokenInvalidError. Expired and already
        revoked tokens are accepted without doing anything.
        """
        claims = decode_access_token(token, self.secret, self.algorithm, verify_exp=False)
        remaining = claims.expires_at - int(self._clock())
        if remaining <= 0:
            logger.debug("Logout of an expired token ignored", extra={"user_id": claims.user_id})
            return

        key = blacklist_key(token)
        if self.cache.exists(key):
            return
        if not self.cache.set(key, claims.user_id, remaining):
            raise CacheError("Failed to revoke token")

        logger.info(
            "Token revoked",
            extra={"user_id": claims.user_id, "action": "logout"},
        )

    def refresh(self, token: str) -> Dict[str, Any]:
        """Exchange a valid token for a fresh one and revoke the old token"""
        claims = self.verify_token(token)
        with self.database.session() as session:
            user = session.get(User, claims.user_id)
            if user is None:
                raise NotFoundError("User not found")
            new_token = self.issue_token(user)
            payload = {"success": True, "token": new_token, "user": public_user(user)}

        self.logout(token)
        logger.info("Token refreshed", extra={"user_id": claims.user_id, "action": "refresh"})
        return payload

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def register(
        self,
        email: Optional[str],
        password: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        email = normalize_email(email)
        password = validate_password(password)
        first_name = validate_name("firstName", first_name)
        last_name = validate_name("lastName", last_name)

        with self.database.session() as session:
            if session.query(User).filter(User.email == email).first():
                raise ConflictError("User with this email already exists")

            user = User(
                email=email,
                password_hash=hash_password(password, self.bcrypt_rounds),
                first_name=first_name,
                last_name=last_name,
            )
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                # Lost a race with a concurrent registration
                session.rollback()
                raise ConflictError("User with this email already exists")
            session.refresh(user)

            logger.info("User registered", extra={"user_id": user.id, "action": "register"})
            return {"success": True, "token": self.issue_token(user), "user": public_user(user)}

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        email = normalize_email(email)
        if not password or not isinstance(password, str):
            raise ValidationError("password is required")

        with self.database.session() as session:
            user = session.query(User).filter(User.email == email).first()
            if user is None:
                # Spend the same bcrypt work as a real comparison
                verify_password(password, self._get_dummy_hash())
                raise AuthenticationError()
            if not verify_password(password, user.password_hash):
                raise AuthenticationError()

            user.last_login = datetime.utcnow()
            session.commit()
            session.refresh(user)

            logger.info("User logged in", extra={"user_id": user.id, "action": "login"})
            return {"success": True, "token": self.issue_token(user), "user": public_user(user)}

    def get_current_user(self, claims: TokenClaims) -> Dict[str, Any]:
        with self.database.session() as session:
            user = session.get(User, claims.user_id)
            if user is None:
                raise NotFoundError("User not found")
            return public_user(user)

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("timing-equalizer", self.bcrypt_rounds)
        return self._dummy_hash
