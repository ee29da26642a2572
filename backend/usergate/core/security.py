# backend/usergate/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pydantic
from jose import jwt
from jose.exceptions import JOSEError
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict

from usergate.core.config import Settings, settings
from usergate.models.user import Role


class PasswordHasher:
    """pbkdf2_sha256 hashing with the work factor fixed at construction."""

    def __init__(self, rounds: int = 29000):
        self.rounds = rounds
        # ✅ ONLY pbkdf2_sha256 (no bcrypt anywhere)
        self.context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )
        self._dummy_hash: Optional[str] = None

    @classmethod
    def from_settings(cls, cfg: Settings) -> "PasswordHasher":
        return cls(cfg.password_hash_rounds)

    def hash(self, password: str) -> str:
        return self.context.hash(password or "")

    def verify(self, plain_password: str, hashed_password) -> bool:
        if hashed_password is None:
            return False

        # handle bytes/memoryview from DB
        if isinstance(hashed_password, memoryview):
            hashed_password = hashed_password.tobytes()
        if isinstance(hashed_password, (bytes, bytearray)):
            hashed_password = hashed_password.decode("utf-8", errors="ignore")

        s = str(hashed_password).strip()

        # not a hash we know how to check: a mismatch, not a 500
        if not s or self.context.identify(s) is None:
            return False

        try:
            return self.context.verify(plain_password or "", s)
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, plain_password: str) -> bool:
        """Spend the same CPU as a real check when there is no account to check against."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("usergate-no-such-account")
        self.verify(plain_password, self._dummy_hash)
        return False


# process default for code that runs outside an app (seed script, shell)
default_hasher = PasswordHasher.from_settings(settings)


def hash_password(password: str) -> str:
    return default_hasher.hash(password)


def verify_password(plain_password: str, hashed_password) -> bool:
    return default_hasher.verify(plain_password, hashed_password)


class TokenClaims(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    role: Role


class TokenService:
    """Issues and checks the stateless session JWT.

    There is no server-side revocation: a token is good until `exp` no matter
    what happens to the user row afterwards.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24 * 7):
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, cfg: Settings) -> "TokenService":
        return cls(cfg.jwt_secret, cfg.jwt_algorithm, cfg.access_token_expire_minutes)

    def issue(self, claims: TokenClaims, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode: dict[str, Any] = {
            "sub": claims.user_id,
            "email": claims.email,
            "role": claims.role.value,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, self._secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Optional[TokenClaims]:
        # every failure looks the same to the caller
        if not token or not isinstance(token, str):
            return None

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JOSEError:
            return None

        try:
            return TokenClaims(
                user_id=payload.get("sub"),
                email=payload.get("email"),
                role=payload.get("role"),
            )
        except pydantic.ValidationError:
            return None
