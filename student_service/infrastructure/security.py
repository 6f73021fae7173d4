from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext

from ..config import Settings
from ..domain.entities import PublicUser
from ..domain.errors import TokenExpiredError, TokenInvalidError

REQUIRED_CLAIMS = ("id", "email", "role")


class PasswordHasher:
    def __init__(self, rounds: int = 10):
        self.pwd = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plain: str) -> str: return self.pwd.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return self.pwd.verify(plain, hashed)
        except ValueError:
            # unknown or corrupted hash format
            return False


class TokenService:
    def __init__(self, settings: Settings):
        self.secret = settings.SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.lifetime = timedelta(minutes=settings.JWT_EXPIRES_MINUTES)

    def issue(self, user: PublicUser, expires_delta: timedelta | None = None) -> str:
        now = datetime.now(timezone.utc)
        exp = now + (expires_delta if expires_delta is not None else self.lifetime)
        payload = {
            "sub": user.email,
            "id": user.id,
            "email": user.email,
            "role": user.role or "user",
            "iat": now,
            "exp": exp,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        """Return the token claims or raise TokenExpiredError / TokenInvalidError."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            raise TokenInvalidError() from e
        if any(claims.get(name) in (None, "") for name in REQUIRED_CLAIMS):
            raise TokenInvalidError("Token is missing identity claims")
        return claims
