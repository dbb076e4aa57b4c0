from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from ..config import Settings
from ..domain.entities import Identity, Role


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt_sha256"],
            deprecated="auto",
            bcrypt_sha256__rounds=rounds,
            bcrypt_sha256__truncate_error=False,
        )

    def hash(self, plain: str) -> str: return self._context.hash(plain)
    def verify(self, plain: str, hashed: str) -> bool: return self._context.verify(plain, hashed)


class TokenService:
    """Signs and verifies the bearer tokens handed out at login/registration."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_days: int = 7):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.lifetime = timedelta(days=expires_days)

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenService":
        return cls(config.SECRET_KEY, config.JWT_ALGORITHM, config.JWT_EXPIRES_DAYS)

    def create_access_token(self, identity: Identity, now: datetime | None = None) -> str:
        issued = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(identity.id),
            "id": identity.id,
            "name": identity.name,
            "email": identity.email,
            "role": identity.role.value,
            "iat": issued,
            "exp": issued + self.lifetime,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Identity:
        """Return the identity in ``token`` or raise JWTError."""
        payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        try:
            return Identity(
                id=int(payload["id"]),
                name=payload["name"],
                email=payload["email"],
                role=Role(payload["role"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise JWTError("Malformed token claims") from exc
