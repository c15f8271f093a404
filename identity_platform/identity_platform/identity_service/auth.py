from passlib.context import CryptContext
from datetime import datetime, timedelta
import logging
import jwt

from .config import settings
from .errors import TokenIssuanceError

logger = logging.getLogger(__name__)

# Fixed work factor for password hashing
PBKDF2_ROUNDS = 29000

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=PBKDF2_ROUNDS,
)


class PasswordHasher:
    """One-way salted password hashing backed by passlib."""

    def __init__(self, context: CryptContext = pwd_context):
        self._context = context

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        # passlib compares digests in constant time
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be identified")
            return False


class TokenIssuer:
    """Signs ``{userId, email}`` claims into a bearer JWT."""

    def __init__(
        self,
        secret_key: str = None,
        algorithm: str = None,
        expire_minutes: int = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.JWT_SECRET
        self.algorithm = algorithm if algorithm is not None else settings.JWT_ALGORITHM
        self.expire_minutes = (
            expire_minutes if expire_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    def sign(self, claims: dict) -> str:
        now = datetime.utcnow()
        payload = {
            "userId": claims["userId"],
            "email": claims["email"],
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        try:
            return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except Exception as e:
            logger.error("Token signing failed for user_id=%s: %s", claims.get("userId"), e)
            raise TokenIssuanceError() from e
