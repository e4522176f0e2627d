import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)


class CredentialService:
    """Password hashing and bearer token handling.

    Stateless apart from the signing secret it is constructed with.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24, bcrypt_rounds: int = 12):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds)

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def issue_token(self, email: str, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=self.expire_minutes))
        to_encode = {"sub": email, "iat": now, "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def validate(self, token: str, expected_identity: str) -> bool:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            return False
        return payload.get("sub") == expected_identity

    def extract_identity(self, token: str) -> Optional[str]:
        """Return the token subject without checking signature or expiry.

        Raises JWTError if the token cannot be parsed at all.
        """
        claims = jwt.get_unverified_claims(token)
        subject = claims.get("sub")
        return subject if isinstance(subject, str) and subject else None
