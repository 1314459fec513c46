"""Credential service: password hashing, login, JWT issuance and reset tokens."""

import logging
import secrets
import uuid
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from postboard.config import Settings
from postboard.models.user import User
from postboard.stores.user_store import UserStore

logger = logging.getLogger(__name__)

# Password hashing context (salted, adaptive cost)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ADMIN_ROLE = "Admin"
USER_ROLE = "User"

# 32 random bytes -> 256 bits of entropy
RESET_TOKEN_BYTES = 32


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


class CredentialService:
    """Authenticates users and manages their tokens.

    Signing keys, lifetimes and the admin policy come from the ``Settings``
    passed in; nothing is read from the environment at call time.
    """

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.users = UserStore(db)

    def hash_password(self, password: str) -> str:
        return hash_password(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return verify_password(plain_password, hashed_password)

    def is_admin(self, user: User) -> bool:
        """Role policy: an email at the configured admin domain grants admin."""
        return self.is_admin_email(user.email)

    def is_admin_email(self, email: str | None) -> bool:
        domain = self.settings.admin_email_domain.lower().lstrip("@")
        return (email or "").lower().endswith(f"@{domain}")

    def authenticate(self, username: str, password: str) -> User | None:
        """Authenticate a user by username and password.

        Unknown users, users without a password and wrong passwords all
        return None.
        """
        user = self.users.get_by_username(username)
        if user is None or not user.has_password:
            # Keep the response time close to a real verification
            pwd_context.dummy_verify()
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def issue_token(self, user: User) -> str:
        """Create a signed JWT access token for a user."""
        now = datetime.now(UTC)
        expire = now + timedelta(minutes=self.settings.jwt_expiration_minutes)
        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "jti": str(uuid.uuid4()),
            "name": user.username,
            "role": ADMIN_ROLE if self.is_admin(user) else USER_ROLE,
            "iss": self.settings.jwt_issuer,
            "aud": self.settings.jwt_audience,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(
            to_encode, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm
        )

    def decode_token(self, token: str) -> dict | None:
        """Decode and validate a JWT token."""
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
                audience=self.settings.jwt_audience,
                issuer=self.settings.jwt_issuer,
            )
            return payload
        except JWTError:
            return None

    def generate_reset_token(self) -> tuple[str, datetime]:
        """Generate a URL-safe one-time token and its expiry."""
        token = secrets.token_urlsafe(RESET_TOKEN_BYTES)
        expiry = datetime.now(UTC) + timedelta(hours=self.settings.reset_token_ttl_hours)
        return token, expiry

    def consume_reset_token(self, token: str, new_password: str) -> bool:
        """Set a new password using a reset token; the token is cleared in the same commit.

        Returns False when no user holds a matching, unexpired token.
        """
        user = self.users.get_by_reset_token(token, datetime.now(UTC))
        if user is None:
            logger.warning("Invalid or expired password reset token")
            return False

        user.password_hash = hash_password(new_password)
        user.clear_reset_token()
        self.users.update(user)
        logger.info(f"Password set for user {user.id}")
        return True
