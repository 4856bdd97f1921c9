"""
WellNest Backend — Credential Verifier
=======================================

What:  Issues and verifies bearer tokens; resolves a token to a Principal.
Why:   Every protected route starts here. The verifier decides "who is
       calling"; `app.services.authorization` decides "may they".
How:   Tokens are HS256 JWTs (python-jose) carrying {id, role, email, iat, exp}.
       Verification re-reads the account on every request so a suspended or
       deleted account loses access immediately, regardless of token age.
       Passwords are hashed with passlib (argon2).

Failure messages:
    - no token / bad signature / expired / garbled id → "Not authorized to access this route"
    - id does not resolve to an account               → "User not found"
    - account status is not active                    → "Account is not active. Please contact administrator."
    All three raise AuthenticationError (401).
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import AuthenticationError
from app.models.enums import AccountStatus
from app.models.user import User
from app.services.authorization import ACCOUNT_NOT_ACTIVE, NOT_AUTHENTICATED, Principal
from app.services.store import fetch_one, store_errors

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Unrecognized or corrupt hash
        return False


class AuthService:
    """
    Token issuance, token verification and password login.

    Stateless apart from configuration; the secret and lifetime are read from
    settings at call time so tests can patch them.
    """

    def create_access_token(self, account: User, now: Optional[datetime] = None) -> str:
        issued = now or datetime.now(timezone.utc)
        payload = {
            "id": str(account.id),
            "role": account.role,
            "email": account.email,
            "iat": int(issued.timestamp()),
            "exp": int((issued + timedelta(days=settings.jwt_expire_days)).timestamp()),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    def decode_token(self, token: Optional[str]) -> uuid.UUID:
        """
        Check signature and expiry and return the embedded account id.

        Malformed and expired tokens are deliberately indistinguishable.
        """
        if not token:
            raise AuthenticationError(NOT_AUTHENTICATED)
        if not settings.jwt_secret:
            logger.error("JWT_SECRET is not configured; rejecting token")
            raise AuthenticationError(NOT_AUTHENTICATED)
        try:
            payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        except JWTError as e:
            logger.info("Token rejected: %s", type(e).__name__)
            raise AuthenticationError(NOT_AUTHENTICATED)
        try:
            return uuid.UUID(str(payload.get("id")))
        except ValueError:
            raise AuthenticationError(NOT_AUTHENTICATED)

    async def verify_token(self, db: AsyncSession, token: Optional[str]) -> Principal:
        account_id = self.decode_token(token)

        with store_errors("verifying credentials"):
            account = await db.get(User, account_id)

        if account is None:
            raise AuthenticationError("User not found")
        if account.status and account.status != AccountStatus.ACTIVE.value:
            raise AuthenticationError(ACCOUNT_NOT_ACTIVE)

        return Principal.from_account(account)

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Password login. Unknown email and wrong password share one message.
        Stamps last_login on success.
        """
        account = await fetch_one(db, User, User.email == email.lower())
        if account is None or not verify_password(password, account.password_hash):
            logger.info("Failed login attempt")
            raise AuthenticationError("Invalid email or password")
        if account.status != AccountStatus.ACTIVE.value:
            raise AuthenticationError(ACCOUNT_NOT_ACTIVE)

        account.last_login = datetime.now(timezone.utc)
        with store_errors("recording login"):
            await db.flush()
        logger.info("User %s logged in", account.id)
        return account


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
