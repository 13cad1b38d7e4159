"""User service — registration, sign-in, and profile edits.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database.
This makes the code testable (test services without HTTP).

Two rules shape this module:
- The email unique constraint decides who wins a sign-up race; the
  IntegrityError it raises is translated to EmailTaken here so no raw
  storage error ever reaches a caller.
- Sign-in failures look identical whatever the cause. The cause goes
  to the log, and an unknown email still pays for one bcrypt check.
"""

from typing import Any, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from keepmark.auth.jwt import TokenIssuer
from keepmark.auth.password import (
    DEFAULT_ROUNDS,
    dummy_verify,
    hash_password,
    verify_password,
)
from keepmark.db.models import MAX_ID, User
from keepmark.errors import EmailTaken, InvalidCredentials

logger = structlog.get_logger()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Business logic for user identity."""

    def __init__(
        self,
        db: AsyncSession,
        issuer: TokenIssuer,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ):
        self.db = db
        self.issuer = issuer
        self.bcrypt_rounds = bcrypt_rounds

    # ─── Lookups ────────────────────────────────────────

    async def get_by_id(self, user_id: int) -> Optional[User]:
        if not 1 <= user_id <= MAX_ID:
            return None
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalars().first()

    # ─── Sign-up / sign-in ──────────────────────────────

    async def register(self, email: str, password: str) -> tuple[User, str]:
        """Create a user and return it with a fresh access token.

        Learn: Auto-login — the caller gets a token straight away and
        doesn't have to sign in after signing up.
        """
        email = normalize_email(email)
        if await self.get_by_email(email) is not None:
            logger.info("auth.signup_rejected", reason="email_exists")
            raise EmailTaken()

        password_hash = await run_in_threadpool(
            hash_password, password, self.bcrypt_rounds
        )
        user = User(email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("auth.signup_rejected", reason="unique_violation")
            raise EmailTaken()
        await self.db.refresh(user)

        logger.info("auth.signup", user_id=user.id)
        return user, self.issuer.issue(user.id, email=user.email)

    async def authenticate(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and return the user with a fresh access token."""
        user = await self.get_by_email(email)
        if user is None:
            await run_in_threadpool(dummy_verify, password, self.bcrypt_rounds)
            logger.info("auth.signin_failed", reason="unknown_email")
            raise InvalidCredentials()

        ok = await run_in_threadpool(verify_password, password, user.password_hash)
        if not ok:
            logger.info("auth.signin_failed", reason="bad_password", user_id=user.id)
            raise InvalidCredentials()

        logger.info("auth.signin", user_id=user.id)
        return user, self.issuer.issue(user.id, email=user.email)

    # ─── Profile ────────────────────────────────────────

    async def update_profile(self, user: User, changes: dict[str, Any]) -> User:
        """Apply a partial profile update (email, first_name, last_name)."""
        if "email" in changes:
            new_email = normalize_email(changes["email"])
            if new_email != user.email:
                existing = await self.get_by_email(new_email)
                if existing is not None:
                    logger.info("user.update_rejected", reason="email_exists", user_id=user.id)
                    raise EmailTaken()
            user.email = new_email
        for field in ("first_name", "last_name"):
            if field in changes:
                setattr(user, field, changes[field])

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("user.update_rejected", reason="unique_violation", user_id=user.id)
            raise EmailTaken()
        await self.db.refresh(user)

        logger.info("user.updated", user_id=user.id, fields=sorted(changes))
        return user
