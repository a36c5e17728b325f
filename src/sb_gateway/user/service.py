"""User domain service: register, login, refresh.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import UserRole
from src.sb_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.sb_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.sb_gateway.auth.password import hash_password, verify_password
from src.sb_gateway.user.db_models import UserModel


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        display_name: str,
        db: AsyncSession,
    ) -> UserModel:
        """Register a new user with a zero balance and zeroed counters.

        The caller must wrap this in `async with db.begin()`.
        """
        # DB UNIQUE constraints are the final guard
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(
            select(UserModel).where(UserModel.email == email)
        )
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            display_name=display_name or username,
            password_hash=hash_password(password),
            role=UserRole.USER.value,
            is_active=True,
            balance=0,
            unread_gigs_count=0,
            pending_review_count=0,
            is_accepting_requests=True,
        )
        db.add(user)
        await db.flush()  # Get user.id without committing
        await db.refresh(user)  # Load server defaults (created_at) before leaving the session
        return user

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate user and return (user, access_token, refresh_token).

        "User not found" and "Wrong password" both raise InvalidCredentialsError
        to prevent username enumeration.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id), user.email, user.display_name),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        """Validate refresh token and return a new access token."""
        payload = decode_token(refresh_token, expected_type="refresh")
        user_id = str(payload["sub"])
        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountDisabledError()
        return create_access_token(user_id, user.email, user.display_name)
