import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import structlog

from flowboard.auth import Session, create_access_token
from flowboard.config import settings
from flowboard.exceptions import ConflictError, UnauthorizedError
from flowboard.identity.passwords import hash_password, verify_password
from flowboard.identity.repository import UserRepository
from flowboard.identity.schemas import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    UserResponse,
)
from flowboard.profiles.schemas import ProfileCreate
from flowboard.profiles.service import ProfileService

logger = structlog.get_logger()


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class IdentityService:
    def __init__(self, repo: UserRepository, profiles: ProfileService) -> None:
        self._repo = repo
        self._profiles = profiles

    async def register(self, data: RegisterRequest) -> AuthResponse:
        email = data.email.strip().lower()
        if await self._repo.get_by_email(email):
            raise ConflictError(f"User '{email}' already exists")

        user_id = str(uuid4())
        now = datetime.now(UTC).isoformat()
        await self._repo.create(user_id, email, hash_password(data.password), now)

        # Every account starts with its own owner profile.
        await self._profiles.create(
            user_id,
            ProfileCreate(name=data.name or email.split("@")[0]),
            is_owner=True,
        )

        logger.info("user_registered", user_id=user_id)
        return await self._issue_tokens(user_id)

    async def login(self, data: LoginRequest) -> AuthResponse:
        user = await self._repo.get_by_email(data.email.strip().lower())
        if user is None or not verify_password(data.password, user["password_hash"]):
            logger.warning("login_failed")
            raise UnauthorizedError("Invalid credentials")

        logger.info("user_logged_in", user_id=user["id"])
        return await self._issue_tokens(user["id"])

    async def refresh(self, data: RefreshRequest) -> AuthResponse:
        stored = await self._repo.pop_refresh_token(_hash_token(data.refresh_token))
        if stored is None:
            raise UnauthorizedError("Invalid refresh token")
        if datetime.fromisoformat(stored["expires_at"]) <= datetime.now(UTC):
            raise UnauthorizedError("Refresh token has expired")

        logger.info("refresh_token_rotated", user_id=stored["user_id"])
        return await self._issue_tokens(stored["user_id"])

    async def _issue_tokens(self, user_id: str) -> AuthResponse:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise UnauthorizedError("Unknown user")

        now = datetime.now(UTC)
        refresh_token = secrets.token_hex(32)
        await self._repo.store_refresh_token(
            _hash_token(refresh_token),
            user_id,
            (now + timedelta(days=settings.refresh_expire_days)).isoformat(),
            now.isoformat(),
        )

        session = Session(user_id=user_id, email=user["email"])
        return AuthResponse(
            access_token=create_access_token(user_id, user["email"]),
            refresh_token=refresh_token,
            expires_in=settings.jwt_expire_minutes * 60,
            user=UserResponse(id=user["id"], email=user["email"], created_at=user["created_at"]),
            profiles=await self._profiles.list_profiles(session),
        )
