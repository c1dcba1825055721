from uuid import uuid4

import structlog

from flowboard.auth import Session
from flowboard.event_store.models import AggregateType, EventType
from flowboard.event_store.service import EventStoreService
from flowboard.exceptions import ForbiddenError, NotFoundError, ValidationError
from flowboard.profiles.repository import ProfileRepository
from flowboard.profiles.schemas import ProfileCreate, ProfileResponse, ProfileUpdate

logger = structlog.get_logger()


class ProfileService:
    def __init__(self, event_store: EventStoreService, repo: ProfileRepository) -> None:
        self._event_store = event_store
        self._repo = repo

    async def require_access(self, session: Session, profile_id: str) -> None:
        if not await self._repo.is_owned_by(profile_id, session.user_id):
            raise ForbiddenError("Profile not found or access denied")

    async def create(
        self,
        user_id: str,
        data: ProfileCreate,
        is_owner: bool = False,
    ) -> ProfileResponse:
        profile_id = str(uuid4())

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.profile,
            aggregate_id=profile_id,
            event_type=EventType.profile_created,
            event_data={
                "user_id": user_id,
                "name": data.name,
                "avatar_color": data.avatar_color,
                "is_owner": is_owner,
            },
        )

        logger.info("profile_created", profile_id=profile_id, is_owner=is_owner)
        return await self._get(profile_id)

    async def list_profiles(self, session: Session) -> list[ProfileResponse]:
        rows = await self._repo.list_for_user(session.user_id)
        return [self._to_response(row) for row in rows]

    async def get(self, session: Session, profile_id: str) -> ProfileResponse:
        await self.require_access(session, profile_id)
        return await self._get(profile_id)

    async def update(
        self, session: Session, profile_id: str, data: ProfileUpdate
    ) -> ProfileResponse:
        await self.require_access(session, profile_id)

        updates = data.model_dump(exclude_none=True)
        if not updates:
            raise ValidationError("No update fields provided")

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.profile,
            aggregate_id=profile_id,
            event_type=EventType.profile_updated,
            event_data=updates,
        )

        logger.info("profile_updated", profile_id=profile_id)
        return await self._get(profile_id)

    async def delete(self, session: Session, profile_id: str) -> None:
        await self.require_access(session, profile_id)

        profile = await self._get(profile_id)
        if profile.is_owner:
            raise ForbiddenError("Cannot delete owner profile")

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.profile,
            aggregate_id=profile_id,
            event_type=EventType.profile_deleted,
            event_data={"deleted": True},
        )

        logger.info("profile_deleted", profile_id=profile_id)

    async def _get(self, profile_id: str) -> ProfileResponse:
        row = await self._repo.get_by_id(profile_id)
        if row is None:
            raise NotFoundError("Profile", profile_id)
        return self._to_response(row)

    @staticmethod
    def _to_response(row: dict) -> ProfileResponse:
        return ProfileResponse(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            avatar_color=row["avatar_color"],
            is_owner=bool(row["is_owner"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
