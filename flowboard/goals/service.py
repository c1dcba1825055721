from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import uuid4

import structlog

from flowboard.event_store.models import AggregateType, EventType
from flowboard.event_store.service import EventStoreService
from flowboard.exceptions import NotFoundError, ValidationError
from flowboard.goals.repository import GoalRepository
from flowboard.goals.schemas import (
    GoalCreate,
    GoalResponse,
    GoalTransactionCreate,
    GoalTransactionResponse,
    GoalUpdate,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class GoalProgress:
    percentage: float
    remaining: float
    days_remaining: int | None
    monthly_needed: float | None


def goal_progress(
    target: float,
    current: float,
    deadline: str | None,
    today: date,
) -> GoalProgress:
    """Progress figures for a goal as of ``today``.

    ``monthly_needed`` spreads what is left over the remaining days in
    30-day months and is only set while the deadline lies ahead.
    """
    percentage = round(current / target * 100, 2) if target > 0 else 0.0
    remaining = round(max(target - current, 0.0), 2)

    days_remaining = None
    monthly_needed = None
    if deadline:
        days_remaining = (date.fromisoformat(deadline[:10]) - today).days
        if days_remaining > 0:
            monthly_needed = round(remaining / (days_remaining / 30), 2)

    return GoalProgress(
        percentage=percentage,
        remaining=remaining,
        days_remaining=days_remaining,
        monthly_needed=monthly_needed,
    )


class GoalService:
    def __init__(self, event_store: EventStoreService, repo: GoalRepository) -> None:
        self._event_store = event_store
        self._repo = repo

    async def create(self, profile_id: str, data: GoalCreate) -> GoalResponse:
        goal_id = str(uuid4())

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.goal,
            aggregate_id=goal_id,
            event_type=EventType.goal_created,
            event_data={
                "profile_id": profile_id,
                **data.model_dump(mode="json"),
            },
        )

        logger.info("goal_created", goal_id=goal_id, profile_id=profile_id, target=data.target)
        return await self.get(profile_id, goal_id)

    async def get(self, profile_id: str, goal_id: str) -> GoalResponse:
        goal = await self._require(profile_id, goal_id)
        return self._build_response(goal)

    async def list_goals(self, profile_id: str) -> list[GoalResponse]:
        rows = await self._repo.list_for_profile(profile_id)
        return [self._build_response(row) for row in rows]

    async def update(self, profile_id: str, goal_id: str, data: GoalUpdate) -> GoalResponse:
        await self._require(profile_id, goal_id)

        updates = data.model_dump(exclude_none=True, mode="json")
        if not updates:
            raise ValidationError("No update fields provided")

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.goal,
            aggregate_id=goal_id,
            event_type=EventType.goal_updated,
            event_data=updates,
        )

        logger.info("goal_updated", goal_id=goal_id, fields=sorted(updates))
        return await self.get(profile_id, goal_id)

    async def delete(self, profile_id: str, goal_id: str) -> None:
        await self._require(profile_id, goal_id)

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.goal,
            aggregate_id=goal_id,
            event_type=EventType.goal_deleted,
            event_data={"deleted": True},
        )

        logger.info("goal_deleted", goal_id=goal_id)

    async def add_contribution(
        self, profile_id: str, goal_id: str, data: GoalTransactionCreate
    ) -> GoalTransactionResponse:
        await self._require(profile_id, goal_id)

        transaction_id = str(uuid4())

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.goal_transaction,
            aggregate_id=transaction_id,
            event_type=EventType.goal_transaction_created,
            event_data={
                "goal_id": goal_id,
                "amount": data.amount,
                "note": data.note,
                "date": data.date or datetime.now(UTC).strftime("%Y-%m-%d"),
            },
        )

        logger.info(
            "goal_contribution_added",
            goal_id=goal_id,
            transaction_id=transaction_id,
            amount=data.amount,
        )

        row = await self._repo.get_transaction(goal_id, transaction_id)
        if row is None:
            raise NotFoundError("Goal transaction", transaction_id)
        return GoalTransactionResponse(**row)

    async def list_contributions(
        self, profile_id: str, goal_id: str
    ) -> list[GoalTransactionResponse]:
        await self._require(profile_id, goal_id)
        rows = await self._repo.list_transactions(goal_id)
        return [GoalTransactionResponse(**row) for row in rows]

    async def delete_contribution(
        self, profile_id: str, goal_id: str, transaction_id: str
    ) -> None:
        await self._require(profile_id, goal_id)
        if await self._repo.get_transaction(goal_id, transaction_id) is None:
            raise NotFoundError("Goal transaction", transaction_id)

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.goal_transaction,
            aggregate_id=transaction_id,
            event_type=EventType.goal_transaction_deleted,
            event_data={"goal_id": goal_id, "deleted": True},
        )

        logger.info("goal_contribution_deleted", transaction_id=transaction_id)

    async def _require(self, profile_id: str, goal_id: str) -> dict:
        goal = await self._repo.get_by_id(profile_id, goal_id)
        if goal is None:
            raise NotFoundError("Goal", goal_id)
        return goal

    @staticmethod
    def _build_response(goal: dict) -> GoalResponse:
        progress = goal_progress(
            goal["target"],
            goal["current"],
            goal.get("deadline"),
            today=datetime.now(UTC).date(),
        )
        return GoalResponse(
            id=goal["id"],
            profile_id=goal["profile_id"],
            name=goal["name"],
            target=goal["target"],
            current=goal["current"],
            deadline=goal.get("deadline"),
            priority=goal["priority"],
            color=goal["color"],
            percentage=progress.percentage,
            remaining=progress.remaining,
            days_remaining=progress.days_remaining,
            monthly_needed=progress.monthly_needed,
            created_at=goal["created_at"],
            updated_at=goal["updated_at"],
        )
