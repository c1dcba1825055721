from fastapi import APIRouter

from flowboard.dependencies import GoalServiceDep, OwnedProfileId
from flowboard.goals.schemas import (
    GoalCreate,
    GoalResponse,
    GoalTransactionCreate,
    GoalTransactionResponse,
    GoalUpdate,
)

router = APIRouter()


@router.post("/", status_code=201, response_model=GoalResponse)
async def create_goal(
    data: GoalCreate,
    profile_id: OwnedProfileId,
    service: GoalServiceDep,
) -> GoalResponse:
    return await service.create(profile_id, data)


@router.get("/", response_model=list[GoalResponse])
async def list_goals(
    profile_id: OwnedProfileId,
    service: GoalServiceDep,
) -> list[GoalResponse]:
    return await service.list_goals(profile_id)


@router.get("/{goal_id}", response_model=GoalResponse)
async def get_goal(
    goal_id: str,
    profile_id: OwnedProfileId,
    service: GoalServiceDep,
) -> GoalResponse:
    return await service.get(profile_id, goal_id)


@router.put("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: str,
    data: GoalUpdate,
    profile_id: OwnedProfileId,
    service: GoalServiceDep,
) -> GoalResponse:
    return await service.update(profile_id, goal_id, data)


@router.delete("/{goal_id}", status_code=204)
async def delete_goal(
    goal_id: str,
    profile_id: OwnedProfileId,
    service: GoalServiceDep,
) -> None:
    await service.delete(profile_id, goal_id)


@router.get("/{goal_id}/transactions", response_model=list[GoalTransactionResponse])
async def list_contributions(
    goal_id: str,
    profile_id: OwnedProfileId,
    service: GoalServiceDep,
) -> list[GoalTransactionResponse]:
    return await service.list_contributions(profile_id, goal_id)


@router.post("/{goal_id}/transactions", status_code=201, response_model=GoalTransactionResponse)
async def add_contribution(
    goal_id: str,
    data: GoalTransactionCreate,
    profile_id: OwnedProfileId,
    service: GoalServiceDep,
) -> GoalTransactionResponse:
    return await service.add_contribution(profile_id, goal_id, data)


@router.delete("/{goal_id}/transactions/{transaction_id}", status_code=204)
async def delete_contribution(
    goal_id: str,
    transaction_id: str,
    profile_id: OwnedProfileId,
    service: GoalServiceDep,
) -> None:
    await service.delete_contribution(profile_id, goal_id, transaction_id)
