from typing import Annotated

from fastapi import APIRouter, Query

from flowboard.dependencies import OwnedProfileId, StatementServiceDep
from flowboard.statements.schemas import DashboardResponse, FinancialStatement

router = APIRouter()


@router.get("/statement", response_model=FinancialStatement)
async def get_statement(
    profile_id: OwnedProfileId,
    service: StatementServiceDep,
) -> FinancialStatement:
    return await service.statement(profile_id)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    profile_id: OwnedProfileId,
    service: StatementServiceDep,
    activity_limit: Annotated[int, Query(ge=0, le=100)] = 20,
) -> DashboardResponse:
    return await service.dashboard(profile_id, activity_limit=activity_limit)
