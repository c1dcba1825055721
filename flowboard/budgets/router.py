from fastapi import APIRouter

from flowboard.budgets.schemas import (
    BudgetAlert,
    BudgetCreate,
    BudgetResponse,
    BudgetTransactionCreate,
    BudgetTransactionResponse,
    BudgetUpdate,
)
from flowboard.dependencies import BudgetServiceDep, OwnedProfileId

router = APIRouter()


@router.post("/", status_code=201, response_model=BudgetResponse)
async def create_budget(
    data: BudgetCreate,
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> BudgetResponse:
    return await service.create(profile_id, data)


@router.get("/", response_model=list[BudgetResponse])
async def list_budgets(
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> list[BudgetResponse]:
    return await service.list_budgets(profile_id)


@router.get("/alerts", response_model=list[BudgetAlert])
async def get_alerts(
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> list[BudgetAlert]:
    return await service.get_alerts(profile_id)


@router.get("/{budget_id}", response_model=BudgetResponse)
async def get_budget(
    budget_id: str,
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> BudgetResponse:
    return await service.get(profile_id, budget_id)


@router.put("/{budget_id}", response_model=BudgetResponse)
async def update_budget(
    budget_id: str,
    data: BudgetUpdate,
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> BudgetResponse:
    return await service.update(profile_id, budget_id, data)


@router.delete("/{budget_id}", status_code=204)
async def delete_budget(
    budget_id: str,
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> None:
    await service.delete(profile_id, budget_id)


@router.get("/{budget_id}/transactions", response_model=list[BudgetTransactionResponse])
async def list_transactions(
    budget_id: str,
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> list[BudgetTransactionResponse]:
    return await service.list_transactions(profile_id, budget_id)


@router.post(
    "/{budget_id}/transactions",
    status_code=201,
    response_model=BudgetTransactionResponse,
)
async def add_transaction(
    budget_id: str,
    data: BudgetTransactionCreate,
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> BudgetTransactionResponse:
    return await service.add_transaction(profile_id, budget_id, data)


@router.delete("/{budget_id}/transactions/{transaction_id}", status_code=204)
async def delete_transaction(
    budget_id: str,
    transaction_id: str,
    profile_id: OwnedProfileId,
    service: BudgetServiceDep,
) -> None:
    await service.delete_transaction(profile_id, budget_id, transaction_id)
