from typing import Annotated

from fastapi import APIRouter, Header

from flowboard.dependencies import FlowServiceDep, OwnedProfileId
from flowboard.flows.schemas import (
    FlowCreate,
    FlowProposalRequest,
    FlowProposalResponse,
    FlowResponse,
    FlowUpdate,
)

router = APIRouter()


@router.get("/", response_model=list[FlowResponse])
async def list_flows(
    profile_id: OwnedProfileId,
    service: FlowServiceDep,
) -> list[FlowResponse]:
    return await service.list_flows(profile_id)


@router.post("/", status_code=201, response_model=FlowResponse)
async def create_flow(
    data: FlowCreate,
    profile_id: OwnedProfileId,
    service: FlowServiceDep,
    idempotency_key: Annotated[str | None, Header()] = None,
) -> FlowResponse:
    return await service.create(profile_id, data, idempotency_key=idempotency_key)


@router.post("/propose", response_model=FlowProposalResponse)
async def propose_flow(
    data: FlowProposalRequest,
    profile_id: OwnedProfileId,
    service: FlowServiceDep,
) -> FlowProposalResponse:
    return await service.propose(profile_id, data)


@router.get("/{flow_id}", response_model=FlowResponse)
async def get_flow(
    flow_id: str,
    profile_id: OwnedProfileId,
    service: FlowServiceDep,
) -> FlowResponse:
    return await service.get(profile_id, flow_id)


@router.put("/{flow_id}", response_model=FlowResponse)
async def update_flow(
    flow_id: str,
    data: FlowUpdate,
    profile_id: OwnedProfileId,
    service: FlowServiceDep,
) -> FlowResponse:
    return await service.update(profile_id, flow_id, data)


@router.delete("/{flow_id}", status_code=204)
async def delete_flow(
    flow_id: str,
    profile_id: OwnedProfileId,
    service: FlowServiceDep,
) -> None:
    await service.delete(profile_id, flow_id)
