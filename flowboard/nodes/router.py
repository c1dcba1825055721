from fastapi import APIRouter

from flowboard.dependencies import NodeServiceDep, OwnedProfileId
from flowboard.nodes.schemas import NodeConnections, NodeCreate, NodeResponse, NodeUpdate

router = APIRouter()


@router.get("/", response_model=list[NodeResponse])
async def list_nodes(
    profile_id: OwnedProfileId,
    service: NodeServiceDep,
) -> list[NodeResponse]:
    return await service.list_nodes(profile_id)


@router.post("/", status_code=201, response_model=NodeResponse)
async def create_node(
    data: NodeCreate,
    profile_id: OwnedProfileId,
    service: NodeServiceDep,
) -> NodeResponse:
    return await service.create(profile_id, data)


@router.get("/{node_id}", response_model=NodeResponse)
async def get_node(
    node_id: str,
    profile_id: OwnedProfileId,
    service: NodeServiceDep,
) -> NodeResponse:
    return await service.get(profile_id, node_id)


@router.get("/{node_id}/connections", response_model=NodeConnections)
async def get_node_connections(
    node_id: str,
    profile_id: OwnedProfileId,
    service: NodeServiceDep,
) -> NodeConnections:
    return await service.connections(profile_id, node_id)


@router.put("/{node_id}", response_model=NodeResponse)
async def update_node(
    node_id: str,
    data: NodeUpdate,
    profile_id: OwnedProfileId,
    service: NodeServiceDep,
) -> NodeResponse:
    return await service.update(profile_id, node_id, data)


@router.delete("/{node_id}", status_code=204)
async def delete_node(
    node_id: str,
    profile_id: OwnedProfileId,
    service: NodeServiceDep,
) -> None:
    await service.delete(profile_id, node_id)
