from fastapi import APIRouter

from flowboard.dependencies import CurrentSession, ProfileServiceDep
from flowboard.profiles.schemas import ProfileCreate, ProfileResponse, ProfileUpdate

router = APIRouter()


@router.get("/", response_model=list[ProfileResponse])
async def list_profiles(
    session: CurrentSession,
    service: ProfileServiceDep,
) -> list[ProfileResponse]:
    return await service.list_profiles(session)


@router.post("/", status_code=201, response_model=ProfileResponse)
async def create_profile(
    data: ProfileCreate,
    session: CurrentSession,
    service: ProfileServiceDep,
) -> ProfileResponse:
    return await service.create(session.user_id, data)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str,
    session: CurrentSession,
    service: ProfileServiceDep,
) -> ProfileResponse:
    return await service.get(session, profile_id)


@router.put("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: str,
    data: ProfileUpdate,
    session: CurrentSession,
    service: ProfileServiceDep,
) -> ProfileResponse:
    return await service.update(session, profile_id, data)


@router.delete("/{profile_id}", status_code=204)
async def delete_profile(
    profile_id: str,
    session: CurrentSession,
    service: ProfileServiceDep,
) -> None:
    await service.delete(session, profile_id)
