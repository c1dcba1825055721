from fastapi import APIRouter

from flowboard.dependencies import IdentityServiceDep
from flowboard.identity.schemas import AuthResponse, LoginRequest, RefreshRequest, RegisterRequest

router = APIRouter()


@router.post("/register", status_code=201, response_model=AuthResponse)
async def register(data: RegisterRequest, service: IdentityServiceDep) -> AuthResponse:
    return await service.register(data)


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, service: IdentityServiceDep) -> AuthResponse:
    return await service.login(data)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(data: RefreshRequest, service: IdentityServiceDep) -> AuthResponse:
    return await service.refresh(data)
