from pydantic import BaseModel, Field

from flowboard.profiles.schemas import ProfileResponse


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    # bcrypt only reads the first 72 bytes.
    password: str = Field(min_length=8, max_length=72)
    name: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    id: str
    email: str
    created_at: str


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
    profiles: list[ProfileResponse] = Field(default_factory=list)
