from pydantic import BaseModel, Field

DEFAULT_AVATAR_COLOR = "#10b981"


class ProfileCreate(BaseModel):
    name: str = Field(min_length=1)
    avatar_color: str = DEFAULT_AVATAR_COLOR


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    avatar_color: str | None = None


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    name: str
    avatar_color: str
    is_owner: bool
    created_at: str
    updated_at: str
