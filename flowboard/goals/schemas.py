import datetime as dt

from pydantic import BaseModel, Field

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class GoalCreate(BaseModel):
    name: str = Field(min_length=1)
    target: float = Field(gt=0)
    current: float = Field(default=0.0, ge=0)
    deadline: dt.date | None = None
    priority: int = 0
    color: str = "#a855f7"


class GoalUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    target: float | None = Field(default=None, gt=0)
    current: float | None = Field(default=None, ge=0)
    deadline: dt.date | None = None
    priority: int | None = None
    color: str | None = None


class GoalResponse(BaseModel):
    id: str
    profile_id: str
    name: str
    target: float
    current: float
    deadline: str | None
    priority: int
    color: str
    percentage: float
    remaining: float
    days_remaining: int | None = None
    monthly_needed: float | None = None
    created_at: str
    updated_at: str


class GoalTransactionCreate(BaseModel):
    amount: float = Field(gt=0)
    note: str | None = None
    date: str | None = Field(default=None, pattern=DATE_PATTERN)


class GoalTransactionResponse(BaseModel):
    id: str
    goal_id: str
    amount: float
    note: str | None
    date: str
    created_at: str
