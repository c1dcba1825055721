from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

AlertLevel = Literal["ok", "warning", "exceeded", "critical"]


class BudgetPeriod(StrEnum):
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


class BudgetCreate(BaseModel):
    name: str = Field(min_length=1)
    budgeted: float = Field(gt=0)
    period: BudgetPeriod = BudgetPeriod.monthly
    color: str = "#10b981"
    node_id: str | None = None


class BudgetUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    budgeted: float | None = Field(default=None, gt=0)
    period: BudgetPeriod | None = None
    color: str | None = None


class BudgetResponse(BaseModel):
    id: str
    profile_id: str
    node_id: str | None
    name: str
    budgeted: float
    period: BudgetPeriod
    color: str
    spent: float
    remaining: float
    utilization_pct: float
    alert_level: AlertLevel
    created_at: str
    updated_at: str


class BudgetTransactionCreate(BaseModel):
    amount: float = Field(gt=0)
    note: str | None = None
    date: str | None = Field(default=None, pattern=DATE_PATTERN)


class BudgetTransactionResponse(BaseModel):
    id: str
    budget_id: str
    amount: float
    note: str | None
    date: str
    created_at: str


class BudgetAlert(BaseModel):
    budget_id: str
    name: str
    budgeted: float
    spent: float
    utilization_pct: float
    alert_level: AlertLevel
