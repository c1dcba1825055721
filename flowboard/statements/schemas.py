from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

from flowboard.budgets.schemas import BudgetResponse
from flowboard.event_store.schemas import ActivityResponse
from flowboard.goals.schemas import GoalResponse


class CashFlowCategory(StrEnum):
    operating = "operating"
    investing = "investing"
    financing = "financing"


class IncomeItem(BaseModel):
    name: str
    amount: float
    type: str


class ExpenseItem(BaseModel):
    name: str
    amount: float
    flag: str | None = None
    budgeted: float | None = None


class ExpenseBreakdown(BaseModel):
    fixed: list[ExpenseItem] = Field(default_factory=list)
    variable: list[ExpenseItem] = Field(default_factory=list)
    subscriptions: list[ExpenseItem] = Field(default_factory=list)


class AssetItem(BaseModel):
    name: str
    balance: float
    type: str
    apy: float
    goal: float | None = None


class LiabilityItem(BaseModel):
    name: str
    balance: float


class FlowLine(BaseModel):
    name: str
    amount: float


class CashFlowBucket(BaseModel):
    inflow_total: float = 0.0
    outflow_total: float = 0.0
    inflows: list[FlowLine] = Field(default_factory=list)
    outflows: list[FlowLine] = Field(default_factory=list)


class CashFlowStatement(BaseModel):
    operating: CashFlowBucket = Field(default_factory=CashFlowBucket)
    investing: CashFlowBucket = Field(default_factory=CashFlowBucket)
    financing: CashFlowBucket = Field(default_factory=CashFlowBucket)


class FinancialRatios(BaseModel):
    total_income: float
    total_expenses: float
    net_income: float
    savings_rate: float
    expense_ratio: float
    total_assets: float
    total_liabilities: float
    net_worth: float
    debt_to_asset: float
    liquidity_ratio: float
    health_score: int = Field(ge=0, le=100)
    operating_cash_flow: float
    investing_cash_flow: float
    financing_cash_flow: float
    net_cash_flow: float


class Alert(BaseModel):
    type: Literal["warning", "danger", "info"]
    title: str
    message: str
    savings: float | None = None


class FinancialStatement(BaseModel):
    income: list[IncomeItem]
    expenses: ExpenseBreakdown
    assets: list[AssetItem]
    liabilities: list[LiabilityItem]
    cash_flow: CashFlowStatement
    ratios: FinancialRatios
    alerts: list[Alert] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    profile_id: str
    statement: FinancialStatement
    budgets: list[BudgetResponse]
    goals: list[GoalResponse]
    recent_activity: list[ActivityResponse] = Field(default_factory=list)
