"""Advisory alerts derived from a financial statement."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flowboard.graph.models import ExpenseFlag
from flowboard.statements.schemas import Alert

if TYPE_CHECKING:
    from flowboard.statements.schemas import FinancialStatement

AlertCheck = Callable[["FinancialStatement"], Alert | None]

LOW_SAVINGS_RATE_PCT = 10.0
TARGET_SAVINGS_RATE_PCT = 20.0


@dataclass(frozen=True)
class AlertDefinition:
    alert_id: str
    name: str
    check_fn: AlertCheck


class AlertRegistry:
    """Ordered registry of alert checks."""

    def __init__(self) -> None:
        self._checks: dict[str, AlertDefinition] = {}

    def register(self, alert_id: str, name: str) -> Callable[[AlertCheck], AlertCheck]:
        """Decorator to register an alert check."""

        def decorator(fn: AlertCheck) -> AlertCheck:
            self._checks[alert_id] = AlertDefinition(alert_id=alert_id, name=name, check_fn=fn)
            return fn

        return decorator

    def get_checks(self) -> list[AlertDefinition]:
        return list(self._checks.values())

    def run_all(self, statement: "FinancialStatement") -> list[Alert]:
        """Evaluate every check in registration order, keeping the ones that fire."""
        alerts: list[Alert] = []
        for check in self._checks.values():
            alert = check.check_fn(statement)
            if alert is not None:
                alerts.append(alert)
        return alerts


registry = AlertRegistry()


def _format_money(value: float) -> str:
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


@registry.register(alert_id="subscriptions-to-cancel", name="Subscriptions to Cancel")
def subscriptions_to_cancel(statement: "FinancialStatement") -> Alert | None:
    flagged = [
        item for item in statement.expenses.subscriptions if item.flag == ExpenseFlag.cancel
    ]
    if not flagged:
        return None
    return Alert(
        type="warning",
        title="Subscriptions to Cancel",
        message=(
            f"{len(flagged)} subscription(s) flagged: "
            + ", ".join(item.name for item in flagged)
        ),
        savings=sum(item.amount for item in flagged),
    )


@registry.register(alert_id="low-savings-rate", name="Low Savings Rate")
def low_savings_rate(statement: "FinancialStatement") -> Alert | None:
    ratios = statement.ratios
    # An empty profile has nothing to warn about.
    if ratios.total_income <= 0 and ratios.total_expenses <= 0:
        return None
    if ratios.total_income > 0 and ratios.savings_rate >= LOW_SAVINGS_RATE_PCT:
        return None
    return Alert(
        type="danger",
        title="Low Savings Rate",
        message=(
            f"Current rate: {ratios.savings_rate:.1f}%. "
            f"Target: >{TARGET_SAVINGS_RATE_PCT:.0f}%"
        ),
    )


@registry.register(alert_id="emergency-fund-progress", name="Emergency Fund Progress")
def emergency_fund_progress(statement: "FinancialStatement") -> Alert | None:
    fund = next(
        (
            asset
            for asset in statement.assets
            if "emergency" in asset.name.lower() and asset.goal
        ),
        None,
    )
    if fund is None:
        return None
    progress = fund.balance / fund.goal * 100
    if progress >= 100:
        return None
    return Alert(
        type="info",
        title="Emergency Fund Progress",
        message=f"{progress:.0f}% of ${_format_money(fund.goal)} goal",
    )


def derive_alerts(statement: "FinancialStatement") -> list[Alert]:
    return registry.run_all(statement)
