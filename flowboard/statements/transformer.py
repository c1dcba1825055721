"""Turn a profile snapshot (nodes + flows) into financial statement data.

Everything here is a pure function of its arguments: no I/O, no caching, and
calling it twice on the same snapshot gives the same result.
"""

import math
from collections.abc import Iterable, Sequence

from flowboard.graph.models import ExpenseFlag, Flow, Node, NodeType
from flowboard.statements.alerts import derive_alerts
from flowboard.statements.schemas import (
    AssetItem,
    CashFlowBucket,
    CashFlowCategory,
    CashFlowStatement,
    ExpenseBreakdown,
    ExpenseItem,
    FinancialRatios,
    FinancialStatement,
    FlowLine,
    IncomeItem,
    LiabilityItem,
)

ASSET_TYPE_LABELS = {
    NodeType.savings: "Savings",
    NodeType.investment: "Investment",
}
LIQUID_ASSET_TYPES = frozenset({"Cash", "Savings"})
INVESTING_NODE_TYPES = frozenset({NodeType.savings, NodeType.investment})


def build_income(nodes: Iterable[Node]) -> list[IncomeItem]:
    return [
        IncomeItem(name=node.label, amount=node.amount, type=node.institution or "Income")
        for node in nodes
        if node.type == NodeType.income
    ]


def categorize_expenses(nodes: Iterable[Node]) -> ExpenseBreakdown:
    """Place every expense node in exactly one bucket.

    Priority: subscription, then variable (has a budgeted target), then fixed.
    """
    breakdown = ExpenseBreakdown()
    for node in nodes:
        if node.type != NodeType.expense:
            continue
        meta = node.metadata
        if meta.subscription:
            flag = ExpenseFlag.cancel.value if meta.flag == ExpenseFlag.cancel else None
            breakdown.subscriptions.append(
                ExpenseItem(name=node.label, amount=node.amount, flag=flag)
            )
        elif meta.budgeted:
            breakdown.variable.append(
                ExpenseItem(name=node.label, amount=node.amount, budgeted=meta.budgeted)
            )
        else:
            breakdown.fixed.append(ExpenseItem(name=node.label, amount=node.amount))
    return breakdown


def build_assets(nodes: Iterable[Node]) -> list[AssetItem]:
    return [
        AssetItem(
            name=node.label,
            balance=node.balance,
            type=ASSET_TYPE_LABELS[node.type],
            apy=node.apy,
            goal=node.metadata.goal or None,
        )
        for node in nodes
        if node.type in ASSET_TYPE_LABELS
    ]


def categorize_cash_flow(nodes: Sequence[Node], flows: Iterable[Flow]) -> CashFlowStatement:
    """Split flows into operating and investing activity.

    A flow touching a savings or investment node is investing, anything else
    is operating. Inflow versus outflow follows the source node only: money
    leaving an income node is an inflow, everything else an outflow. Flows
    naming a node that is not in the snapshot are skipped. Nothing is
    classified as financing.
    """
    by_id = {node.id: node for node in nodes}
    buckets = {category: CashFlowBucket() for category in CashFlowCategory}

    for flow in flows:
        from_node = by_id.get(flow.from_node_id)
        to_node = by_id.get(flow.to_node_id)
        if from_node is None or to_node is None:
            continue

        if from_node.type in INVESTING_NODE_TYPES or to_node.type in INVESTING_NODE_TYPES:
            bucket = buckets[CashFlowCategory.investing]
        else:
            bucket = buckets[CashFlowCategory.operating]

        line = FlowLine(name=f"{from_node.label} → {to_node.label}", amount=flow.amount)
        if from_node.type == NodeType.income:
            bucket.inflows.append(line)
            bucket.inflow_total += flow.amount
        else:
            bucket.outflows.append(line)
            bucket.outflow_total += flow.amount

    return CashFlowStatement(
        operating=buckets[CashFlowCategory.operating],
        investing=buckets[CashFlowCategory.investing],
        financing=buckets[CashFlowCategory.financing],
    )


def total_expenses(expenses: ExpenseBreakdown) -> float:
    return (
        sum(item.amount for item in expenses.fixed)
        + sum(item.amount for item in expenses.variable)
        + sum(item.amount for item in expenses.subscriptions)
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def health_score(savings_rate: float, expense_ratio: float, debt_to_asset: float) -> int:
    raw = savings_rate * 2 + (100 - expense_ratio) * 0.5 + (100 - debt_to_asset) * 0.3
    return max(0, min(100, _round_half_up(raw)))


def compute_ratios(
    income: Sequence[IncomeItem],
    expenses: ExpenseBreakdown,
    assets: Sequence[AssetItem],
    liabilities: Sequence[LiabilityItem],
    cash_flow: CashFlowStatement,
) -> FinancialRatios:
    """Derived ratios over the whole snapshot.

    With no income the savings rate is 0 and any spending counts as a 100%
    expense ratio. Likewise debts with no assets count as 100% debt-to-asset.
    """
    income_total = sum(item.amount for item in income)
    expense_total = total_expenses(expenses)
    net_income = income_total - expense_total

    if income_total:
        savings_rate = net_income / income_total * 100
        expense_ratio = expense_total / income_total * 100
    else:
        savings_rate = 0.0
        expense_ratio = 100.0 if expense_total > 0 else 0.0

    asset_total = sum(item.balance for item in assets)
    liability_total = sum(item.balance for item in liabilities)
    if liability_total > 0:
        debt_to_asset = liability_total / asset_total * 100 if asset_total else 100.0
    else:
        debt_to_asset = 0.0

    liquid = sum(item.balance for item in assets if item.type in LIQUID_ASSET_TYPES)
    liquidity_ratio = liquid / (expense_total or 1)

    operating = cash_flow.operating.inflow_total - cash_flow.operating.outflow_total
    investing = cash_flow.investing.inflow_total - cash_flow.investing.outflow_total
    financing = cash_flow.financing.inflow_total - cash_flow.financing.outflow_total

    return FinancialRatios(
        total_income=income_total,
        total_expenses=expense_total,
        net_income=net_income,
        savings_rate=savings_rate,
        expense_ratio=expense_ratio,
        total_assets=asset_total,
        total_liabilities=liability_total,
        net_worth=asset_total - liability_total,
        debt_to_asset=debt_to_asset,
        liquidity_ratio=liquidity_ratio,
        health_score=health_score(savings_rate, expense_ratio, debt_to_asset),
        operating_cash_flow=operating,
        investing_cash_flow=investing,
        financing_cash_flow=financing,
        net_cash_flow=operating + investing + financing,
    )


def build_statement(nodes: Iterable[Node], flows: Iterable[Flow]) -> FinancialStatement:
    nodes = list(nodes)
    income = build_income(nodes)
    expenses = categorize_expenses(nodes)
    assets = build_assets(nodes)
    # No node type models debt yet.
    liabilities: list[LiabilityItem] = []
    cash_flow = categorize_cash_flow(nodes, flows)
    ratios = compute_ratios(income, expenses, assets, liabilities, cash_flow)

    statement = FinancialStatement(
        income=income,
        expenses=expenses,
        assets=assets,
        liabilities=liabilities,
        cash_flow=cash_flow,
        ratios=ratios,
    )
    statement.alerts = derive_alerts(statement)
    return statement
