import pytest

from flowboard.graph.models import Flow, NodeType
from flowboard.statements import transformer
from flowboard.statements.schemas import AssetItem, IncomeItem, LiabilityItem
from flowboard.statements.transformer import build_statement


@pytest.fixture
def household(make_node):
    nodes = [
        make_node("salary", NodeType.income, "Salary", amount=3183.61, institution="Acme Corp"),
        make_node("checking", NodeType.account, "Checking"),
        make_node("rent", NodeType.expense, "Rent", amount=1200),
        make_node(
            "groceries",
            NodeType.expense,
            "Groceries",
            amount=250,
            metadata={"budgeted": 300},
        ),
        make_node(
            "streaming",
            NodeType.expense,
            "Streaming",
            amount=150,
            metadata={"subscription": True, "flag": "cancel"},
        ),
        make_node(
            "emergency",
            NodeType.savings,
            "Emergency Fund",
            balance=1195.93,
            apy=4.5,
            metadata={"goal": 5000},
        ),
        make_node("brokerage", NodeType.investment, "Brokerage", balance=8000),
    ]
    flows = [
        Flow("f1", "salary", "checking", 3183.61),
        Flow("f2", "checking", "rent", 1200),
        Flow("f3", "checking", "emergency", 500),
        Flow("f4", "checking", "brokerage", 300),
    ]
    return nodes, flows


def test_statement_is_idempotent(household):
    nodes, flows = household

    assert build_statement(nodes, flows) == build_statement(nodes, flows)


def test_income_items(household):
    nodes, flows = household

    statement = build_statement(nodes, flows)

    assert [(i.name, i.amount, i.type) for i in statement.income] == [
        ("Salary", 3183.61, "Acme Corp")
    ]


def test_income_type_defaults(make_node):
    statement = build_statement([make_node("s", NodeType.income, "Side gig", amount=100)], [])

    assert statement.income[0].type == "Income"


def test_every_expense_lands_in_exactly_one_bucket(household):
    nodes, flows = household

    expenses = build_statement(nodes, flows).expenses

    names = (
        [item.name for item in expenses.fixed]
        + [item.name for item in expenses.variable]
        + [item.name for item in expenses.subscriptions]
    )
    expected = sorted(n.label for n in nodes if n.type == NodeType.expense)
    assert sorted(names) == expected
    assert [item.name for item in expenses.fixed] == ["Rent"]
    assert [item.budgeted for item in expenses.variable] == [300]
    assert [item.flag for item in expenses.subscriptions] == ["cancel"]


def test_subscription_wins_over_budgeted(make_node):
    node = make_node(
        "gym",
        NodeType.expense,
        "Gym",
        amount=40,
        metadata={"subscription": True, "budgeted": 50},
    )

    expenses = build_statement([node], []).expenses

    assert [i.name for i in expenses.subscriptions] == ["Gym"]
    assert expenses.variable == []


def test_review_flag_is_not_reported_as_cancel(make_node):
    node = make_node(
        "music",
        NodeType.expense,
        "Music",
        amount=10,
        metadata={"subscription": True, "flag": "review"},
    )

    assert build_statement([node], []).expenses.subscriptions[0].flag is None


def test_malformed_metadata_is_treated_as_empty(make_node):
    node = make_node("rent", NodeType.expense, "Rent", amount=900, metadata="{not json")

    expenses = build_statement([node], []).expenses

    assert [i.name for i in expenses.fixed] == ["Rent"]


def test_totals_are_sums(household):
    nodes, flows = household

    ratios = build_statement(nodes, flows).ratios

    assert ratios.total_income == pytest.approx(3183.61)
    assert ratios.total_expenses == pytest.approx(1600)
    assert ratios.net_income == pytest.approx(1583.61)


def test_savings_rate_scenario(household):
    nodes, flows = household

    ratios = build_statement(nodes, flows).ratios

    assert ratios.savings_rate == pytest.approx(49.74, abs=0.01)
    assert ratios.expense_ratio == pytest.approx(50.26, abs=0.01)
    assert ratios.health_score == 100


def test_assets_and_net_worth(household):
    nodes, flows = household

    statement = build_statement(nodes, flows)

    assert [(a.name, a.type, a.goal) for a in statement.assets] == [
        ("Emergency Fund", "Savings", 5000),
        ("Brokerage", "Investment", None),
    ]
    assert statement.liabilities == []
    assert statement.ratios.total_assets == pytest.approx(9195.93)
    assert statement.ratios.net_worth == pytest.approx(9195.93)
    assert statement.ratios.debt_to_asset == 0.0
    assert statement.ratios.liquidity_ratio == pytest.approx(1195.93 / 1600)


def test_cash_flow_buckets(household):
    nodes, flows = household

    cash_flow = build_statement(nodes, flows).cash_flow

    assert [line.name for line in cash_flow.operating.inflows] == ["Salary → Checking"]
    assert [line.name for line in cash_flow.operating.outflows] == ["Checking → Rent"]
    assert cash_flow.investing.outflow_total == pytest.approx(800)
    assert cash_flow.investing.inflows == []
    assert cash_flow.financing.inflows == []
    assert cash_flow.financing.outflows == []


def test_net_cash_flow(household):
    nodes, flows = household

    ratios = build_statement(nodes, flows).ratios

    assert ratios.operating_cash_flow == pytest.approx(3183.61 - 1200)
    assert ratios.investing_cash_flow == pytest.approx(-800)
    assert ratios.financing_cash_flow == 0.0
    assert ratios.net_cash_flow == pytest.approx(3183.61 - 2000)


def test_income_to_expense_flow_is_operating_inflow(make_node):
    nodes = [
        make_node("salary", NodeType.income, "Salary", amount=1000),
        make_node("rent", NodeType.expense, "Rent", amount=500),
    ]

    cash_flow = build_statement(nodes, [Flow("f", "salary", "rent", 500)]).cash_flow

    assert cash_flow.operating.inflow_total == 500
    assert cash_flow.operating.outflow_total == 0
    assert cash_flow.investing.inflow_total == 0


def test_savings_to_account_is_investing(make_node):
    nodes = [
        make_node("sav", NodeType.savings, "Savings"),
        make_node("acct", NodeType.account, "Checking"),
    ]

    cash_flow = build_statement(nodes, [Flow("f", "sav", "acct", 75)]).cash_flow

    assert cash_flow.investing.outflow_total == 75
    assert cash_flow.operating.outflow_total == 0


def test_flows_with_missing_nodes_are_skipped(make_node):
    nodes = [make_node("acct", NodeType.account, "Checking")]
    flows = [Flow("f1", "acct", "gone", 10), Flow("f2", "gone", "acct", 20)]

    statement = build_statement(nodes, flows)

    assert statement.cash_flow.operating.outflows == []
    assert statement.cash_flow.operating.inflows == []
    assert statement.ratios.net_cash_flow == 0


def test_spending_without_income_is_not_rewarded(make_node):
    nodes = [make_node("rent", NodeType.expense, "Rent", amount=800)]

    ratios = build_statement(nodes, []).ratios

    assert ratios.savings_rate == 0.0
    assert ratios.expense_ratio == 100.0
    assert ratios.liquidity_ratio == 0.0
    assert ratios.net_income == -800
    assert ratios.health_score == 30


def test_empty_snapshot():
    statement = build_statement([], [])

    assert statement.income == []
    assert statement.alerts == []
    assert statement.ratios.liquidity_ratio == 0.0
    assert statement.ratios.health_score == 80


@pytest.mark.parametrize(
    ("savings_rate", "expense_ratio", "debt_to_asset", "expected"),
    [
        (0, 100, 0, 30),
        (10, 90, 0, 55),
        (-200, 300, 0, 0),
        (60, 40, 0, 100),
        (0.25, 100, 100, 1),
    ],
)
def test_health_score(savings_rate, expense_ratio, debt_to_asset, expected):
    assert transformer.health_score(savings_rate, expense_ratio, debt_to_asset) == expected


class TestDebtToAsset:
    @pytest.fixture
    def budget(self, make_node):
        income = [IncomeItem(name="Salary", amount=1000, type="Income")]
        expenses = transformer.categorize_expenses(
            [make_node("rent", NodeType.expense, "Rent", amount=900)]
        )
        cash_flow = transformer.categorize_cash_flow([], [])
        return income, expenses, cash_flow

    def test_liabilities_against_assets(self, budget):
        income, expenses, cash_flow = budget
        assets = [AssetItem(name="Brokerage", balance=8000, type="Investment", apy=0)]
        liabilities = [LiabilityItem(name="Car loan", balance=4000)]

        ratios = transformer.compute_ratios(income, expenses, assets, liabilities, cash_flow)

        assert ratios.debt_to_asset == pytest.approx(50.0)
        assert ratios.total_liabilities == 4000
        assert ratios.net_worth == 4000
        # 10 * 2 + 10 * 0.5 + 50 * 0.3
        assert ratios.health_score == 40

    def test_no_liabilities(self, budget):
        income, expenses, cash_flow = budget
        assets = [AssetItem(name="Brokerage", balance=8000, type="Investment", apy=0)]

        ratios = transformer.compute_ratios(income, expenses, assets, [], cash_flow)

        assert ratios.debt_to_asset == 0.0
        assert ratios.health_score == 55

    def test_liabilities_without_assets(self, budget):
        income, expenses, cash_flow = budget
        liabilities = [LiabilityItem(name="Card", balance=500)]

        ratios = transformer.compute_ratios(income, expenses, [], liabilities, cash_flow)

        assert ratios.debt_to_asset == 100.0
        assert ratios.net_worth == -500
        assert ratios.health_score == 25
