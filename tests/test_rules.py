import pytest

from flowboard.exceptions import (
    InvalidAmountError,
    InvalidTransitionError,
    MissingNodeError,
    ValidationError,
)
from flowboard.graph import rules
from flowboard.graph.models import NodeType


class TestTransitionTables:
    def test_sources_are_the_inverse_of_destinations(self):
        for source in NodeType:
            for destination in NodeType:
                sends = destination in rules.ALLOWED_DESTINATIONS[source]
                receives = source in rules.ALLOWED_SOURCES[destination]
                assert sends == receives, (source, destination)

    def test_every_type_has_an_entry(self):
        assert set(rules.ALLOWED_DESTINATIONS) == set(NodeType)
        assert set(rules.ALLOWED_SOURCES) == set(NodeType)

    def test_terminal_types_never_send(self):
        for node_type in (NodeType.investment, NodeType.expense, NodeType.budget):
            assert rules.allowed_destination_types(node_type) == frozenset()

    def test_income_never_receives(self):
        assert rules.allowed_source_types(NodeType.income) == frozenset()

    def test_account_receives_from_income_and_savings(self):
        assert rules.allowed_source_types(NodeType.account) == {
            NodeType.income,
            NodeType.savings,
        }

    def test_can_flow(self):
        assert rules.can_flow(NodeType.income, NodeType.account)
        assert rules.can_flow(NodeType.account, NodeType.budget)
        assert not rules.can_flow(NodeType.income, NodeType.expense)
        assert not rules.can_flow(NodeType.savings, NodeType.investment)


class TestNodeQueries:
    def test_valid_destinations_excludes_self_and_disallowed(self, make_node):
        account = make_node("acct", NodeType.account)
        other_account = make_node("acct2", NodeType.account)
        rent = make_node("rent", NodeType.expense, amount=1200)
        savings = make_node("sav", NodeType.savings)
        salary = make_node("salary", NodeType.income)
        nodes = [account, other_account, rent, savings, salary]

        result = rules.valid_destinations(account, nodes)

        assert [n.id for n in result] == ["rent", "sav"]

    def test_valid_sources(self, make_node):
        account = make_node("acct", NodeType.account)
        salary = make_node("salary", NodeType.income)
        savings = make_node("sav", NodeType.savings)
        rent = make_node("rent", NodeType.expense, amount=1200)

        result = rules.valid_sources(account, [account, salary, savings, rent])

        assert [n.id for n in result] == ["salary", "sav"]

    def test_orient_flow_keeps_sending_anchor_as_source(self, make_node):
        account = make_node("acct", NodeType.account)
        rent = make_node("rent", NodeType.expense, amount=1200)

        assert rules.orient_flow(account, rent) == (account, rent)

    def test_orient_flow_swaps_when_anchor_cannot_send(self, make_node):
        account = make_node("acct", NodeType.account)
        rent = make_node("rent", NodeType.expense, amount=1200)

        assert rules.orient_flow(rent, account) == (account, rent)

    def test_describe_constraints(self, make_node):
        assert "only receive" in rules.describe_constraints(make_node("e", NodeType.expense))
        assert "only send" in rules.describe_constraints(make_node("i", NodeType.income))
        assert rules.describe_constraints(make_node("a", NodeType.account)) == ""


class TestProposeFlow:
    def test_locked_target_forces_configured_amount(self, make_node):
        account = make_node("acct", NodeType.account)
        rent = make_node("rent", NodeType.expense, amount=1200)

        proposal = rules.propose_flow(account, rent, 50)

        assert proposal.amount == 1200
        assert proposal.locked is True
        assert (proposal.source_id, proposal.target_id) == ("acct", "rent")

    def test_budget_target_is_locked(self, make_node):
        account = make_node("acct", NodeType.account)
        groceries = make_node("groceries", NodeType.budget, amount=400)

        proposal = rules.propose_flow(account, groceries, 10)

        assert proposal.amount == 400
        assert proposal.locked is True

    def test_split_payment_keeps_requested_amount(self, make_node):
        account = make_node("acct", NodeType.account)
        rent = make_node("rent", NodeType.expense, amount=1200)

        proposal = rules.propose_flow(account, rent, 600, allow_split=True)

        assert proposal.amount == 600
        assert proposal.locked is False

    def test_unlocked_target_keeps_requested_amount(self, make_node):
        salary = make_node("salary", NodeType.income, amount=3000)
        account = make_node("acct", NodeType.account)

        proposal = rules.propose_flow(salary, account, 2500)

        assert proposal.amount == 2500
        assert proposal.locked is False

    @pytest.mark.parametrize("amount", [0, -1, -0.01, None, float("nan"), float("inf")])
    def test_non_positive_amount_is_rejected(self, make_node, amount):
        account = make_node("acct", NodeType.account)
        rent = make_node("rent", NodeType.expense, amount=1200)

        with pytest.raises(InvalidAmountError):
            rules.propose_flow(account, rent, amount)

    @pytest.mark.parametrize("amount", [float("nan"), float("-inf")])
    def test_split_payment_rejects_non_finite_amount(self, make_node, amount):
        account = make_node("acct", NodeType.account)
        rent = make_node("rent", NodeType.expense, amount=800)

        with pytest.raises(InvalidAmountError):
            rules.propose_flow(account, rent, amount, allow_split=True)

    def test_non_positive_amount_is_rejected_even_for_invalid_pair(self, make_node):
        investment = make_node("inv", NodeType.investment)
        account = make_node("acct", NodeType.account)

        with pytest.raises(InvalidAmountError):
            rules.propose_flow(investment, account, 0)

    @pytest.mark.parametrize("target_type", list(NodeType))
    def test_investment_source_is_always_rejected(self, make_node, target_type):
        investment = make_node("inv", NodeType.investment)
        target = make_node("target", target_type, amount=100)

        with pytest.raises(InvalidTransitionError):
            rules.propose_flow(investment, target, 100)

    def test_missing_node(self, make_node):
        account = make_node("acct", NodeType.account)

        with pytest.raises(MissingNodeError):
            rules.propose_flow(account, None, 100)
        with pytest.raises(MissingNodeError):
            rules.propose_flow(None, account, 100)

    def test_self_flow_is_rejected(self, make_node):
        account = make_node("acct", NodeType.account)

        with pytest.raises(InvalidTransitionError):
            rules.propose_flow(account, account, 100)

    def test_disallowed_pair_is_rejected(self, make_node):
        salary = make_node("salary", NodeType.income)
        rent = make_node("rent", NodeType.expense, amount=1200)

        with pytest.raises(InvalidTransitionError):
            rules.propose_flow(salary, rent, 1200)

    def test_locked_target_without_amount_needs_split(self, make_node):
        account = make_node("acct", NodeType.account)
        misc = make_node("misc", NodeType.expense, amount=0)

        with pytest.raises(InvalidAmountError):
            rules.propose_flow(account, misc, 25)

        assert rules.propose_flow(account, misc, 25, allow_split=True).amount == 25

    def test_graph_errors_are_validation_errors(self):
        assert issubclass(InvalidAmountError, ValidationError)
        assert issubclass(InvalidTransitionError, ValidationError)
        assert issubclass(MissingNodeError, ValidationError)
        assert InvalidTransitionError("x").code == "INVALID_TRANSITION"
        assert InvalidAmountError("x").code == "INVALID_AMOUNT"
        assert MissingNodeError("x").code == "MISSING_NODE"
