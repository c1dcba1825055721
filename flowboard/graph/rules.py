"""Which node types may send money to which, and how a flow amount is settled."""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from flowboard.exceptions import InvalidAmountError, InvalidTransitionError, MissingNodeError
from flowboard.graph.models import Node, NodeType

ALLOWED_DESTINATIONS: dict[NodeType, frozenset[NodeType]] = {
    NodeType.income: frozenset({NodeType.account, NodeType.savings, NodeType.investment}),
    NodeType.account: frozenset(
        {NodeType.savings, NodeType.investment, NodeType.expense, NodeType.budget}
    ),
    NodeType.savings: frozenset({NodeType.account}),
    NodeType.investment: frozenset(),
    NodeType.expense: frozenset(),
    NodeType.budget: frozenset(),
}


def _invert(table: dict[NodeType, frozenset[NodeType]]) -> dict[NodeType, frozenset[NodeType]]:
    inverse: dict[NodeType, set[NodeType]] = {node_type: set() for node_type in NodeType}
    for source, destinations in table.items():
        for destination in destinations:
            inverse[destination].add(source)
    return {node_type: frozenset(sources) for node_type, sources in inverse.items()}


# Derived, never edited by hand.
ALLOWED_SOURCES: dict[NodeType, frozenset[NodeType]] = _invert(ALLOWED_DESTINATIONS)

# Destinations whose configured amount fixes the amount of an incoming flow.
LOCKED_TARGET_TYPES = frozenset({NodeType.expense, NodeType.budget})


@dataclass(frozen=True)
class FlowProposal:
    source_id: str
    target_id: str
    amount: float
    locked: bool


def allowed_destination_types(node_type: NodeType) -> frozenset[NodeType]:
    return ALLOWED_DESTINATIONS.get(node_type, frozenset())


def allowed_source_types(node_type: NodeType) -> frozenset[NodeType]:
    return ALLOWED_SOURCES.get(node_type, frozenset())


def can_flow(source_type: NodeType, destination_type: NodeType) -> bool:
    return destination_type in allowed_destination_types(source_type)


def can_send(node: Node) -> bool:
    return bool(allowed_destination_types(node.type))


def can_receive(node: Node) -> bool:
    return bool(allowed_source_types(node.type))


def valid_destinations(node: Node, all_nodes: Iterable[Node]) -> list[Node]:
    """Nodes that ``node`` may send money to, excluding itself."""
    types = allowed_destination_types(node.type)
    return [n for n in all_nodes if n.id != node.id and n.type in types]


def valid_sources(node: Node, all_nodes: Iterable[Node]) -> list[Node]:
    """Nodes that may send money to ``node``, excluding itself."""
    types = allowed_source_types(node.type)
    return [n for n in all_nodes if n.id != node.id and n.type in types]


def orient_flow(anchor: Node, selected: Node) -> tuple[Node, Node]:
    """Return ``(source, destination)`` for a flow picked while editing ``anchor``.

    The anchor is the source whenever its type can send at all, otherwise the
    picked node is.
    """
    if can_send(anchor):
        return anchor, selected
    return selected, anchor


def is_locked_target(node: Node) -> bool:
    return node.type in LOCKED_TARGET_TYPES


def propose_flow(
    source: Node | None,
    target: Node | None,
    requested_amount: float,
    allow_split: bool = False,
) -> FlowProposal:
    """Validate a flow request and settle the amount it will carry.

    Raises ``InvalidAmountError``, ``MissingNodeError`` or
    ``InvalidTransitionError``; nothing is created on failure.

    A full (non-split) payment into an expense or budget always carries the
    target's configured amount, whatever was requested. With ``allow_split``
    the requested amount is kept; the caller is expected to add further flows
    until the target's amount is covered.
    """
    if (
        requested_amount is None
        or not math.isfinite(requested_amount)
        or requested_amount <= 0
    ):
        raise InvalidAmountError("Flow amount must be greater than zero")
    if source is None or target is None:
        raise MissingNodeError("Both a source and a destination node must be selected")
    if source.id == target.id:
        raise InvalidTransitionError("A flow must connect two different nodes")
    if not can_flow(source.type, target.type):
        raise InvalidTransitionError(
            f"Money cannot flow from a {source.type} node to a {target.type} node"
        )

    if is_locked_target(target) and not allow_split:
        if target.amount <= 0:
            raise InvalidAmountError(
                f"{target.type.capitalize()} '{target.label}' has no configured amount; "
                "use a split payment instead"
            )
        return FlowProposal(
            source_id=source.id,
            target_id=target.id,
            amount=target.amount,
            locked=True,
        )

    return FlowProposal(
        source_id=source.id,
        target_id=target.id,
        amount=requested_amount,
        locked=False,
    )


def describe_constraints(node: Node) -> str:
    if node.type in LOCKED_TARGET_TYPES:
        return "Expenses and budgets can only receive money, not send it"
    if node.type == NodeType.income:
        return "Income sources can only send money, not receive it"
    if node.type == NodeType.investment:
        return "Investments can only receive money, not send it"
    return ""
