from dataclasses import dataclass
from enum import StrEnum


class AggregateType(StrEnum):
    profile = "profile"
    node = "node"
    flow = "flow"
    budget = "budget"
    budget_transaction = "budget_transaction"
    goal = "goal"
    goal_transaction = "goal_transaction"


class EventType(StrEnum):
    profile_created = "profile_created"
    profile_updated = "profile_updated"
    profile_deleted = "profile_deleted"
    node_created = "node_created"
    node_updated = "node_updated"
    node_deleted = "node_deleted"
    flow_created = "flow_created"
    flow_updated = "flow_updated"
    flow_deleted = "flow_deleted"
    budget_created = "budget_created"
    budget_updated = "budget_updated"
    budget_deleted = "budget_deleted"
    budget_transaction_created = "budget_transaction_created"
    budget_transaction_deleted = "budget_transaction_deleted"
    goal_created = "goal_created"
    goal_updated = "goal_updated"
    goal_deleted = "goal_deleted"
    goal_transaction_created = "goal_transaction_created"
    goal_transaction_deleted = "goal_transaction_deleted"


@dataclass(frozen=True)
class Event:
    event_id: str
    profile_id: str | None
    aggregate_type: str
    aggregate_id: str
    event_type: str
    event_data: str
    metadata: str | None
    version: int
    created_at: str
