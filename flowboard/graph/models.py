import json
from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError


class NodeType(StrEnum):
    income = "income"
    account = "account"
    savings = "savings"
    investment = "investment"
    expense = "expense"
    budget = "budget"


class ExpenseFlag(StrEnum):
    cancel = "cancel"
    review = "review"


class NodeMetadata(BaseModel):
    """Known metadata flags carried on a node.

    Missing keys take the defaults below. Unknown keys are kept so that
    round-tripping a node never drops client data.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    subscription: bool = False
    flag: ExpenseFlag | None = None
    budgeted: float | None = None
    goal: float | None = None

    @field_validator("flag", mode="before")
    @classmethod
    def _unknown_flag_is_unset(cls, value):
        if isinstance(value, str) and value in {flag.value for flag in ExpenseFlag}:
            return value
        return None

    @classmethod
    def parse(cls, raw: "str | dict | NodeMetadata | None") -> "NodeMetadata":
        """Lenient parse used on read paths: anything unreadable becomes defaults."""
        if isinstance(raw, NodeMetadata):
            return raw
        if raw is None or raw == "":
            return cls()
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError:
                return cls()
        if not isinstance(raw, dict):
            return cls()
        try:
            return cls.model_validate(raw)
        except PydanticValidationError:
            return cls()

    def dumps(self) -> str:
        return json.dumps(self.model_dump(mode="json", exclude_defaults=True))


@dataclass(frozen=True)
class Node:
    id: str
    type: NodeType
    label: str
    institution: str | None = None
    amount: float = 0.0
    balance: float = 0.0
    apy: float = 0.0
    metadata: NodeMetadata = field(default_factory=NodeMetadata)

    @classmethod
    def from_row(cls, row: dict) -> "Node":
        return cls(
            id=row["id"],
            type=NodeType(row["type"]),
            label=row["label"],
            institution=row.get("institution") or None,
            amount=row.get("amount") or 0.0,
            balance=row.get("balance") or 0.0,
            apy=row.get("apy") or 0.0,
            metadata=NodeMetadata.parse(row.get("metadata")),
        )


@dataclass(frozen=True)
class Flow:
    id: str
    from_node_id: str
    to_node_id: str
    amount: float
    label: str | None = None
    is_recurring: bool = True

    @classmethod
    def from_row(cls, row: dict) -> "Flow":
        return cls(
            id=row["id"],
            from_node_id=row["from_node_id"],
            to_node_id=row["to_node_id"],
            amount=row["amount"],
            label=row.get("label"),
            is_recurring=bool(row.get("is_recurring", True)),
        )
