import json

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flowboard.graph.models import NodeMetadata, NodeType


def _parse_metadata(value):
    """Strict parse used on write paths: metadata must be a JSON object."""
    if value is None or value == "":
        return NodeMetadata()
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError("metadata must be a JSON object") from exc
    if not isinstance(value, dict | NodeMetadata):
        raise ValueError("metadata must be a JSON object")
    return value


class NodeCreate(BaseModel):
    type: NodeType
    label: str = Field(min_length=1)
    institution: str | None = None
    amount: float = Field(default=0.0, ge=0)
    balance: float = 0.0
    apy: float = 0.0
    metadata: NodeMetadata = Field(default_factory=NodeMetadata)
    sort_order: int = 0

    @field_validator("metadata", mode="before")
    @classmethod
    def _check_metadata(cls, value):
        return _parse_metadata(value)


class NodeUpdate(BaseModel):
    # A node's type is fixed at creation.
    model_config = ConfigDict(extra="forbid")

    label: str | None = Field(default=None, min_length=1)
    institution: str | None = None
    amount: float | None = Field(default=None, ge=0)
    balance: float | None = None
    apy: float | None = None
    metadata: NodeMetadata | None = None
    sort_order: int | None = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _check_metadata(cls, value):
        if value is None:
            return None
        return _parse_metadata(value)


class NodeResponse(BaseModel):
    id: str
    profile_id: str
    type: NodeType
    label: str
    institution: str | None
    amount: float
    balance: float
    apy: float
    metadata: dict
    sort_order: int
    created_at: str
    updated_at: str


class NodeConnections(BaseModel):
    node: NodeResponse
    can_send: bool
    can_receive: bool
    valid_destinations: list[NodeResponse]
    valid_sources: list[NodeResponse]
    hint: str
