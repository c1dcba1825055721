from pydantic import BaseModel, Field


class FlowCreate(BaseModel):
    from_node_id: str
    to_node_id: str
    amount: float
    label: str | None = None
    is_recurring: bool = True
    allow_split: bool = False


class FlowUpdate(BaseModel):
    amount: float | None = None
    label: str | None = None
    is_recurring: bool | None = None
    # Unset keeps the mode the flow was created with.
    allow_split: bool | None = None


class FlowResponse(BaseModel):
    id: str
    profile_id: str
    from_node_id: str
    to_node_id: str
    amount: float
    label: str | None
    is_recurring: bool
    allow_split: bool
    created_at: str
    updated_at: str


class FlowProposalRequest(BaseModel):
    from_node_id: str | None = None
    to_node_id: str | None = None
    amount: float = Field(default=0.0)
    allow_split: bool = False


class FlowProposalResponse(BaseModel):
    source_id: str
    target_id: str
    amount: float
    locked: bool
