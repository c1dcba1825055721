import math
from uuid import uuid4

import structlog

from flowboard.event_store.models import AggregateType, EventType
from flowboard.event_store.service import EventStoreService
from flowboard.exceptions import InvalidAmountError, NotFoundError, ValidationError
from flowboard.flows.repository import FlowRepository
from flowboard.flows.schemas import (
    FlowCreate,
    FlowProposalRequest,
    FlowProposalResponse,
    FlowResponse,
    FlowUpdate,
)
from flowboard.graph import rules
from flowboard.graph.models import Flow, Node
from flowboard.nodes.repository import NodeRepository

logger = structlog.get_logger()

# Amounts are entered in cents at most.
_AMOUNT_TOLERANCE = 0.005


class FlowService:
    def __init__(
        self,
        event_store: EventStoreService,
        repo: FlowRepository,
        nodes: NodeRepository,
    ) -> None:
        self._event_store = event_store
        self._repo = repo
        self._nodes = nodes

    async def propose(self, profile_id: str, data: FlowProposalRequest) -> FlowProposalResponse:
        source = await self._find_node(profile_id, data.from_node_id)
        target = await self._find_node(profile_id, data.to_node_id)
        proposal = rules.propose_flow(source, target, data.amount, allow_split=data.allow_split)
        return FlowProposalResponse(
            source_id=proposal.source_id,
            target_id=proposal.target_id,
            amount=proposal.amount,
            locked=proposal.locked,
        )

    async def create(
        self,
        profile_id: str,
        data: FlowCreate,
        idempotency_key: str | None = None,
    ) -> FlowResponse:
        source = await self._find_node(profile_id, data.from_node_id)
        target = await self._find_node(profile_id, data.to_node_id)
        proposal = self._settle(source, target, data.amount, data.allow_split)

        flow_id = str(uuid4())

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.flow,
            aggregate_id=flow_id,
            event_type=EventType.flow_created,
            event_data={
                "profile_id": profile_id,
                "from_node_id": proposal.source_id,
                "to_node_id": proposal.target_id,
                "amount": proposal.amount,
                "label": data.label,
                "is_recurring": data.is_recurring,
                "allow_split": data.allow_split,
            },
            idempotency_key=idempotency_key,
        )

        logger.info(
            "flow_created",
            flow_id=flow_id,
            profile_id=profile_id,
            amount=proposal.amount,
            locked=proposal.locked,
        )
        return await self.get(profile_id, flow_id)

    async def get(self, profile_id: str, flow_id: str) -> FlowResponse:
        row = await self._repo.get_by_id(profile_id, flow_id)
        if row is None:
            raise NotFoundError("Flow", flow_id)
        return self._to_response(row)

    async def list_flows(self, profile_id: str) -> list[FlowResponse]:
        rows = await self._repo.list_for_profile(profile_id)
        return [self._to_response(row) for row in rows]

    async def snapshot(self, profile_id: str) -> list[Flow]:
        rows = await self._repo.list_for_profile(profile_id)
        return [Flow.from_row(row) for row in rows]

    async def update(self, profile_id: str, flow_id: str, data: FlowUpdate) -> FlowResponse:
        existing = await self._repo.get_by_id(profile_id, flow_id)
        if existing is None:
            raise NotFoundError("Flow", flow_id)

        updates = data.model_dump(exclude_none=True)
        if not updates:
            raise ValidationError("No update fields provided")

        if "amount" in updates or "allow_split" in updates:
            source = await self._find_node(profile_id, existing["from_node_id"])
            target = await self._find_node(profile_id, existing["to_node_id"])
            self._settle(
                source,
                target,
                updates.get("amount", existing["amount"]),
                updates.get("allow_split", bool(existing["allow_split"])),
            )

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.flow,
            aggregate_id=flow_id,
            event_type=EventType.flow_updated,
            event_data=updates,
        )

        logger.info("flow_updated", flow_id=flow_id, fields=sorted(updates))
        return await self.get(profile_id, flow_id)

    async def delete(self, profile_id: str, flow_id: str) -> None:
        if await self._repo.get_by_id(profile_id, flow_id) is None:
            raise NotFoundError("Flow", flow_id)

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.flow,
            aggregate_id=flow_id,
            event_type=EventType.flow_deleted,
            event_data={"deleted": True},
        )

        logger.info("flow_deleted", flow_id=flow_id)

    async def _find_node(self, profile_id: str, node_id: str | None) -> Node | None:
        if not node_id:
            return None
        row = await self._nodes.get_by_id(profile_id, node_id)
        return Node.from_row(row) if row else None

    @staticmethod
    def _settle(
        source: Node | None,
        target: Node | None,
        amount: float,
        allow_split: bool,
    ) -> rules.FlowProposal:
        proposal = rules.propose_flow(source, target, amount, allow_split=allow_split)
        if proposal.locked and not math.isclose(
            amount, proposal.amount, abs_tol=_AMOUNT_TOLERANCE
        ):
            raise InvalidAmountError(
                f"Mismatched amount: {target.label} requires exactly {proposal.amount:.2f}; "
                "use a split payment to send less"
            )
        return proposal

    @staticmethod
    def _to_response(row: dict) -> FlowResponse:
        return FlowResponse(
            id=row["id"],
            profile_id=row["profile_id"],
            from_node_id=row["from_node_id"],
            to_node_id=row["to_node_id"],
            amount=row["amount"],
            label=row.get("label"),
            is_recurring=bool(row["is_recurring"]),
            allow_split=bool(row["allow_split"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
