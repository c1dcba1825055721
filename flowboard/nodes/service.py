import json
from uuid import uuid4

import structlog

from flowboard.budgets.service import BudgetService
from flowboard.event_store.models import AggregateType, EventType
from flowboard.event_store.service import EventStoreService
from flowboard.exceptions import NotFoundError, ValidationError
from flowboard.graph import rules
from flowboard.graph.models import Node, NodeMetadata, NodeType
from flowboard.nodes.repository import NodeRepository
from flowboard.nodes.schemas import NodeConnections, NodeCreate, NodeResponse, NodeUpdate

logger = structlog.get_logger()


class NodeService:
    def __init__(
        self,
        event_store: EventStoreService,
        repo: NodeRepository,
        budgets: BudgetService,
    ) -> None:
        self._event_store = event_store
        self._repo = repo
        self._budgets = budgets

    async def create(self, profile_id: str, data: NodeCreate) -> NodeResponse:
        if data.type == NodeType.budget and data.amount <= 0:
            raise ValidationError("Budget nodes need a positive amount")

        node_id = str(uuid4())

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.node,
            aggregate_id=node_id,
            event_type=EventType.node_created,
            event_data={
                "profile_id": profile_id,
                "type": data.type.value,
                "label": data.label,
                "institution": data.institution,
                "amount": data.amount,
                "balance": data.balance,
                "apy": data.apy,
                "metadata": data.metadata.dumps(),
                "sort_order": data.sort_order,
            },
        )

        logger.info("node_created", node_id=node_id, profile_id=profile_id, type=data.type)

        if data.type == NodeType.budget:
            await self._budgets.create_for_node(profile_id, node_id, data.label, data.amount)

        return await self.get(profile_id, node_id)

    async def get(self, profile_id: str, node_id: str) -> NodeResponse:
        row = await self._repo.get_by_id(profile_id, node_id)
        if row is None:
            raise NotFoundError("Node", node_id)
        return self._to_response(row)

    async def list_nodes(self, profile_id: str) -> list[NodeResponse]:
        rows = await self._repo.list_for_profile(profile_id)
        return [self._to_response(row) for row in rows]

    async def snapshot(self, profile_id: str) -> list[Node]:
        rows = await self._repo.list_for_profile(profile_id)
        return [Node.from_row(row) for row in rows]

    async def find(self, profile_id: str, node_id: str) -> Node | None:
        row = await self._repo.get_by_id(profile_id, node_id)
        return Node.from_row(row) if row else None

    async def update(self, profile_id: str, node_id: str, data: NodeUpdate) -> NodeResponse:
        existing = await self._repo.get_by_id(profile_id, node_id)
        if existing is None:
            raise NotFoundError("Node", node_id)

        # institution is the only nullable column a client may clear.
        updates = {
            key: value
            for key, value in data.model_dump(exclude_unset=True, exclude={"metadata"}).items()
            if value is not None or key == "institution"
        }
        if data.metadata is not None:
            updates["metadata"] = data.metadata.dumps()
        if not updates:
            raise ValidationError("No update fields provided")

        if existing["type"] == NodeType.budget and "amount" in updates and updates["amount"] <= 0:
            raise ValidationError("Budget nodes need a positive amount")

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.node,
            aggregate_id=node_id,
            event_type=EventType.node_updated,
            event_data=updates,
        )

        logger.info("node_updated", node_id=node_id, fields=sorted(updates))

        if existing["type"] == NodeType.budget and ("label" in updates or "amount" in updates):
            await self._budgets.sync_from_node(
                profile_id,
                node_id,
                name=updates.get("label"),
                budgeted=updates.get("amount"),
            )

        return await self.get(profile_id, node_id)

    async def delete(self, profile_id: str, node_id: str) -> None:
        existing = await self._repo.get_by_id(profile_id, node_id)
        if existing is None:
            raise NotFoundError("Node", node_id)

        flow_ids = await self._repo.list_incident_flow_ids(node_id)
        for flow_id in flow_ids:
            await self._event_store.append_event(
                profile_id=profile_id,
                aggregate_type=AggregateType.flow,
                aggregate_id=flow_id,
                event_type=EventType.flow_deleted,
                event_data={"deleted": True, "reason": "node_deleted", "node_id": node_id},
            )

        if existing["type"] == NodeType.budget:
            await self._budgets.delete_for_node(profile_id, node_id)

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.node,
            aggregate_id=node_id,
            event_type=EventType.node_deleted,
            event_data={"deleted": True},
        )

        logger.info("node_deleted", node_id=node_id, incident_flows=len(flow_ids))

    async def connections(self, profile_id: str, node_id: str) -> NodeConnections:
        rows = await self._repo.list_for_profile(profile_id)
        by_id = {row["id"]: row for row in rows}
        if node_id not in by_id:
            raise NotFoundError("Node", node_id)

        nodes = [Node.from_row(row) for row in rows]
        node = next(n for n in nodes if n.id == node_id)

        return NodeConnections(
            node=self._to_response(by_id[node_id]),
            can_send=rules.can_send(node),
            can_receive=rules.can_receive(node),
            valid_destinations=[
                self._to_response(by_id[n.id]) for n in rules.valid_destinations(node, nodes)
            ],
            valid_sources=[
                self._to_response(by_id[n.id]) for n in rules.valid_sources(node, nodes)
            ],
            hint=rules.describe_constraints(node),
        )

    @staticmethod
    def _to_response(row: dict) -> NodeResponse:
        metadata = NodeMetadata.parse(row.get("metadata"))
        return NodeResponse(
            id=row["id"],
            profile_id=row["profile_id"],
            type=row["type"],
            label=row["label"],
            institution=row.get("institution"),
            amount=row["amount"],
            balance=row["balance"],
            apy=row["apy"],
            metadata=json.loads(metadata.dumps()),
            sort_order=row["sort_order"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
