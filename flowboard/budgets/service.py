from datetime import UTC, datetime
from uuid import uuid4

import structlog

from flowboard.budgets.repository import BudgetRepository
from flowboard.budgets.schemas import (
    BudgetAlert,
    BudgetCreate,
    BudgetPeriod,
    BudgetResponse,
    BudgetTransactionCreate,
    BudgetTransactionResponse,
    BudgetUpdate,
)
from flowboard.config import settings
from flowboard.event_store.models import AggregateType, EventType
from flowboard.event_store.service import EventStoreService
from flowboard.exceptions import ConflictError, NotFoundError, ValidationError
from flowboard.graph.models import NodeType
from flowboard.nodes.repository import NodeRepository

logger = structlog.get_logger()


class BudgetService:
    def __init__(
        self,
        event_store: EventStoreService,
        repo: BudgetRepository,
        nodes: NodeRepository,
    ) -> None:
        self._event_store = event_store
        self._repo = repo
        self._nodes = nodes

    async def create(self, profile_id: str, data: BudgetCreate) -> BudgetResponse:
        if data.node_id is not None:
            node = await self._nodes.get_by_id(profile_id, data.node_id)
            if node is None:
                raise NotFoundError("Node", data.node_id)
            if node["type"] != NodeType.budget:
                raise ValidationError(f"Node '{data.node_id}' is not a budget node")
            if await self._repo.get_by_node(profile_id, data.node_id):
                raise ConflictError(f"Node '{data.node_id}' already has a budget")

        budget_id = str(uuid4())

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.budget,
            aggregate_id=budget_id,
            event_type=EventType.budget_created,
            event_data={
                "profile_id": profile_id,
                "node_id": data.node_id,
                "name": data.name,
                "budgeted": data.budgeted,
                "period": data.period.value,
                "color": data.color,
            },
        )

        logger.info("budget_created", budget_id=budget_id, profile_id=profile_id)
        return await self.get(profile_id, budget_id)

    async def create_for_node(
        self, profile_id: str, node_id: str, name: str, budgeted: float
    ) -> BudgetResponse:
        return await self.create(
            profile_id,
            BudgetCreate(name=name, budgeted=budgeted, period=BudgetPeriod.monthly, node_id=node_id),
        )

    async def sync_from_node(
        self,
        profile_id: str,
        node_id: str,
        name: str | None = None,
        budgeted: float | None = None,
    ) -> None:
        """Mirror a budget node's label and amount onto its paired budget."""
        budget = await self._repo.get_by_node(profile_id, node_id)
        if budget is None:
            logger.warning("budget_node_without_budget", node_id=node_id)
            return

        updates = {}
        if name is not None:
            updates["name"] = name
        if budgeted is not None:
            updates["budgeted"] = budgeted
        if not updates:
            return

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.budget,
            aggregate_id=budget["id"],
            event_type=EventType.budget_updated,
            event_data=updates,
        )

        logger.info("budget_synced_from_node", budget_id=budget["id"], node_id=node_id)

    async def delete_for_node(self, profile_id: str, node_id: str) -> None:
        budget = await self._repo.get_by_node(profile_id, node_id)
        if budget is not None:
            await self._delete(profile_id, budget["id"])

    async def get(self, profile_id: str, budget_id: str) -> BudgetResponse:
        budget = await self._require(profile_id, budget_id)
        spent = await self._repo.get_spent(budget_id)
        return self._build_response(budget, spent)

    async def list_budgets(self, profile_id: str) -> list[BudgetResponse]:
        budgets = await self._repo.list_for_profile(profile_id)
        all_spent = await self._repo.get_all_spent(profile_id)
        return [self._build_response(b, all_spent.get(b["id"], 0.0)) for b in budgets]

    async def update(self, profile_id: str, budget_id: str, data: BudgetUpdate) -> BudgetResponse:
        budget = await self._require(profile_id, budget_id)

        updates = data.model_dump(exclude_none=True, mode="json")
        if not updates:
            raise ValidationError("No update fields provided")

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.budget,
            aggregate_id=budget_id,
            event_type=EventType.budget_updated,
            event_data=updates,
        )

        logger.info("budget_updated", budget_id=budget_id, fields=sorted(updates))

        # Keep the paired node's label and amount in step.
        node_updates = {}
        if "name" in updates:
            node_updates["label"] = updates["name"]
        if "budgeted" in updates:
            node_updates["amount"] = updates["budgeted"]
        if budget["node_id"] and node_updates:
            await self._event_store.append_event(
                profile_id=profile_id,
                aggregate_type=AggregateType.node,
                aggregate_id=budget["node_id"],
                event_type=EventType.node_updated,
                event_data=node_updates,
            )

        return await self.get(profile_id, budget_id)

    async def delete(self, profile_id: str, budget_id: str) -> None:
        budget = await self._require(profile_id, budget_id)
        if budget["node_id"]:
            raise ConflictError(
                f"Budget '{budget_id}' belongs to a budget node; delete the node instead"
            )
        await self._delete(profile_id, budget_id)

    async def _delete(self, profile_id: str, budget_id: str) -> None:
        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.budget,
            aggregate_id=budget_id,
            event_type=EventType.budget_deleted,
            event_data={"deleted": True},
        )

        logger.info("budget_deleted", budget_id=budget_id)

    async def add_transaction(
        self, profile_id: str, budget_id: str, data: BudgetTransactionCreate
    ) -> BudgetTransactionResponse:
        await self._require(profile_id, budget_id)

        transaction_id = str(uuid4())
        date = data.date or datetime.now(UTC).strftime("%Y-%m-%d")

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.budget_transaction,
            aggregate_id=transaction_id,
            event_type=EventType.budget_transaction_created,
            event_data={
                "budget_id": budget_id,
                "amount": data.amount,
                "note": data.note,
                "date": date,
            },
        )

        logger.info(
            "budget_transaction_added",
            budget_id=budget_id,
            transaction_id=transaction_id,
            amount=data.amount,
        )

        row = await self._repo.get_transaction(budget_id, transaction_id)
        if row is None:
            raise NotFoundError("Budget transaction", transaction_id)
        return BudgetTransactionResponse(**row)

    async def list_transactions(
        self, profile_id: str, budget_id: str
    ) -> list[BudgetTransactionResponse]:
        await self._require(profile_id, budget_id)
        rows = await self._repo.list_transactions(budget_id)
        return [BudgetTransactionResponse(**row) for row in rows]

    async def delete_transaction(
        self, profile_id: str, budget_id: str, transaction_id: str
    ) -> None:
        await self._require(profile_id, budget_id)
        if await self._repo.get_transaction(budget_id, transaction_id) is None:
            raise NotFoundError("Budget transaction", transaction_id)

        await self._event_store.append_event(
            profile_id=profile_id,
            aggregate_type=AggregateType.budget_transaction,
            aggregate_id=transaction_id,
            event_type=EventType.budget_transaction_deleted,
            event_data={"budget_id": budget_id, "deleted": True},
        )

        logger.info("budget_transaction_deleted", transaction_id=transaction_id)

    async def get_alerts(self, profile_id: str) -> list[BudgetAlert]:
        alerts: list[BudgetAlert] = []
        for budget in await self.list_budgets(profile_id):
            if budget.alert_level == "ok":
                continue
            alerts.append(
                BudgetAlert(
                    budget_id=budget.id,
                    name=budget.name,
                    budgeted=budget.budgeted,
                    spent=budget.spent,
                    utilization_pct=budget.utilization_pct,
                    alert_level=budget.alert_level,
                )
            )
        return alerts

    async def _require(self, profile_id: str, budget_id: str) -> dict:
        budget = await self._repo.get_by_id(profile_id, budget_id)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        return budget

    def _build_response(self, budget: dict, spent: float) -> BudgetResponse:
        budgeted = budget["budgeted"]
        utilization = spent / budgeted if budgeted > 0 else 0.0

        return BudgetResponse(
            id=budget["id"],
            profile_id=budget["profile_id"],
            node_id=budget.get("node_id"),
            name=budget["name"],
            budgeted=budgeted,
            period=budget["period"],
            color=budget["color"],
            spent=spent,
            remaining=round(budgeted - spent, 2),
            utilization_pct=round(utilization * 100, 2),
            alert_level=self._calculate_alert_level(utilization),
            created_at=budget["created_at"],
            updated_at=budget["updated_at"],
        )

    @staticmethod
    def _calculate_alert_level(utilization: float) -> str:
        if utilization > 1.2:
            return "critical"
        if utilization > 1.0:
            return "exceeded"
        if utilization >= settings.budget_alert_threshold:
            return "warning"
        return "ok"
