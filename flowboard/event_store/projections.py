import json

import aiosqlite
import structlog

from flowboard.event_store.models import Event, EventType

logger = structlog.get_logger()

_BOOL_COLUMNS = frozenset({"is_owner", "is_recurring", "allow_split"})

# Columns an *_updated event may touch, per projection table.
_UPDATABLE_COLUMNS = {
    "profiles_projection": ("name", "avatar_color"),
    "nodes_projection": (
        "label", "institution", "amount", "balance", "apy", "metadata", "sort_order",
    ),
    "flows_projection": ("amount", "label", "is_recurring", "allow_split"),
    "budgets_projection": ("name", "budgeted", "period", "color"),
    "goals_projection": ("name", "target", "current", "deadline", "priority", "color"),
}


class ProjectionEngine:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def project(self, event: Event) -> None:
        handler = self._get_handler(event.event_type)
        if handler is not None:
            data = json.loads(event.event_data)
            await handler(event, data)
            logger.debug(
                "projection_applied",
                event_type=event.event_type,
                aggregate_id=event.aggregate_id,
            )

    def _get_handler(self, event_type: str):
        handlers = {
            EventType.profile_created: self._handle_profile_created,
            EventType.profile_updated: self._updater("profiles_projection"),
            EventType.profile_deleted: self._deleter("profiles_projection"),
            EventType.node_created: self._handle_node_created,
            EventType.node_updated: self._updater("nodes_projection"),
            EventType.node_deleted: self._deleter("nodes_projection"),
            EventType.flow_created: self._handle_flow_created,
            EventType.flow_updated: self._updater("flows_projection"),
            EventType.flow_deleted: self._deleter("flows_projection"),
            EventType.budget_created: self._handle_budget_created,
            EventType.budget_updated: self._updater("budgets_projection"),
            EventType.budget_deleted: self._deleter("budgets_projection"),
            EventType.budget_transaction_created: self._handle_budget_transaction_created,
            EventType.budget_transaction_deleted: self._deleter("budget_transactions_projection"),
            EventType.goal_created: self._handle_goal_created,
            EventType.goal_updated: self._updater("goals_projection"),
            EventType.goal_deleted: self._deleter("goals_projection"),
            EventType.goal_transaction_created: self._handle_goal_transaction_created,
            EventType.goal_transaction_deleted: self._handle_goal_transaction_deleted,
        }
        return handlers.get(event_type)

    def _updater(self, table: str):
        async def handle(event: Event, data: dict) -> None:
            set_clauses: list[str] = []
            params: list = []
            for column in _UPDATABLE_COLUMNS[table]:
                if column in data:
                    set_clauses.append(f"{column} = ?")
                    value = data[column]
                    params.append(int(bool(value)) if column in _BOOL_COLUMNS else value)

            set_clauses.append("updated_at = ?")
            params.append(event.created_at)
            params.append(event.aggregate_id)

            await self._db.execute(
                f"UPDATE {table} SET {', '.join(set_clauses)} WHERE id = ?",
                params,
            )

        return handle

    def _deleter(self, table: str):
        # Dependent rows go with it through ON DELETE CASCADE.
        async def handle(event: Event, data: dict) -> None:
            await self._db.execute(f"DELETE FROM {table} WHERE id = ?", (event.aggregate_id,))

        return handle

    async def _handle_profile_created(self, event: Event, data: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO profiles_projection (
                id, user_id, name, avatar_color, is_owner, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.aggregate_id,
                data["user_id"],
                data["name"],
                data["avatar_color"],
                int(bool(data.get("is_owner", False))),
                event.created_at,
                event.created_at,
            ),
        )

    async def _handle_node_created(self, event: Event, data: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO nodes_projection (
                id, profile_id, type, label, institution, amount, balance, apy,
                metadata, sort_order, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.aggregate_id,
                data["profile_id"],
                data["type"],
                data["label"],
                data.get("institution"),
                data.get("amount", 0.0),
                data.get("balance", 0.0),
                data.get("apy", 0.0),
                data.get("metadata", "{}"),
                data.get("sort_order", 0),
                event.created_at,
                event.created_at,
            ),
        )

    async def _handle_flow_created(self, event: Event, data: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO flows_projection (
                id, profile_id, from_node_id, to_node_id, amount, label,
                is_recurring, allow_split, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.aggregate_id,
                data["profile_id"],
                data["from_node_id"],
                data["to_node_id"],
                data["amount"],
                data.get("label"),
                int(bool(data.get("is_recurring", True))),
                int(bool(data.get("allow_split", False))),
                event.created_at,
                event.created_at,
            ),
        )

    async def _handle_budget_created(self, event: Event, data: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO budgets_projection (
                id, profile_id, node_id, name, budgeted, period, color, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.aggregate_id,
                data["profile_id"],
                data.get("node_id"),
                data["name"],
                data["budgeted"],
                data["period"],
                data["color"],
                event.created_at,
                event.created_at,
            ),
        )

    async def _handle_budget_transaction_created(self, event: Event, data: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO budget_transactions_projection (
                id, budget_id, amount, note, date, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                event.aggregate_id,
                data["budget_id"],
                data["amount"],
                data.get("note"),
                data["date"],
                event.created_at,
            ),
        )

    async def _handle_goal_created(self, event: Event, data: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO goals_projection (
                id, profile_id, name, target, current, deadline, priority, color,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.aggregate_id,
                data["profile_id"],
                data["name"],
                data["target"],
                data.get("current", 0.0),
                data.get("deadline"),
                data.get("priority", 0),
                data["color"],
                event.created_at,
                event.created_at,
            ),
        )

    async def _handle_goal_transaction_created(self, event: Event, data: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO goal_transactions_projection (
                id, goal_id, amount, note, date, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                event.aggregate_id,
                data["goal_id"],
                data["amount"],
                data.get("note"),
                data["date"],
                event.created_at,
            ),
        )
        await self._adjust_goal_current(data["goal_id"], data["amount"], event.created_at)

    async def _handle_goal_transaction_deleted(self, event: Event, data: dict) -> None:
        cursor = await self._db.execute(
            "SELECT goal_id, amount FROM goal_transactions_projection WHERE id = ?",
            (event.aggregate_id,),
        )
        old_row = await cursor.fetchone()
        if old_row is None:
            return

        await self._db.execute(
            "DELETE FROM goal_transactions_projection WHERE id = ?",
            (event.aggregate_id,),
        )
        await self._adjust_goal_current(old_row["goal_id"], -old_row["amount"], event.created_at)

    async def _adjust_goal_current(self, goal_id: str, delta: float, updated_at: str) -> None:
        await self._db.execute(
            "UPDATE goals_projection SET current = current + ?, updated_at = ? WHERE id = ?",
            (delta, updated_at, goal_id),
        )
