from datetime import UTC, datetime

import aiosqlite


class BudgetRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, profile_id: str, budget_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM budgets_projection WHERE id = ? AND profile_id = ?",
            (budget_id, profile_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def get_by_node(self, profile_id: str, node_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM budgets_projection WHERE node_id = ? AND profile_id = ?",
            (node_id, profile_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def list_for_profile(self, profile_id: str) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM budgets_projection WHERE profile_id = ? ORDER BY name",
            (profile_id,),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def get_spent(self, budget_id: str) -> float:
        year_month = datetime.now(UTC).strftime("%Y-%m")
        cursor = await self._db.execute(
            """
            SELECT COALESCE(SUM(amount), 0) AS spent
            FROM budget_transactions_projection
            WHERE budget_id = ? AND substr(date, 1, 7) = ?
            """,
            (budget_id, year_month),
        )
        row = await cursor.fetchone()
        return float(row["spent"]) if row else 0.0

    async def get_all_spent(self, profile_id: str) -> dict[str, float]:
        year_month = datetime.now(UTC).strftime("%Y-%m")
        cursor = await self._db.execute(
            """
            SELECT t.budget_id, COALESCE(SUM(t.amount), 0) AS spent
            FROM budget_transactions_projection t
            JOIN budgets_projection b ON b.id = t.budget_id
            WHERE b.profile_id = ? AND substr(t.date, 1, 7) = ?
            GROUP BY t.budget_id
            """,
            (profile_id, year_month),
        )
        rows = await cursor.fetchall()
        return {row["budget_id"]: float(row["spent"]) for row in rows}

    async def get_transaction(self, budget_id: str, transaction_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM budget_transactions_projection WHERE id = ? AND budget_id = ?",
            (transaction_id, budget_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def list_transactions(self, budget_id: str, limit: int = 100) -> list[dict]:
        cursor = await self._db.execute(
            """
            SELECT * FROM budget_transactions_projection
            WHERE budget_id = ?
            ORDER BY date DESC, created_at DESC
            LIMIT ?
            """,
            (budget_id, limit),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]
