import aiosqlite


class GoalRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, profile_id: str, goal_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM goals_projection WHERE id = ? AND profile_id = ?",
            (goal_id, profile_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def list_for_profile(self, profile_id: str) -> list[dict]:
        cursor = await self._db.execute(
            """
            SELECT * FROM goals_projection
            WHERE profile_id = ?
            ORDER BY priority, created_at
            """,
            (profile_id,),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def get_transaction(self, goal_id: str, transaction_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM goal_transactions_projection WHERE id = ? AND goal_id = ?",
            (transaction_id, goal_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def list_transactions(self, goal_id: str, limit: int = 100) -> list[dict]:
        cursor = await self._db.execute(
            """
            SELECT * FROM goal_transactions_projection
            WHERE goal_id = ?
            ORDER BY date DESC, created_at DESC
            LIMIT ?
            """,
            (goal_id, limit),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]
