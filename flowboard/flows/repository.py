import aiosqlite


class FlowRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, profile_id: str, flow_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM flows_projection WHERE id = ? AND profile_id = ?",
            (flow_id, profile_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def list_for_profile(self, profile_id: str) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM flows_projection WHERE profile_id = ? ORDER BY created_at",
            (profile_id,),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]
