import aiosqlite


class NodeRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, profile_id: str, node_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM nodes_projection WHERE id = ? AND profile_id = ?",
            (node_id, profile_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def list_for_profile(self, profile_id: str) -> list[dict]:
        cursor = await self._db.execute(
            """
            SELECT * FROM nodes_projection
            WHERE profile_id = ?
            ORDER BY sort_order, created_at
            """,
            (profile_id,),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def list_incident_flow_ids(self, node_id: str) -> list[str]:
        cursor = await self._db.execute(
            """
            SELECT id FROM flows_projection
            WHERE from_node_id = ? OR to_node_id = ?
            ORDER BY created_at
            """,
            (node_id, node_id),
        )
        rows = await cursor.fetchall()
        return [row["id"] for row in rows]
