import aiosqlite


class ProfileRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, profile_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM profiles_projection WHERE id = ?",
            (profile_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def list_for_user(self, user_id: str) -> list[dict]:
        cursor = await self._db.execute(
            """
            SELECT * FROM profiles_projection
            WHERE user_id = ?
            ORDER BY is_owner DESC, name
            """,
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def is_owned_by(self, profile_id: str, user_id: str) -> bool:
        cursor = await self._db.execute(
            "SELECT COUNT(*) AS cnt FROM profiles_projection WHERE id = ? AND user_id = ?",
            (profile_id, user_id),
        )
        row = await cursor.fetchone()
        return row["cnt"] > 0 if row else False
