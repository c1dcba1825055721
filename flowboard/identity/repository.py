import aiosqlite


class UserRepository:
    """Users and refresh tokens. Credentials are kept out of the event log."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_email(self, email: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM users WHERE email = ?",
            (email,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def get_by_id(self, user_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM users WHERE id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def create(self, user_id: str, email: str, password_hash: str, now: str) -> None:
        await self._db.execute(
            """
            INSERT INTO users (id, email, password_hash, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user_id, email, password_hash, now, now),
        )
        await self._db.commit()

    async def store_refresh_token(
        self, token_hash: str, user_id: str, expires_at: str, now: str
    ) -> None:
        await self._db.execute(
            """
            INSERT INTO refresh_tokens (token_hash, user_id, expires_at, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (token_hash, user_id, expires_at, now),
        )
        await self._db.commit()

    async def pop_refresh_token(self, token_hash: str) -> dict | None:
        """Remove a refresh token and return its row, so each token is usable once."""
        cursor = await self._db.execute(
            "SELECT * FROM refresh_tokens WHERE token_hash = ?",
            (token_hash,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        await self._db.execute("DELETE FROM refresh_tokens WHERE token_hash = ?", (token_hash,))
        await self._db.commit()
        return dict(row)
