import aiosqlite
import structlog

from flowboard.event_store.models import Event

logger = structlog.get_logger()

_EVENT_COLUMNS = """
    event_id, profile_id, aggregate_type, aggregate_id, event_type,
    event_data, metadata, version, created_at
"""


def _to_event(row: aiosqlite.Row) -> Event:
    return Event(
        event_id=row["event_id"],
        profile_id=row["profile_id"],
        aggregate_type=row["aggregate_type"],
        aggregate_id=row["aggregate_id"],
        event_type=row["event_type"],
        event_data=row["event_data"],
        metadata=row["metadata"],
        version=row["version"],
        created_at=row["created_at"],
    )


class EventRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def append(self, event: Event) -> None:
        await self._db.execute(
            f"INSERT INTO events ({_EVENT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                event.event_id,
                event.profile_id,
                event.aggregate_type,
                event.aggregate_id,
                event.event_type,
                event.event_data,
                event.metadata,
                event.version,
                event.created_at,
            ),
        )
        logger.debug(
            "event_appended",
            event_id=event.event_id,
            aggregate_type=event.aggregate_type,
            aggregate_id=event.aggregate_id,
            version=event.version,
        )

    async def get_by_aggregate(self, aggregate_type: str, aggregate_id: str) -> list[Event]:
        cursor = await self._db.execute(
            f"""
            SELECT {_EVENT_COLUMNS}
            FROM events
            WHERE aggregate_type = ? AND aggregate_id = ?
            ORDER BY version ASC
            """,
            (aggregate_type, aggregate_id),
        )
        return [_to_event(row) for row in await cursor.fetchall()]

    async def list_for_profile(
        self,
        profile_id: str,
        aggregate_type: str | None = None,
        limit: int = 20,
    ) -> list[Event]:
        conditions = ["profile_id = ?"]
        params: list = [profile_id]
        if aggregate_type is not None:
            conditions.append("aggregate_type = ?")
            params.append(aggregate_type)
        params.append(limit)

        cursor = await self._db.execute(
            f"""
            SELECT {_EVENT_COLUMNS}
            FROM events
            WHERE {" AND ".join(conditions)}
            ORDER BY created_at DESC, version DESC
            LIMIT ?
            """,
            params,
        )
        return [_to_event(row) for row in await cursor.fetchall()]

    async def get_latest_version(self, aggregate_id: str) -> int:
        cursor = await self._db.execute(
            "SELECT COALESCE(MAX(version), 0) AS latest_version FROM events WHERE aggregate_id = ?",
            (aggregate_id,),
        )
        row = await cursor.fetchone()
        return row["latest_version"] if row else 0

    async def find_by_idempotency_key(self, idempotency_key: str) -> Event | None:
        cursor = await self._db.execute(
            f"""
            SELECT {_EVENT_COLUMNS}
            FROM events
            WHERE metadata IS NOT NULL
              AND json_extract(metadata, '$.idempotency_key') = ?
            LIMIT 1
            """,
            (idempotency_key,),
        )
        row = await cursor.fetchone()
        return _to_event(row) if row else None
