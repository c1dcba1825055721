import aiosqlite
import structlog

from flowboard.config import settings

logger = structlog.get_logger()

_db: aiosqlite.Connection | None = None

DDL_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS events (
        event_id TEXT PRIMARY KEY,
        profile_id TEXT,
        aggregate_type TEXT NOT NULL,
        aggregate_id TEXT NOT NULL,
        event_type TEXT NOT NULL,
        event_data TEXT NOT NULL,
        metadata TEXT,
        version INTEGER NOT NULL,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        UNIQUE(aggregate_id, version)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS refresh_tokens (
        token_hash TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        expires_at TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profiles_projection (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        avatar_color TEXT NOT NULL DEFAULT '#10b981',
        is_owner INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS nodes_projection (
        id TEXT PRIMARY KEY,
        profile_id TEXT NOT NULL REFERENCES profiles_projection(id) ON DELETE CASCADE,
        type TEXT NOT NULL CHECK(
            type IN ('income', 'account', 'savings', 'investment', 'expense', 'budget')
        ),
        label TEXT NOT NULL,
        institution TEXT,
        amount REAL NOT NULL DEFAULT 0,
        balance REAL NOT NULL DEFAULT 0,
        apy REAL NOT NULL DEFAULT 0,
        metadata TEXT NOT NULL DEFAULT '{}',
        sort_order INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS flows_projection (
        id TEXT PRIMARY KEY,
        profile_id TEXT NOT NULL REFERENCES profiles_projection(id) ON DELETE CASCADE,
        from_node_id TEXT NOT NULL REFERENCES nodes_projection(id) ON DELETE CASCADE,
        to_node_id TEXT NOT NULL REFERENCES nodes_projection(id) ON DELETE CASCADE,
        amount REAL NOT NULL,
        label TEXT,
        is_recurring INTEGER NOT NULL DEFAULT 1,
        allow_split INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS budgets_projection (
        id TEXT PRIMARY KEY,
        profile_id TEXT NOT NULL REFERENCES profiles_projection(id) ON DELETE CASCADE,
        node_id TEXT REFERENCES nodes_projection(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        budgeted REAL NOT NULL,
        period TEXT NOT NULL DEFAULT 'monthly' CHECK(period IN ('weekly', 'monthly', 'yearly')),
        color TEXT NOT NULL DEFAULT '#10b981',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS budget_transactions_projection (
        id TEXT PRIMARY KEY,
        budget_id TEXT NOT NULL REFERENCES budgets_projection(id) ON DELETE CASCADE,
        amount REAL NOT NULL,
        note TEXT,
        date TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS goals_projection (
        id TEXT PRIMARY KEY,
        profile_id TEXT NOT NULL REFERENCES profiles_projection(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        target REAL NOT NULL,
        current REAL NOT NULL DEFAULT 0,
        deadline TEXT,
        priority INTEGER NOT NULL DEFAULT 0,
        color TEXT NOT NULL DEFAULT '#a855f7',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS goal_transactions_projection (
        id TEXT PRIMARY KEY,
        goal_id TEXT NOT NULL REFERENCES goals_projection(id) ON DELETE CASCADE,
        amount REAL NOT NULL,
        note TEXT,
        date TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_profile ON events(profile_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_profiles_user ON profiles_projection(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_nodes_profile ON nodes_projection(profile_id)",
    "CREATE INDEX IF NOT EXISTS idx_flows_profile ON flows_projection(profile_id)",
    "CREATE INDEX IF NOT EXISTS idx_budgets_profile ON budgets_projection(profile_id)",
    "CREATE INDEX IF NOT EXISTS idx_budget_txn_budget ON budget_transactions_projection(budget_id)",
    "CREATE INDEX IF NOT EXISTS idx_goals_profile ON goals_projection(profile_id)",
    "CREATE INDEX IF NOT EXISTS idx_goal_txn_goal ON goal_transactions_projection(goal_id)",
]


async def create_schema(db: aiosqlite.Connection) -> None:
    await db.execute("PRAGMA foreign_keys=ON")
    for ddl in DDL_STATEMENTS:
        await db.execute(ddl)
    await db.commit()


async def init_database() -> None:
    global _db
    _db = await aiosqlite.connect(settings.db_path)
    _db.row_factory = aiosqlite.Row
    await _db.execute("PRAGMA journal_mode=WAL")
    await create_schema(_db)

    logger.info("database_initialized", path=settings.db_path)


async def close_database() -> None:
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("database_closed")


def get_db() -> aiosqlite.Connection:
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db


async def check_health() -> None:
    db = get_db()
    cursor = await db.execute("SELECT 1")
    await cursor.close()
