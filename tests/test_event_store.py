import json

import pytest

from flowboard.event_store.models import AggregateType, EventType
from flowboard.event_store.service import EventStoreService
from flowboard.exceptions import ConflictError

PROFILE_ID = "p-1"


async def _seed_profile(store: EventStoreService) -> None:
    await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.profile,
        aggregate_id=PROFILE_ID,
        event_type=EventType.profile_created,
        event_data={
            "user_id": "u-1",
            "name": "Household",
            "avatar_color": "#10b981",
            "is_owner": True,
        },
    )


async def _add_node(store: EventStoreService, node_id: str, node_type: str, **fields) -> None:
    await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.node,
        aggregate_id=node_id,
        event_type=EventType.node_created,
        event_data={"profile_id": PROFILE_ID, "type": node_type, "label": node_id, **fields},
    )


async def _fetch(db, sql: str, *params):
    cursor = await db.execute(sql, params)
    return await cursor.fetchall()


async def test_append_projects_and_versions(db):
    store = EventStoreService(db)
    await _seed_profile(store)

    event = await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.profile,
        aggregate_id=PROFILE_ID,
        event_type=EventType.profile_updated,
        event_data={"name": "Renamed"},
    )

    assert event.version == 2
    rows = await _fetch(
        db, "SELECT name, is_owner FROM profiles_projection WHERE id = ?", PROFILE_ID
    )
    assert rows[0]["name"] == "Renamed"
    assert rows[0]["is_owner"] == 1

    history = await store.get_history(AggregateType.profile, PROFILE_ID)
    assert [e.event_type for e in history] == ["profile_created", "profile_updated"]


async def test_node_update_only_touches_known_columns(db):
    store = EventStoreService(db)
    await _seed_profile(store)
    await _add_node(store, "rent", "expense", amount=1200)

    await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.node,
        aggregate_id="rent",
        event_type=EventType.node_updated,
        event_data={"amount": 1300, "type": "income"},
    )

    rows = await _fetch(db, "SELECT type, amount FROM nodes_projection WHERE id = 'rent'")
    assert rows[0]["type"] == "expense"
    assert rows[0]["amount"] == 1300


async def test_deleting_a_node_cascades_to_flows(db):
    store = EventStoreService(db)
    await _seed_profile(store)
    await _add_node(store, "checking", "account")
    await _add_node(store, "rent", "expense", amount=1200)
    await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.flow,
        aggregate_id="f-1",
        event_type=EventType.flow_created,
        event_data={
            "profile_id": PROFILE_ID,
            "from_node_id": "checking",
            "to_node_id": "rent",
            "amount": 1200,
        },
    )

    await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.node,
        aggregate_id="rent",
        event_type=EventType.node_deleted,
        event_data={"deleted": True},
    )

    assert await _fetch(db, "SELECT id FROM flows_projection") == []


async def test_goal_contributions_adjust_current(db):
    store = EventStoreService(db)
    await _seed_profile(store)
    await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.goal,
        aggregate_id="g-1",
        event_type=EventType.goal_created,
        event_data={"profile_id": PROFILE_ID, "name": "Trip", "target": 2000, "color": "#a855f7"},
    )

    for txn_id, amount in (("t-1", 150.0), ("t-2", 50.0)):
        await store.append_event(
            profile_id=PROFILE_ID,
            aggregate_type=AggregateType.goal_transaction,
            aggregate_id=txn_id,
            event_type=EventType.goal_transaction_created,
            event_data={"goal_id": "g-1", "amount": amount, "date": "2026-01-05"},
        )
    await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.goal_transaction,
        aggregate_id="t-1",
        event_type=EventType.goal_transaction_deleted,
        event_data={"goal_id": "g-1", "deleted": True},
    )

    rows = await _fetch(db, "SELECT current FROM goals_projection WHERE id = 'g-1'")
    assert rows[0]["current"] == pytest.approx(50.0)


async def test_failed_projection_rolls_back_the_event(db):
    store = EventStoreService(db)

    with pytest.raises(KeyError):
        await store.append_event(
            profile_id=PROFILE_ID,
            aggregate_type=AggregateType.profile,
            aggregate_id=PROFILE_ID,
            event_type=EventType.profile_created,
            event_data={"name": "missing user id"},
        )

    assert await _fetch(db, "SELECT event_id FROM events") == []


async def test_duplicate_idempotency_key_conflicts(db):
    store = EventStoreService(db)
    await _seed_profile(store)
    await _add_node(store, "checking", "account")
    await _add_node(store, "sav", "savings")
    data = {
        "profile_id": PROFILE_ID,
        "from_node_id": "checking",
        "to_node_id": "sav",
        "amount": 100,
    }

    event = await store.append_event(
        profile_id=PROFILE_ID,
        aggregate_type=AggregateType.flow,
        aggregate_id="f-1",
        event_type=EventType.flow_created,
        event_data=data,
        idempotency_key="key-1",
    )
    assert json.loads(event.metadata)["idempotency_key"] == "key-1"

    with pytest.raises(ConflictError):
        await store.append_event(
            profile_id=PROFILE_ID,
            aggregate_type=AggregateType.flow,
            aggregate_id="f-2",
            event_type=EventType.flow_created,
            event_data=data,
            idempotency_key="key-1",
        )


async def test_activity_is_newest_first_and_profile_scoped(db):
    store = EventStoreService(db)
    await _seed_profile(store)
    await _add_node(store, "checking", "account")
    await _add_node(store, "rent", "expense", amount=900)

    activity = await store.get_activity(PROFILE_ID, limit=2)

    assert [e.aggregate_id for e in activity] == ["rent", "checking"]
    assert await store.get_activity("someone-else") == []
