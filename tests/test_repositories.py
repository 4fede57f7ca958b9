"""Repository tests against in-memory SQLite."""

import pytest

from src.infrastructure.repositories import DistanceQueryRepository, UserRepository


async def _user(session, name: str):
    return await UserRepository(session).create(
        username=name, email=f"{name}@example.com", password_hash="x"
    )


@pytest.mark.asyncio
async def test_create_sets_id_and_timestamp(db_session):
    record = await DistanceQueryRepository(db_session).create(
        source="London", destination="Paris", distance=343.5
    )
    assert record.id is not None
    assert record.created_at is not None
    assert record.user_id is None
    assert record.source_lat is None


@pytest.mark.asyncio
async def test_list_recent_is_newest_first(db_session):
    repo = DistanceQueryRepository(db_session)
    first = await repo.create(source="A city", destination="B city", distance=1.0)
    second = await repo.create(source="C city", destination="D city", distance=2.0)
    third = await repo.create(source="E city", destination="F city", distance=3.0)

    records = await repo.list_recent()
    assert [r.id for r in records] == [third.id, second.id, first.id]


@pytest.mark.asyncio
async def test_list_recent_filters_by_owner(db_session):
    alice = await _user(db_session, "alice")
    bob = await _user(db_session, "bob")
    repo = DistanceQueryRepository(db_session)
    await repo.create(source="A city", destination="B city", distance=1.0, user_id=alice.id)
    await repo.create(source="C city", destination="D city", distance=2.0, user_id=bob.id)
    await repo.create(source="E city", destination="F city", distance=3.0)

    alice_rows = await repo.list_recent(user_id=alice.id)
    assert [r.source for r in alice_rows] == ["A city"]
    assert await repo.count(user_id=bob.id) == 1


@pytest.mark.asyncio
async def test_list_recent_without_owner_returns_only_anonymous_rows(db_session):
    alice = await _user(db_session, "alice")
    repo = DistanceQueryRepository(db_session)
    await repo.create(source="A city", destination="B city", distance=1.0, user_id=alice.id)
    await repo.create(source="E city", destination="F city", distance=3.0)

    anonymous = await repo.list_recent()
    assert [r.source for r in anonymous] == ["E city"]
    assert all(r.user_id is None for r in anonymous)
    assert await repo.count() == 1
    assert await repo.count(user_id=alice.id) == 1


@pytest.mark.asyncio
async def test_list_recent_respects_limit(db_session):
    repo = DistanceQueryRepository(db_session)
    for i in range(5):
        await repo.create(source=f"From {i}", destination=f"To {i}", distance=float(i))
    records = await repo.list_recent(limit=2)
    assert [r.source for r in records] == ["From 4", "From 3"]


@pytest.mark.asyncio
async def test_user_lookups(db_session):
    alice = await _user(db_session, "alice")
    repo = UserRepository(db_session)
    assert (await repo.get_by_email("alice@example.com")).id == alice.id
    assert (await repo.get_by_username("alice")).id == alice.id
    assert (await repo.get_by_id(alice.id)).username == "alice"
    assert await repo.get_by_email("nobody@example.com") is None
