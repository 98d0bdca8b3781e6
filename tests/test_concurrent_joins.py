import asyncio
from datetime import timedelta

import pytest

from meetup.errors import ActivityFull
from meetup.models.base import utcnow
from meetup.repositories.activity_repository import ActivityRepository
from meetup.repositories.follow_repository import FollowRepository
from meetup.repositories.user_repository import UserRepository
from meetup.schemas.activity import ActivityCreate
from meetup.schemas.user import UserCreate


async def seed(database, usernames, **activity_fields):
    async with database.session() as db:
        user_repo = UserRepository(db)
        users = [
            await user_repo.create(
                UserCreate(
                    username=name,
                    email=f"{name}@example.com",
                    password="password123",
                    display_name=name.title(),
                )
            )
            for name in usernames
        ]
        activity = await ActivityRepository(db).create(
            ActivityCreate(
                title="Evening run",
                description="Five kilometres along the river, easy pace.",
                location="Berlin",
                date_time=utcnow() + timedelta(days=1),
                **activity_fields,
            ),
            users[0].id,
        )
    return users, activity


async def join(database, activity_id, user_id, capacity=None):
    async with database.session() as db:
        return await ActivityRepository(db).add_participant(activity_id, user_id, capacity=capacity)


async def participant_count(database, activity_id):
    async with database.session() as db:
        return await ActivityRepository(db).count_participants(activity_id)


@pytest.mark.asyncio
async def test_simultaneous_duplicate_joins_store_one_row(file_database):
    (_, bob), activity = await seed(file_database, ["alice", "bob"])

    results = await asyncio.gather(
        join(file_database, activity.id, bob.id),
        join(file_database, activity.id, bob.id),
    )

    assert sorted(created for _, created in results) == [False, True]
    assert results[0][0].id == results[1][0].id
    assert await participant_count(file_database, activity.id) == 2


@pytest.mark.asyncio
async def test_simultaneous_joins_never_exceed_capacity(file_database):
    (_, bob, carol), activity = await seed(file_database, ["alice", "bob", "carol"], max_participants=2)

    results = await asyncio.gather(
        join(file_database, activity.id, bob.id, capacity=2),
        join(file_database, activity.id, carol.id, capacity=2),
        return_exceptions=True,
    )

    assert sum(isinstance(result, ActivityFull) for result in results) == 1
    assert sum(isinstance(result, tuple) and result[1] for result in results) == 1
    assert await participant_count(file_database, activity.id) == 2


@pytest.mark.asyncio
async def test_join_over_capacity_stores_nothing(file_database):
    (_, bob, carol), activity = await seed(file_database, ["alice", "bob", "carol"], max_participants=2)

    _, created = await join(file_database, activity.id, bob.id, capacity=2)
    with pytest.raises(ActivityFull):
        await join(file_database, activity.id, carol.id, capacity=2)

    assert created is True
    assert await participant_count(file_database, activity.id) == 2
    # a participant rejoining a full activity gets the existing record back
    _, created_again = await join(file_database, activity.id, bob.id, capacity=2)
    assert created_again is False


@pytest.mark.asyncio
async def test_simultaneous_follows_store_one_row(file_database):
    (alice, bob), _ = await seed(file_database, ["alice", "bob"])

    async def follow():
        async with file_database.session() as db:
            return await FollowRepository(db).create(bob.id, alice.id)

    results = await asyncio.gather(follow(), follow())

    assert sorted(created for _, created in results) == [False, True]
    assert results[0][0].id == results[1][0].id
    async with file_database.session() as db:
        assert [user.id for user in await FollowRepository(db).get_followers(alice.id)] == [bob.id]
