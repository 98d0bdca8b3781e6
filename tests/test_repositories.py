from datetime import datetime, timedelta

import pytest

from meetup.models.base import utcnow
from meetup.models.notification import NotificationType
from meetup.repositories.activity_repository import ActivityRepository
from meetup.repositories.follow_repository import FollowRepository
from meetup.repositories.interest_repository import DEFAULT_INTEREST_CATEGORIES, InterestRepository
from meetup.repositories.message_repository import MessageRepository
from meetup.repositories.notification_repository import NotificationRepository
from meetup.repositories.user_repository import UserRepository
from meetup.schemas.activity import ActivityUpdate
from meetup.schemas.user import UserUpdate


@pytest.mark.asyncio
async def test_creator_joins_own_activity(session, make_user, make_activity):
    alice = await make_user("alice")
    activity = await make_activity(alice)

    activity_repo = ActivityRepository(session)
    assert await activity_repo.get_participant_ids(activity.id) == [alice.id]
    assert await activity_repo.is_participant(activity.id, alice.id)


@pytest.mark.asyncio
async def test_add_participant_is_idempotent(session, make_user, make_activity):
    alice = await make_user("alice")
    bob = await make_user("bob")
    activity = await make_activity(alice)
    activity_repo = ActivityRepository(session)

    first, created = await activity_repo.add_participant(activity.id, bob.id)
    second, created_again = await activity_repo.add_participant(activity.id, bob.id)

    assert created is True
    assert created_again is False
    assert first.id == second.id
    assert await activity_repo.count_participants(activity.id) == 2


@pytest.mark.asyncio
async def test_participants_listed_in_join_order(session, make_user, make_activity):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    activity = await make_activity(alice, participants=[carol, bob])

    participants = await ActivityRepository(session).get_participants(activity.id)

    assert [user.username for user in participants] == ["alice", "carol", "bob"]


@pytest.mark.asyncio
async def test_remove_participant(session, make_user, make_activity):
    alice = await make_user("alice")
    bob = await make_user("bob")
    activity = await make_activity(alice, participants=[bob])
    activity_repo = ActivityRepository(session)

    assert await activity_repo.remove_participant(activity.id, bob.id) is True
    assert await activity_repo.remove_participant(activity.id, bob.id) is False
    assert not await activity_repo.is_participant(activity.id, bob.id)


@pytest.mark.asyncio
async def test_delete_activity_removes_chat_and_participants(session, make_user, make_activity):
    alice = await make_user("alice")
    bob = await make_user("bob")
    activity = await make_activity(alice, participants=[bob])
    message_repo = MessageRepository(session)
    await message_repo.create(activity.id, alice.id, "see you there")

    activity_repo = ActivityRepository(session)
    assert await activity_repo.delete(activity.id) is True

    assert await activity_repo.get_by_id(activity.id) is None
    assert await activity_repo.get_participant_ids(activity.id) == []
    assert await message_repo.get_activity_messages(activity.id) == []
    assert await activity_repo.delete(activity.id) is False


@pytest.mark.asyncio
async def test_update_activity_only_touches_given_fields(session, make_user, make_activity):
    alice = await make_user("alice")
    activity = await make_activity(alice, max_participants=4)

    updated = await ActivityRepository(session).update(activity.id, ActivityUpdate(title="Morning run"))

    assert updated.title == "Morning run"
    assert updated.max_participants == 4
    assert updated.location == activity.location


@pytest.mark.asyncio
async def test_upcoming_skips_past_activities(session, make_user, make_activity):
    alice = await make_user("alice")
    await make_activity(alice, title="Last week", date_time=utcnow() - timedelta(days=7))
    later = await make_activity(alice, title="Next month", date_time=utcnow() + timedelta(days=30))
    sooner = await make_activity(alice, title="Tomorrow", date_time=utcnow() + timedelta(days=1))

    upcoming = await ActivityRepository(session).get_upcoming()

    assert [activity.id for activity in upcoming] == [sooner.id, later.id]


@pytest.mark.asyncio
async def test_nearby_matches_location_substring(session, make_user, make_activity):
    alice = await make_user("alice")
    berlin = await make_activity(alice, location="Berlin, Mitte")
    await make_activity(alice, location="Hamburg")

    nearby = await ActivityRepository(session).get_nearby("berlin")

    assert [activity.id for activity in nearby] == [berlin.id]


@pytest.mark.asyncio
async def test_messages_ordered_by_sent_at_then_id(session, make_user, make_activity):
    alice = await make_user("alice")
    activity = await make_activity(alice)
    message_repo = MessageRepository(session)
    noon = datetime(2026, 6, 1, 12, 0)

    late = await message_repo.create(activity.id, alice.id, "late", sent_at=noon + timedelta(minutes=5))
    first_tie = await message_repo.create(activity.id, alice.id, "tie one", sent_at=noon)
    second_tie = await message_repo.create(activity.id, alice.id, "tie two", sent_at=noon)

    history = await message_repo.get_activity_messages(activity.id)

    assert [message.id for message in history] == [first_tie.id, second_tie.id, late.id]


@pytest.mark.asyncio
async def test_message_ids_are_never_reused(session, make_user, make_activity):
    alice = await make_user("alice")
    activity = await make_activity(alice)
    message_repo = MessageRepository(session)

    first = await message_repo.create(activity.id, alice.id, "one")
    await ActivityRepository(session).delete(activity.id)
    other = await make_activity(alice)
    second = await message_repo.create(other.id, alice.id, "two")

    assert second.id > first.id


@pytest.mark.asyncio
async def test_user_lookup_is_case_insensitive(session, make_user):
    alice = await make_user("alice")
    user_repo = UserRepository(session)

    assert (await user_repo.get_by_username("ALICE")).id == alice.id
    assert (await user_repo.get_by_email("Alice@Example.com")).id == alice.id


@pytest.mark.asyncio
async def test_password_is_hashed(session, make_user):
    alice = await make_user("alice")

    assert alice.hashed_password != "password123"
    assert alice.hashed_password.startswith("$pbkdf2-sha256$")


@pytest.mark.asyncio
async def test_update_user_keeps_unset_fields(session, make_user):
    alice = await make_user("alice", location="Berlin", interests=["Hiking"])

    updated = await UserRepository(session).update(alice.id, UserUpdate(bio="Trail runner"))

    assert updated.bio == "Trail runner"
    assert updated.location == "Berlin"
    assert updated.interests == ["Hiking"]


@pytest.mark.asyncio
async def test_follow_is_idempotent(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    follow_repo = FollowRepository(session)

    _, created = await follow_repo.create(bob.id, alice.id)
    _, created_again = await follow_repo.create(bob.id, alice.id)

    assert (created, created_again) == (True, False)
    assert [user.id for user in await follow_repo.get_followers(alice.id)] == [bob.id]
    assert [user.id for user in await follow_repo.get_following(bob.id)] == [alice.id]

    assert await follow_repo.delete(bob.id, alice.id) is True
    assert await follow_repo.delete(bob.id, alice.id) is False
    assert await follow_repo.get_followers(alice.id) == []


@pytest.mark.asyncio
async def test_notifications_newest_first_and_mark_read(session, make_user):
    alice = await make_user("alice")
    notification_repo = NotificationRepository(session)
    older = await notification_repo.create(alice.id, NotificationType.NEW_FOLLOWER, "Bob started following you")
    newer = await notification_repo.create(alice.id, NotificationType.ACTIVITY_JOIN, "Bob joined", related_id=3)

    notifications = await notification_repo.get_user_notifications(alice.id)
    assert [notification.id for notification in notifications] == [newer.id, older.id]
    assert newer.type == "activity-join"
    assert not newer.is_read

    marked = await notification_repo.mark_read(newer.id)
    assert marked.is_read
    assert await notification_repo.mark_read(9999) is None


@pytest.mark.asyncio
async def test_seed_interest_categories_once(session):
    interest_repo = InterestRepository(session)

    assert await interest_repo.seed_defaults() == len(DEFAULT_INTEREST_CATEGORIES)
    assert await interest_repo.seed_defaults() == 0

    categories = await interest_repo.get_all()
    assert [category.name for category in categories] == [name for name, _ in DEFAULT_INTEREST_CATEGORIES]
    assert categories[0].icon == "mountain"
