#!/usr/bin/env python3

import asyncio
import sys
from datetime import timedelta

from meetup.config import settings
from meetup.database import Database
from meetup.models.base import utcnow
from meetup.repositories.activity_repository import ActivityRepository
from meetup.repositories.interest_repository import InterestRepository
from meetup.repositories.message_repository import MessageRepository
from meetup.repositories.user_repository import UserRepository
from meetup.schemas.activity import ActivityCreate
from meetup.schemas.user import UserCreate

USERS = [
    {"username": "alice", "display_name": "Alice", "location": "Berlin", "interests": ["Hiking", "Photography"]},
    {"username": "bob", "display_name": "Bob", "location": "Berlin", "interests": ["Hiking", "Cooking"]},
    {"username": "charlie", "display_name": "Charlie", "location": "Hamburg", "interests": ["Music", "Photography"]},
    {"username": "diana", "display_name": "Diana", "location": "Munich", "interests": ["Art", "Travel"]},
    {"username": "eve", "display_name": "Eve", "location": "Berlin", "interests": ["Hiking", "Fitness"]},
]


async def create_test_users(database: Database):
    async with database.session() as db:
        user_repo = UserRepository(db)

        created_users = []
        for user_data in USERS:
            existing_user = await user_repo.get_by_username(user_data["username"])
            if existing_user:
                created_users.append(existing_user)
                print(f"User {user_data['username']} exists (ID: {existing_user.id})")
                continue

            user = await user_repo.create(
                UserCreate(
                    email=f"{user_data['username']}@example.com",
                    password="password123",
                    **user_data,
                )
            )
            created_users.append(user)
            print(f"Created user: {user.username} (ID: {user.id})")

        return created_users


async def create_test_activities(database: Database, users):
    async with database.session() as db:
        activity_repo = ActivityRepository(db)

        hike = await activity_repo.create(
            ActivityCreate(
                title="Sunday hike at Grunewald",
                description="Easy 12 km loop through the forest, bring water and snacks.",
                location="Berlin, Grunewald",
                date_time=utcnow() + timedelta(days=3),
                max_participants=8,
                categories=["Hiking"],
            ),
            users[0].id,
        )
        print(f"Created activity '{hike.title}' (ID: {hike.id})")

        photo_walk = await activity_repo.create(
            ActivityCreate(
                title="Harbour photo walk",
                description="Golden hour photography around the Hamburg harbour.",
                location="Hamburg",
                date_time=utcnow() + timedelta(days=7),
                categories=["Photography"],
            ),
            users[2].id,
        )
        print(f"Created activity '{photo_walk.title}' (ID: {photo_walk.id})")

        for user in (users[1], users[4]):
            await activity_repo.add_participant(hike.id, user.id)
        await activity_repo.add_participant(photo_walk.id, users[0].id)

        return [hike, photo_walk]


async def create_test_messages(database: Database, users, activities):
    messages_data = [
        (activities[0].id, users[0].id, "Hey everyone! Meeting point is the S-Bahn station."),
        (activities[0].id, users[1].id, "Sounds good, I'll bring sandwiches."),
        (activities[0].id, users[4].id, "Can't wait!"),
        (activities[1].id, users[2].id, "Don't forget a tripod if you have one."),
        (activities[1].id, users[0].id, "Will do, see you there."),
    ]

    async with database.session() as db:
        message_repo = MessageRepository(db)

        created_messages = []
        for activity_id, sender_id, content in messages_data:
            message = await message_repo.create(activity_id, sender_id, content)
            created_messages.append(message)
            print(f"Created message from user {sender_id} in activity {activity_id}: '{content[:30]}...'")

        return created_messages


async def main():
    print("Creating test data for Meetup Adventures...\n")
    database = Database.from_settings(settings)

    try:
        print("1. Creating database tables...")
        await database.create_tables()
        async with database.session() as db:
            await InterestRepository(db).seed_defaults()
        print("Tables created\n")

        print("2. Creating test users...")
        users = await create_test_users(database)
        print(f"Created/found {len(users)} users\n")

        print("3. Creating test activities...")
        activities = await create_test_activities(database, users)
        print(f"Created {len(activities)} activities\n")

        print("4. Creating test messages...")
        messages = await create_test_messages(database, users, activities)
        print(f"Created {len(messages)} messages\n")

        print("Test data created successfully!")
        print("\nUsers:")
        for user in users:
            print(f"  - {user.username} (ID: {user.id}) - password: password123")

        print("\nUseful links:")
        print("  - API docs: http://localhost:8000/docs")
        print(f"  - Chat socket: ws://localhost:8000/ws?userId={users[0].id}")

    except Exception as e:
        print(f"Error creating test data: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
