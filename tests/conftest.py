import itertools
import json
from datetime import datetime, timedelta, timezone
from typing import List

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from meetup.chat_protocol import ActivityChatProtocol
from meetup.config import Settings
from meetup.database import Database
from meetup.main import create_app
from meetup.models.base import utcnow
from meetup.repositories.activity_repository import ActivityRepository
from meetup.repositories.user_repository import UserRepository
from meetup.schemas.activity import ActivityCreate
from meetup.schemas.user import UserCreate
from meetup.websocket_manager import ConnectionManager

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "password123"


class FakeWebSocket:
    """Stands in for a starlette WebSocket on the registry and protocol paths."""

    def __init__(self, fail_sends: bool = False):
        self.client_state = WebSocketState.CONNECTING
        self.application_state = WebSocketState.CONNECTING
        self.fail_sends = fail_sends
        self.sent: List[str] = []

    async def accept(self):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_text(self, data: str):
        if self.fail_sends:
            raise RuntimeError("Cannot call \"send\" once a close message has been sent.")
        self.sent.append(data)

    def drop(self):
        self.client_state = WebSocketState.DISCONNECTED

    @property
    def envelopes(self) -> List[dict]:
        return [json.loads(data) for data in self.sent]


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL=TEST_DATABASE_URL,
        SECRET_KEY="test-secret",
        LOG_JSON=False,
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def database():
    db = Database(TEST_DATABASE_URL)
    await db.create_tables()
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture
async def file_database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'meetup.db'}")
    await db.create_tables()
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session() as db:
        yield db


@pytest.fixture
def manager():
    return ConnectionManager()


@pytest.fixture
def protocol(database, manager):
    return ActivityChatProtocol(database, manager, max_length=200)


@pytest.fixture
def make_socket():
    return FakeWebSocket


@pytest.fixture
def connect(manager):
    async def _connect(user_id: int, **kwargs) -> FakeWebSocket:
        websocket = FakeWebSocket(**kwargs)
        await manager.connect(websocket, user_id)
        return websocket

    return _connect


@pytest.fixture
def make_user(database):
    counter = itertools.count(1)

    async def _make_user(username: str = None, **fields):
        username = username or f"user{next(counter)}"
        async with database.session() as db:
            return await UserRepository(db).create(
                UserCreate(
                    username=username,
                    email=f"{username}@example.com",
                    password=PASSWORD,
                    display_name=username.title(),
                    **fields,
                )
            )

    return _make_user


@pytest.fixture
def make_activity(database):
    async def _make_activity(creator, participants=(), **fields):
        data = {
            "title": "Evening run",
            "description": "Five kilometres along the river, easy pace.",
            "location": "Berlin, Spree",
            "date_time": utcnow() + timedelta(days=1),
        }
        data.update(fields)
        async with database.session() as db:
            activity_repo = ActivityRepository(db)
            activity = await activity_repo.create(ActivityCreate(**data), creator.id)
            for user in participants:
                await activity_repo.add_participant(activity.id, user.id)
            return activity

    return _make_activity


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    def _signup(username: str, **fields):
        payload = {
            "username": username,
            "email": f"{username}@example.com",
            "password": PASSWORD,
            "displayName": username.title(),
        }
        payload.update(fields)
        response = client.post("/api/v1/auth/register", json=payload)
        assert response.status_code == 201, response.text

        login = client.post("/api/v1/auth/login-json", json={"username": username, "password": PASSWORD})
        assert login.status_code == 200, login.text
        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
        return response.json(), headers

    return _signup


@pytest.fixture
def create_activity(client):
    def _create_activity(headers, **fields):
        payload = {
            "title": "Sunday hike",
            "description": "Twelve kilometres through the forest.",
            "location": "Berlin, Grunewald",
            "dateTime": (datetime.now(timezone.utc) + timedelta(days=2)).isoformat(),
            "categories": ["Hiking"],
        }
        payload.update(fields)
        response = client.post("/api/v1/activities/", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_activity
