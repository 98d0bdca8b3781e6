#!/usr/bin/env python3

import argparse
import asyncio

import requests
import websockets

from meetup.schemas.envelope import (
    ActivityChatFrame,
    ActivityMessageEnvelope,
    ErrorEnvelope,
    PongEnvelope,
    decode_envelope,
)

BASE_URL = "http://localhost:8000"
WS_URL = "ws://localhost:8000/ws"


def print_envelope(raw: str):
    envelope = decode_envelope(raw)
    if isinstance(envelope, ActivityMessageEnvelope):
        message = envelope.message
        print(f"[{message.sent_at.isoformat()}] #{message.id} user {message.sender_id}: {message.content}")
    elif isinstance(envelope, ErrorEnvelope):
        print(f"error ({envelope.code.value}): {envelope.message}")
    elif isinstance(envelope, PongEnvelope):
        print("pong")


async def run_chat_client(username: str, password: str, activity_id: int, text: str):
    response = requests.post(
        f"{BASE_URL}/api/v1/auth/login-json",
        json={"username": username, "password": password},
    )
    if response.status_code != 200:
        print("Login failed")
        return

    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
    me = requests.get(f"{BASE_URL}/api/v1/users/me", headers=headers).json()

    history = requests.get(f"{BASE_URL}/api/v1/activities/{activity_id}/messages", headers=headers)
    if history.status_code != 200:
        print(f"Cannot read chat: {history.json().get('detail')}")
        return
    for message in history.json():
        print(f"[history] #{message['id']} user {message['senderId']}: {message['content']}")

    async with websockets.connect(f"{WS_URL}?userId={me['id']}") as websocket:
        print("Connected to chat")

        frame = ActivityChatFrame(
            type="activity-chat", activity_id=activity_id, sender_id=me["id"], content=text
        )
        await websocket.send(frame.model_dump_json(by_alias=True))

        try:
            while True:
                raw = await asyncio.wait_for(websocket.recv(), timeout=5.0)
                print_envelope(raw)
        except asyncio.TimeoutError:
            print("No more messages")


def main():
    parser = argparse.ArgumentParser(description="Send one message to an activity chat and print replies")
    parser.add_argument("activity_id", type=int)
    parser.add_argument("text")
    parser.add_argument("--username", default="alice")
    parser.add_argument("--password", default="password123")
    args = parser.parse_args()

    asyncio.run(run_chat_client(args.username, args.password, args.activity_id, args.text))


if __name__ == "__main__":
    main()
