from meetup.schemas.envelope import ChatErrorCode


class ChatError(Exception):
    """A chat submission that is rejected and reported to the sender only."""

    code = ChatErrorCode.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPayload(ChatError):
    code = ChatErrorCode.INVALID_PAYLOAD


class SenderMismatch(ChatError):
    code = ChatErrorCode.SENDER_MISMATCH


class ActivityNotFound(ChatError):
    code = ChatErrorCode.NOT_FOUND

    def __init__(self, activity_id: int):
        super().__init__(f"Activity {activity_id} not found")
        self.activity_id = activity_id


class NotParticipant(ChatError):
    code = ChatErrorCode.NOT_PARTICIPANT

    def __init__(self, activity_id: int, user_id: int):
        super().__init__(f"User {user_id} is not a participant of activity {activity_id}")
        self.activity_id = activity_id
        self.user_id = user_id


class ActivityFull(Exception):
    def __init__(self, activity_id: int):
        super().__init__(f"Activity {activity_id} is full")
        self.activity_id = activity_id
