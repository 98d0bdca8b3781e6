import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.auth import get_current_active_user
from meetup.chat_protocol import ActivityChatProtocol
from meetup.database import get_db
from meetup.dependencies import get_chat_protocol
from meetup.errors import ActivityFull, ActivityNotFound
from meetup.models.activity import Activity
from meetup.models.notification import NotificationType
from meetup.models.user import User
from meetup.repositories.activity_repository import ActivityRepository
from meetup.repositories.notification_repository import NotificationRepository
from meetup.schemas.activity import ActivityCreate, ActivityResponse, ActivityUpdate, ParticipantResponse
from meetup.schemas.message import MessageResponse
from meetup.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_activity_or_404(activity_repo: ActivityRepository, activity_id: int) -> Activity:
    activity = await activity_repo.get_by_id(activity_id)
    if not activity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return activity


@router.get("/", response_model=List[ActivityResponse])
async def get_upcoming_activities(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await ActivityRepository(db).get_upcoming(limit)


@router.get("/nearby", response_model=List[ActivityResponse])
async def get_nearby_activities(
    location: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await ActivityRepository(db).get_nearby(location, limit)


@router.post("/", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(
    activity_data: ActivityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    activity = await ActivityRepository(db).create(activity_data, current_user.id)
    logger.info("activity created", extra={"activity_id": activity.id, "creator_id": current_user.id})
    return activity


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(activity_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_activity_or_404(ActivityRepository(db), activity_id)


@router.put("/{activity_id}", response_model=ActivityResponse)
async def update_activity(
    activity_id: int,
    activity_data: ActivityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    activity_repo = ActivityRepository(db)
    activity = await _get_activity_or_404(activity_repo, activity_id)

    if activity.creator_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own activities",
        )

    return await activity_repo.update(activity_id, activity_data)


@router.delete("/{activity_id}")
async def delete_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    activity_repo = ActivityRepository(db)
    activity = await _get_activity_or_404(activity_repo, activity_id)

    if activity.creator_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own activities",
        )

    await activity_repo.delete(activity_id)
    logger.info("activity deleted", extra={"activity_id": activity_id})
    return {"message": "Activity deleted successfully"}


@router.get("/{activity_id}/participants", response_model=List[UserResponse])
async def get_activity_participants(activity_id: int, db: AsyncSession = Depends(get_db)):
    activity_repo = ActivityRepository(db)
    await _get_activity_or_404(activity_repo, activity_id)
    return await activity_repo.get_participants(activity_id)


@router.post("/{activity_id}/join", response_model=ParticipantResponse, status_code=status.HTTP_201_CREATED)
async def join_activity(
    activity_id: int,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Join an activity: 201 for a new participant, 200 when already joined."""
    activity_repo = ActivityRepository(db)
    activity = await _get_activity_or_404(activity_repo, activity_id)
    creator_id, title = activity.creator_id, activity.title
    user_id, display_name = current_user.id, current_user.display_name

    try:
        participant, created = await activity_repo.add_participant(
            activity_id, user_id, capacity=activity.max_participants
        )
    except ActivityFull:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Activity is full")

    if not created:
        response.status_code = status.HTTP_200_OK
        return participant

    if creator_id != user_id:
        await NotificationRepository(db).create(
            user_id=creator_id,
            notification_type=NotificationType.ACTIVITY_JOIN,
            content=f'{display_name} joined your activity "{title}"',
            related_id=activity_id,
        )
    return participant


@router.delete("/{activity_id}/leave")
async def leave_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    if not await ActivityRepository(db).remove_participant(activity_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="You are not a participant in this activity",
        )
    return {"message": "Left activity successfully"}


@router.get("/{activity_id}/messages", response_model=List[MessageResponse])
async def get_activity_messages(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    protocol: ActivityChatProtocol = Depends(get_chat_protocol),
):
    """Full chat history, oldest first; loaded once before the live channel takes over."""
    activity_repo = ActivityRepository(db)
    await _get_activity_or_404(activity_repo, activity_id)

    if not await activity_repo.is_participant(activity_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only participants can read this chat",
        )

    try:
        return await protocol.history(activity_id)
    except ActivityNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
