from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.auth import get_current_active_user
from meetup.database import get_db
from meetup.models.user import User
from meetup.repositories.notification_repository import NotificationRepository
from meetup.schemas.social import NotificationResponse

router = APIRouter()


@router.get("/", response_model=List[NotificationResponse])
async def get_notifications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return await NotificationRepository(db).get_user_notifications(current_user.id)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    notification_repo = NotificationRepository(db)

    notification = await notification_repo.get_by_id(notification_id)
    # someone else's notification is reported as missing
    if not notification or notification.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    return await notification_repo.mark_read(notification_id)
