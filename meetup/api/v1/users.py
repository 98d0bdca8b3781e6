from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.auth import get_current_active_user
from meetup.database import get_db
from meetup.models.notification import NotificationType
from meetup.models.user import User
from meetup.repositories.follow_repository import FollowRepository
from meetup.repositories.notification_repository import NotificationRepository
from meetup.repositories.user_repository import UserRepository
from meetup.schemas.social import UserConnectionResponse
from meetup.schemas.user import UserResponse, UserUpdate
from meetup.services.matching import suggest_users

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: User = Depends(get_current_active_user)):
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_current_user(
    user_data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    user_repo = UserRepository(db)

    if user_data.username and user_data.username.lower() != current_user.username.lower():
        if await user_repo.get_by_username(user_data.username):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")

    if user_data.email and user_data.email.lower() != current_user.email.lower():
        if await user_repo.get_by_email(user_data.email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    return await user_repo.update(current_user.id, user_data)


@router.get("/suggested", response_model=List[UserResponse])
async def get_suggested_users(
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Users sharing the most interests with the current user."""
    candidates = await UserRepository(db).get_all_except(current_user.id)
    return suggest_users(current_user, candidates, limit=limit)


@router.get("/nearby", response_model=List[UserResponse])
async def get_nearby_users(
    location: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return await UserRepository(db).get_nearby(location, limit)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_by_id(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/{user_id}/followers", response_model=List[UserResponse])
async def get_user_followers(user_id: int, db: AsyncSession = Depends(get_db)):
    return await FollowRepository(db).get_followers(user_id)


@router.get("/{user_id}/following", response_model=List[UserResponse])
async def get_user_following(user_id: int, db: AsyncSession = Depends(get_db)):
    return await FollowRepository(db).get_following(user_id)


@router.post("/{user_id}/follow", response_model=UserConnectionResponse, status_code=status.HTTP_201_CREATED)
async def follow_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot follow yourself")

    if not await UserRepository(db).get_by_id(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    connection, created = await FollowRepository(db).create(current_user.id, user_id)
    if created:
        await NotificationRepository(db).create(
            user_id=user_id,
            notification_type=NotificationType.NEW_FOLLOWER,
            content=f"{current_user.display_name} started following you",
            related_id=current_user.id,
        )
    return connection


@router.delete("/{user_id}/unfollow")
async def unfollow_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    if not await FollowRepository(db).delete(current_user.id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="You are not following this user")
    return {"message": "Unfollowed successfully"}
