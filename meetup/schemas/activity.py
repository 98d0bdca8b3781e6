from typing import List, Optional

from pydantic import Field

from .base import CamelModel, NaiveUTCDateTime, UTCDateTime


class ActivityBase(CamelModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10)
    location: str = Field(..., min_length=1, max_length=200)
    date_time: NaiveUTCDateTime
    max_participants: Optional[int] = Field(None, ge=1)
    categories: List[str] = []
    image: Optional[str] = None


class ActivityCreate(ActivityBase):
    pass


class ActivityUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    date_time: Optional[NaiveUTCDateTime] = None
    max_participants: Optional[int] = Field(None, ge=1)
    categories: Optional[List[str]] = None
    image: Optional[str] = None
    status: Optional[str] = Field(None, max_length=20)


class ActivityResponse(ActivityBase):
    id: int
    creator_id: int
    status: str
    date_time: UTCDateTime
    created_at: UTCDateTime


class ParticipantResponse(CamelModel):
    id: int
    activity_id: int
    user_id: int
    status: str
    joined_at: UTCDateTime
