from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from .base import CamelModel, UTCDateTime


class UserBase(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    display_name: str = Field(..., min_length=1, max_length=100)
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    location: Optional[str] = None
    interests: List[str] = []
    wishlist: List[str] = []


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    privacy_settings: Optional[dict] = None


class UserUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    location: Optional[str] = None
    interests: Optional[List[str]] = None
    wishlist: Optional[List[str]] = None
    privacy_settings: Optional[dict] = None


class UserResponse(UserBase):
    id: int
    created_at: UTCDateTime
    last_active: UTCDateTime


class UserLogin(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str
    expires_in: int
