from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class UpdatePreferencesRequest(BaseModel):
    preferences: List[str] = Field(..., description="News topics, e.g. ['technology', 'ai']")


class PreferencesData(BaseModel):
    preferences: List[str]


class UserProfile(BaseModel):
    user_id: str
    email: str
    full_name: str
    preferences: List[str] = []
    created_at: datetime

    class Config:
        from_attributes = True


class UserProfileData(BaseModel):
    user: UserProfile
