from datetime import datetime

from pydantic import BaseModel, Field

from coursegrade.schemas.user import ProfileBrief


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class GroupMemberRead(BaseModel):
    user_id: int
    role: str
    joined_at: datetime
    user: ProfileBrief

    class Config:
        from_attributes = True


class GroupRead(BaseModel):
    id: int
    name: str
    description: str | None = None
    created_at: datetime
    members: list[GroupMemberRead] = []

    class Config:
        from_attributes = True
