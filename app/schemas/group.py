from datetime import datetime
from pydantic import BaseModel, Field
from typing import List
from app.schemas.settlements import GroupDebtOut

class GroupCreate(BaseModel):
    name: str = Field(min_length=1)
    created_by: int
    currency: str = Field(default="INR", min_length=3, max_length=3)

class GroupOut(BaseModel):
    id: int
    name: str
    created_by: int
    currency: str

    class Config:
        from_attributes = True

class GroupMemberCreate(BaseModel):
    user_id: int

class GroupMemberOut(BaseModel):
    user_id: int
    group_id: int
    joined_at: datetime | None = None

    class Config:
        from_attributes = True

class GroupDetailOut(GroupOut):
    members: List[int]
    debts: List[GroupDebtOut]
