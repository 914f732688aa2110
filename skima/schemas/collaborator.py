from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime


class CollaboratorCreate(BaseModel):
    """Schema for creating a collaborator"""
    name: str = Field(..., min_length=1, max_length=200)
    role: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    joined_at: Optional[datetime] = Field(None, description="Defaults to the creation time")


class CollaboratorUpdate(BaseModel):
    """Partial update; omitted fields are left untouched"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None


class CollaboratorResponse(BaseModel):
    id: int
    name: str
    role: str
    email: Optional[str] = None
    is_active: bool
    joined_at: datetime
    last_evaluated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
