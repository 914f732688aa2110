from pydantic import BaseModel, Field
from typing import Optional


class SkillCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = None


class SkillResponse(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True
