"""
Pydantic schemas for role profiles.

On the wire the mapping is {"<skill_id>": "C" | "I" | "D" | "N"}; pydantic
coerces the keys to ints and the codes to Criticality.
"""

from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel

from skima.models.evaluation import Criticality


class RoleProfileUpsert(BaseModel):
    skills: Dict[int, Criticality]


class RoleProfileResponse(BaseModel):
    id: int
    role: str
    skills: Dict[int, Criticality]
    created_at: datetime
    updated_at: Optional[datetime] = None
