from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from skima.models.evaluation import Criticality, Frequency


class AssessmentCreate(BaseModel):
    skill_id: int
    level: float = Field(..., ge=0, le=5, description="0 means not assessed")
    criticality: Criticality = Criticality.NOT_APPLICABLE
    frequency: Frequency = Frequency.NEVER


class EvaluationCreate(BaseModel):
    """Schema for recording an evaluation session"""
    evaluated_at: Optional[datetime] = Field(None, description="Defaults to now (UTC)")
    evaluated_by: Optional[str] = None
    notes: Optional[str] = None
    assessments: List[AssessmentCreate] = Field(..., min_length=1)


class AssessmentResponse(BaseModel):
    skill_id: int
    level: float
    criticality: Criticality
    frequency: Frequency

    class Config:
        from_attributes = True


class EvaluationResponse(BaseModel):
    id: int
    uuid: str
    collaborator_id: int
    collaborator_name: Optional[str] = None
    collaborator_role: Optional[str] = None
    evaluated_by: Optional[str] = None
    notes: Optional[str] = None
    evaluated_at: datetime
    assessments: List[AssessmentResponse]

    class Config:
        from_attributes = True
