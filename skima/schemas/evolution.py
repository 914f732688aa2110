"""
Pydantic schemas for the evolution analytics response.

Field names are camelCase on purpose: they are the wire contract consumed by
the dashboard client.
"""

import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, model_serializer


class SkillStatus(str, Enum):
    """Qualitative bucket for a score"""
    ATTENTION = "attention"
    COMPETENT = "competent"
    STRENGTH = "strength"


class GrowthTrend(str, Enum):
    """Direction of an employee's growth over the period"""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class EvolutionMeta(BaseModel):
    currentMaturityIndex: Optional[float] = None
    periodDelta: Optional[float] = None
    timeRangeLabel: str
    startDate: datetime.date
    endDate: datetime.date
    totalEmployees: int = 0


class ChartPoint(BaseModel):
    """One calendar-month bucket of the team trend"""
    date: datetime.date = Field(..., description="First day of the month")
    avgScore: Optional[float] = None
    count: int = 0
    newHires: List[str] = Field(default_factory=list)
    isCarryOver: bool = False


class EmployeeEvolution(BaseModel):
    """
    Per-collaborator growth over the requested range.

    `growth` is left out of the serialized output when the employee has a
    single scored session (new hire): there is nothing to compare against.
    """
    id: int
    name: str
    role: str
    currentScore: float
    startScore: float
    growth: Optional[float] = None
    growthTrend: GrowthTrend
    isNewHire: bool
    insufficientData: bool = False
    lastEvaluatedAt: datetime.date
    sparkline: List[float]
    status: SkillStatus

    @model_serializer(mode="wrap")
    def _omit_missing_growth(self, handler):
        data = handler(self)
        if data.get("growth") is None:
            data.pop("growth", None)
        return data


class SupportCase(BaseModel):
    id: int
    name: str
    role: str
    currentScore: float
    status: SkillStatus
    growthTrend: GrowthTrend
    criticalGaps: int = Field(0, description="Critical skills for the role scored below the competent threshold")


class EvolutionInsights(BaseModel):
    topImprover: Optional[EmployeeEvolution] = None
    supportCases: List[SupportCase] = Field(default_factory=list)
    supportCount: int = 0


class EvolutionResponse(BaseModel):
    """Response for GET /skills/evolution"""
    meta: EvolutionMeta
    chartData: List[ChartPoint]
    employees: List[EmployeeEvolution]
    insights: EvolutionInsights
