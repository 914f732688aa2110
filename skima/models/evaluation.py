"""
Evaluation session and assessment models.

An EvaluationSession is one point-in-time evaluation of a collaborator. It
snapshots the collaborator's name and role at that moment, so later role
changes never reclassify historical data. Each session owns the per-skill
Assessments recorded during it.
"""

import enum
import uuid
from sqlalchemy import Column, Integer, String, Text, Float, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import relationship
from skima.core.database import Base


class Criticality(str, enum.Enum):
    """
    How essential a skill is to a role.

    - C: Critical
    - I: Important
    - D: Desirable
    - N: Not applicable (never counts toward the role's average)
    """
    CRITICAL = "C"
    IMPORTANT = "I"
    DESIRABLE = "D"
    NOT_APPLICABLE = "N"


class Frequency(str, enum.Enum):
    """How often the skill is used: daily, weekly, monthly, quarterly or never."""
    DAILY = "D"
    WEEKLY = "S"
    MONTHLY = "M"
    QUARTERLY = "T"
    NEVER = "N"


class EvaluationSession(Base):
    __tablename__ = "evaluation_sessions"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String, unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    collaborator_id = Column(Integer, ForeignKey("collaborators.id"), nullable=False, index=True)

    # Snapshot of the collaborator at evaluation time
    collaborator_name = Column(String, nullable=True)
    collaborator_role = Column(String, nullable=True)

    evaluated_by = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    evaluated_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

    # Relationships
    collaborator = relationship("Collaborator", back_populates="sessions")
    assessments = relationship("Assessment", back_populates="session", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<EvaluationSession(id={self.id}, collaborator_id={self.collaborator_id}, evaluated_at={self.evaluated_at})>"


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("evaluation_sessions.id"), nullable=False, index=True)
    collaborator_id = Column(Integer, ForeignKey("collaborators.id"), nullable=False, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False, index=True)

    level = Column(Float, nullable=False)  # 0-5, 0 = not assessed
    criticality = Column(Enum(Criticality), default=Criticality.NOT_APPLICABLE, nullable=False)
    frequency = Column(Enum(Frequency), default=Frequency.NEVER, nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    session = relationship("EvaluationSession", back_populates="assessments")
    skill = relationship("Skill")

    def __repr__(self):
        return f"<Assessment(session_id={self.session_id}, skill_id={self.skill_id}, level={self.level})>"
