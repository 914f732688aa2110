"""
Collaborator database model.

A collaborator is a tracked employee. Only active collaborators take part in
evolution analytics; inactive ones keep their history for auditing.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from skima.core.database import Base


class Collaborator(Base):
    __tablename__ = "collaborators"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    role = Column(String, nullable=False)
    email = Column(String, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    joined_at = Column(DateTime, server_default=func.now(), nullable=False)
    last_evaluated_at = Column(DateTime, nullable=True)

    # Relationships
    sessions = relationship(
        "EvaluationSession",
        back_populates="collaborator",
        order_by="EvaluationSession.evaluated_at",
    )

    def __repr__(self):
        return f"<Collaborator(id={self.id}, name='{self.name}', role='{self.role}', active={self.is_active})>"
