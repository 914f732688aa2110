"""
Role profile model.

Maps each skill to the criticality it has for one role. The mapping is kept
as a JSON text column ({"<skill_id>": "C" | "I" | "D" | "N"}) and decoded
only at the storage boundary (see skima.crud.evolution_store).
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, func
from skima.core.database import Base


class RoleProfile(Base):
    __tablename__ = "role_profiles"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String, unique=True, nullable=False, index=True)
    skills = Column(Text, nullable=False, default="{}")

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<RoleProfile(id={self.id}, role='{self.role}')>"
