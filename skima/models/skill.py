from sqlalchemy import Column, Integer, String, Boolean
from skima.core.database import Base


class Skill(Base):
    """
    A skill tracked in the matrix.

    Archived skills (is_active=False) keep their assessments but no longer
    count toward any score.
    """
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    category = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Skill(id={self.id}, name='{self.name}', active={self.is_active})>"
