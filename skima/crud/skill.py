"""
CRUD operations for Skill model.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from skima.models.skill import Skill
from skima.schemas.skill import SkillCreate


def create(db: Session, data: SkillCreate) -> Skill:
    skill = Skill(name=data.name, category=data.category, is_active=True)

    db.add(skill)
    db.commit()
    db.refresh(skill)

    return skill


def get_by_name(db: Session, name: str) -> Optional[Skill]:
    return db.query(Skill).filter(Skill.name == name).first()


def get_existing_ids(db: Session, skill_ids: List[int]) -> set:
    """Subset of the given ids that exist in the skills table."""
    if not skill_ids:
        return set()
    rows = db.query(Skill.id).filter(Skill.id.in_(skill_ids)).all()
    return {row.id for row in rows}


def get_multi(db: Session, include_archived: bool = False) -> List[Skill]:
    query = db.query(Skill)

    if not include_archived:
        query = query.filter(Skill.is_active.is_(True))

    return query.order_by(Skill.id).all()
