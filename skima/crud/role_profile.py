"""
CRUD operations for RoleProfile model.

The skills mapping is encoded/decoded with the same helpers the evolution
store uses, so both sides agree on the stored format.
"""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from skima.crud.evolution_store import decode_profile_skills, encode_profile_skills
from skima.models.evaluation import Criticality
from skima.models.role_profile import RoleProfile
from skima.schemas.role_profile import RoleProfileResponse


def get_by_role(db: Session, role: str) -> Optional[RoleProfile]:
    return db.query(RoleProfile).filter(RoleProfile.role == role).first()


def get_all(db: Session) -> List[RoleProfile]:
    return db.query(RoleProfile).order_by(RoleProfile.role).all()


def upsert(db: Session, role: str, skills: Dict[int, Criticality]) -> RoleProfile:
    """
    Create the profile for a role, or replace its skills mapping.

    Args:
        db: Database session
        role: Role name
        skills: Mapping of skill id to criticality

    Returns:
        The stored RoleProfile
    """
    profile = get_by_role(db, role)
    if profile is None:
        profile = RoleProfile(role=role)
        db.add(profile)

    profile.skills = encode_profile_skills(skills)

    db.commit()
    db.refresh(profile)

    return profile


def to_response(profile: RoleProfile) -> RoleProfileResponse:
    return RoleProfileResponse(
        id=profile.id,
        role=profile.role,
        skills=decode_profile_skills(profile.skills),
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )
