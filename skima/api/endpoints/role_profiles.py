import logging
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skima.core.database import get_db
from skima.crud import role_profile as role_profile_crud
from skima.schemas.role_profile import RoleProfileResponse, RoleProfileUpsert

router = APIRouter(prefix="/role-profiles", tags=["Role Profiles"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=list[RoleProfileResponse])
def list_role_profiles(db: Session = Depends(get_db)):
    return [role_profile_crud.to_response(p) for p in role_profile_crud.get_all(db)]


@router.get("/{role}", response_model=RoleProfileResponse)
def get_role_profile(role: str, db: Session = Depends(get_db)):
    profile = role_profile_crud.get_by_role(db, role)

    if not profile:
        raise HTTPException(status_code=404, detail="Role profile not found")

    return role_profile_crud.to_response(profile)


@router.put("/{role}", response_model=RoleProfileResponse)
def upsert_role_profile(role: str, request: RoleProfileUpsert, db: Session = Depends(get_db)):
    """
    Create or replace the skill -> criticality mapping of a role.

    Skills tagged "N" (or left out) do not count toward the role's average.
    """
    try:
        profile = role_profile_crud.upsert(db, role, request.skills)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving role profile {role!r}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save role profile")

    logger.info(f"Saved role profile {role!r} with {len(request.skills)} skills")
    return role_profile_crud.to_response(profile)
