import logging
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from skima.core.database import get_db
from skima.crud import skill as skill_crud
from skima.schemas.skill import SkillCreate, SkillResponse

router = APIRouter(prefix="/skills", tags=["Skills"])
logger = logging.getLogger(__name__)


@router.post("/", status_code=201, response_model=SkillResponse)
def create_skill(request: SkillCreate, db: Session = Depends(get_db)):
    if skill_crud.get_by_name(db, request.name):
        raise HTTPException(status_code=409, detail="Skill already exists")

    skill = skill_crud.create(db, request)
    logger.info(f"Created skill {skill.id}: {skill.name}")
    return skill


@router.get("/", response_model=list[SkillResponse])
def list_skills(include_archived: bool = False, db: Session = Depends(get_db)):
    return skill_crud.get_multi(db, include_archived=include_archived)
