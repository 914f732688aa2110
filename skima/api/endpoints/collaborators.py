import logging
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skima.core.database import get_db
from skima.crud import collaborator as collaborator_crud
from skima.crud import evaluation as evaluation_crud
from skima.crud import skill as skill_crud
from skima.schemas.collaborator import CollaboratorCreate, CollaboratorResponse, CollaboratorUpdate
from skima.schemas.evaluation import EvaluationCreate, EvaluationResponse

router = APIRouter(prefix="/collaborators", tags=["Collaborators"])
logger = logging.getLogger(__name__)


@router.post("/", status_code=201, response_model=CollaboratorResponse)
def create_collaborator(request: CollaboratorCreate, db: Session = Depends(get_db)):
    """Add a collaborator to the matrix."""
    try:
        collaborator = collaborator_crud.create(db, request)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating collaborator: {e}")
        raise HTTPException(status_code=500, detail="Failed to create collaborator")

    logger.info(f"Created collaborator {collaborator.id}: {collaborator.name} ({collaborator.role})")
    return collaborator


@router.get("/", response_model=list[CollaboratorResponse])
def list_collaborators(
    skip: int = 0,
    limit: int = 100,
    active_only: bool = False,
    db: Session = Depends(get_db)
):
    """
    List collaborators ordered by name.

    Args:
        skip: Number of records to skip (default: 0)
        limit: Maximum number of records to return (default: 100, max: 100)
        active_only: Hide deactivated collaborators
    """
    if limit > 100:
        limit = 100

    return collaborator_crud.get_multi(db, skip=skip, limit=limit, active_only=active_only)


@router.get("/{collaborator_id}", response_model=CollaboratorResponse)
def get_collaborator(collaborator_id: int, db: Session = Depends(get_db)):
    collaborator = collaborator_crud.get_by_id(db, collaborator_id)

    if not collaborator:
        raise HTTPException(status_code=404, detail="Collaborator not found")

    return collaborator


@router.patch("/{collaborator_id}", response_model=CollaboratorResponse)
def update_collaborator(collaborator_id: int, request: CollaboratorUpdate, db: Session = Depends(get_db)):
    """
    Rename, change role, or (de)activate a collaborator.

    A role change only affects evaluations recorded afterwards; past
    sessions keep the role they were recorded under.
    """
    collaborator = collaborator_crud.update(db, collaborator_id, request)

    if not collaborator:
        raise HTTPException(status_code=404, detail="Collaborator not found")

    logger.info(f"Updated collaborator {collaborator_id}")
    return collaborator


@router.post("/{collaborator_id}/evaluations", status_code=201, response_model=EvaluationResponse)
def record_evaluation(collaborator_id: int, request: EvaluationCreate, db: Session = Depends(get_db)):
    """Record an evaluation session (a set of per-skill assessments) for a collaborator."""
    collaborator = collaborator_crud.get_by_id(db, collaborator_id)
    if not collaborator:
        raise HTTPException(status_code=404, detail="Collaborator not found")

    skill_ids = sorted({item.skill_id for item in request.assessments})
    unknown = sorted(set(skill_ids) - skill_crud.get_existing_ids(db, skill_ids))
    if unknown:
        raise HTTPException(status_code=422, detail=f"Unknown skill ids: {unknown}")

    try:
        session = evaluation_crud.create_session(db, collaborator, request)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error recording evaluation for collaborator {collaborator_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to record evaluation")

    logger.info(
        f"Recorded evaluation session {session.id} for collaborator {collaborator_id} "
        f"with {len(request.assessments)} assessments"
    )
    return session


@router.get("/{collaborator_id}/evaluations", response_model=list[EvaluationResponse])
def list_evaluations(collaborator_id: int, db: Session = Depends(get_db)):
    """Evaluation history of a collaborator, oldest first."""
    if not collaborator_crud.get_by_id(db, collaborator_id):
        raise HTTPException(status_code=404, detail="Collaborator not found")

    return evaluation_crud.get_for_collaborator(db, collaborator_id)
