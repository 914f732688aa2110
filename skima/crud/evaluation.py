"""
CRUD operations for evaluation sessions and their assessments.
"""

from datetime import datetime, timezone
from typing import List
from sqlalchemy.orm import Session
from skima.models.collaborator import Collaborator
from skima.models.evaluation import Assessment, EvaluationSession
from skima.schemas.evaluation import EvaluationCreate


def _utcnow() -> datetime:
    # Stored as naive UTC, matching SQLite's CURRENT_TIMESTAMP
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_session(db: Session, collaborator: Collaborator, data: EvaluationCreate) -> EvaluationSession:
    """
    Record one evaluation session with its assessments.

    The collaborator's current name and role are snapshotted onto the
    session, and their last_evaluated_at moves forward if this session is
    the most recent one.

    Args:
        db: Database session
        collaborator: The evaluated collaborator
        data: Validated evaluation payload

    Returns:
        Created EvaluationSession with assessments loaded
    """
    evaluated_at = data.evaluated_at or _utcnow()
    if evaluated_at.tzinfo is not None:
        evaluated_at = evaluated_at.astimezone(timezone.utc).replace(tzinfo=None)

    session = EvaluationSession(
        collaborator_id=collaborator.id,
        collaborator_name=collaborator.name,
        collaborator_role=collaborator.role,
        evaluated_by=data.evaluated_by,
        notes=data.notes,
        evaluated_at=evaluated_at,
    )
    session.assessments = [
        Assessment(
            collaborator_id=collaborator.id,
            skill_id=item.skill_id,
            level=item.level,
            criticality=item.criticality,
            frequency=item.frequency,
        )
        for item in data.assessments
    ]
    db.add(session)

    if collaborator.last_evaluated_at is None or evaluated_at > collaborator.last_evaluated_at:
        collaborator.last_evaluated_at = evaluated_at

    db.commit()
    db.refresh(session)

    return session


def get_for_collaborator(db: Session, collaborator_id: int) -> List[EvaluationSession]:
    return (
        db.query(EvaluationSession)
        .filter(EvaluationSession.collaborator_id == collaborator_id)
        .order_by(EvaluationSession.evaluated_at, EvaluationSession.id)
        .all()
    )
