"""
SQLAlchemy implementation of the evolution storage port.

Reads only. Every database error is logged with the failing operation and
re-raised as StorageError so the API layer can turn it into a 500 without
knowing about SQLAlchemy.
"""

import json
import logging
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skima.models.collaborator import Collaborator
from skima.models.evaluation import Assessment, Criticality, EvaluationSession
from skima.models.role_profile import RoleProfile
from skima.models.skill import Skill
from skima.services.ports import (
    AssessmentRecord,
    CollaboratorRecord,
    RoleProfileRecord,
    SessionRecord,
    StorageError,
)

logger = logging.getLogger(__name__)


def decode_profile_skills(raw) -> Dict[int, Criticality]:
    """
    Decode a stored role profile mapping into {skill_id: Criticality}.

    Accepts the JSON text stored in the database or an already decoded dict.

    Raises:
        ValueError: If the payload is not a mapping of skill ids to known criticality codes
    """
    data = json.loads(raw) if isinstance(raw, str) else raw
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Role profile skills must be a mapping, got {type(data).__name__}")
    return {int(skill_id): Criticality(code) for skill_id, code in data.items()}


def encode_profile_skills(skills: Dict[int, Criticality]) -> str:
    return json.dumps({str(skill_id): Criticality(code).value for skill_id, code in sorted(skills.items())})


@contextmanager
def _reading(operation: str):
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Storage read failed during {operation}: {e}")
        raise StorageError(f"Failed to read {operation}") from e


class SqlEvolutionStore:
    """EvolutionStore backed by a SQLAlchemy session (one per request)."""

    def __init__(self, db: Session):
        self.db = db

    def list_active_collaborators(self) -> List[CollaboratorRecord]:
        with _reading("active collaborators"):
            rows = (
                self.db.query(Collaborator)
                .filter(Collaborator.is_active.is_(True))
                .order_by(Collaborator.id)
                .all()
            )
        return [
            CollaboratorRecord(
                id=row.id,
                name=row.name,
                role=row.role,
                is_active=row.is_active,
                joined_at=row.joined_at,
                last_evaluated_at=row.last_evaluated_at,
            )
            for row in rows
        ]

    def list_sessions_in_range(
        self, collaborator_id: int, start: Optional[date], end: date
    ) -> List[SessionRecord]:
        query = self.db.query(EvaluationSession).filter(EvaluationSession.collaborator_id == collaborator_id)
        if start is not None:
            query = query.filter(EvaluationSession.evaluated_at >= datetime.combine(start, time.min))
        # End date is inclusive: everything before the next midnight
        query = query.filter(EvaluationSession.evaluated_at < datetime.combine(end + timedelta(days=1), time.min))

        with _reading(f"sessions of collaborator {collaborator_id}"):
            rows = query.order_by(EvaluationSession.evaluated_at, EvaluationSession.id).all()
        return [
            SessionRecord(
                id=row.id,
                collaborator_id=row.collaborator_id,
                evaluated_at=row.evaluated_at,
                collaborator_name=row.collaborator_name,
                collaborator_role=row.collaborator_role,
            )
            for row in rows
        ]

    def list_assessments(self, session_id: int) -> List[AssessmentRecord]:
        with _reading(f"assessments of session {session_id}"):
            rows = (
                self.db.query(Assessment, Skill.is_active)
                .outerjoin(Skill, Skill.id == Assessment.skill_id)
                .filter(Assessment.session_id == session_id)
                .order_by(Assessment.id)
                .all()
            )
        return [
            AssessmentRecord(
                skill_id=assessment.skill_id,
                level=assessment.level,
                criticality=assessment.criticality,
                frequency=assessment.frequency,
                skill_active=skill_active is not False,
            )
            for assessment, skill_active in rows
        ]

    def get_role_profile(self, role: str) -> Optional[RoleProfileRecord]:
        with _reading(f"role profile {role!r}"):
            row = self.db.query(RoleProfile).filter(RoleProfile.role == role).first()
        if row is None:
            return None

        try:
            skills = decode_profile_skills(row.skills)
        except (ValueError, TypeError) as e:
            logger.error(f"Malformed skills mapping in role profile {role!r}: {e}")
            raise StorageError(f"Malformed role profile {role!r}") from e

        return RoleProfileRecord(role=row.role, skills=skills, created_at=row.created_at)
