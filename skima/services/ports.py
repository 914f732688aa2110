"""
Storage port for the evolution pipeline.

The evolution computation reads everything it needs through EvolutionStore.
Records crossing the port are plain immutable dataclasses, already decoded:
role profile JSON becomes a {skill_id: Criticality} mapping here, never deeper
in the aggregation code.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Protocol

from skima.models.evaluation import Criticality, Frequency


class StorageError(Exception):
    """Raised by a store when the backing storage cannot be read"""
    pass


@dataclass(frozen=True)
class CollaboratorRecord:
    id: int
    name: str
    role: str
    is_active: bool = True
    joined_at: Optional[datetime] = None
    last_evaluated_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionRecord:
    id: int
    collaborator_id: int
    evaluated_at: datetime
    collaborator_name: Optional[str] = None
    collaborator_role: Optional[str] = None


@dataclass(frozen=True)
class AssessmentRecord:
    skill_id: int
    level: float
    criticality: Criticality = Criticality.NOT_APPLICABLE
    frequency: Frequency = Frequency.NEVER
    skill_active: bool = True


@dataclass(frozen=True)
class RoleProfileRecord:
    role: str
    skills: Dict[int, Criticality] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    def criticality_of(self, skill_id: int) -> Optional[Criticality]:
        return self.skills.get(skill_id)


class EvolutionStore(Protocol):
    """Read-only accessors the evolution pipeline depends on."""

    def list_active_collaborators(self) -> List[CollaboratorRecord]:
        ...

    def list_sessions_in_range(
        self, collaborator_id: int, start: Optional[date], end: date
    ) -> List[SessionRecord]:
        """Sessions with start <= evaluated_at date <= end, oldest first. start=None is unbounded."""
        ...

    def list_assessments(self, session_id: int) -> List[AssessmentRecord]:
        ...

    def get_role_profile(self, role: str) -> Optional[RoleProfileRecord]:
        ...
