"""
Database models package.
"""

from skima.models.collaborator import Collaborator
from skima.models.skill import Skill
from skima.models.evaluation import EvaluationSession, Assessment, Criticality, Frequency
from skima.models.role_profile import RoleProfile

__all__ = [
    "Collaborator",
    "Skill",
    "EvaluationSession",
    "Assessment",
    "Criticality",
    "Frequency",
    "RoleProfile",
]
