"""
Score primitives shared by the evolution pipeline.

Everything here is a pure function: role-profile filtering of assessments,
per-session averaging, status classification and growth trend derivation.
"""

import logging
import math
from typing import Iterable, Optional

from skima.models.evaluation import Criticality
from skima.schemas.evolution import GrowthTrend, SkillStatus
from skima.services.ports import AssessmentRecord, RoleProfileRecord

logger = logging.getLogger(__name__)

# Fixed classification boundaries (score on the 0-5 scale)
COMPETENT_THRESHOLD = 2.5
STRENGTH_THRESHOLD = 3.5

# Growth within +/- this band is reported as stable
TREND_DEAD_ZONE = 0.1


def round_score(value: float) -> float:
    """Round half-up to one decimal (2.25 -> 2.3, -0.15 -> -0.1)."""
    return math.floor(value * 10 + 0.5) / 10


def classify_status(score: float) -> SkillStatus:
    if score >= STRENGTH_THRESHOLD:
        return SkillStatus.STRENGTH
    if score >= COMPETENT_THRESHOLD:
        return SkillStatus.COMPETENT
    return SkillStatus.ATTENTION


def classify_growth_trend(growth: Optional[float]) -> GrowthTrend:
    if growth is None:
        return GrowthTrend.STABLE
    if growth > TREND_DEAD_ZONE:
        return GrowthTrend.UP
    if growth < -TREND_DEAD_ZONE:
        return GrowthTrend.DOWN
    return GrowthTrend.STABLE


def counts_toward_score(
    assessment: AssessmentRecord,
    profile: Optional[RoleProfileRecord],
) -> bool:
    """
    Decide whether one assessment enters its session's average.

    Args:
        assessment: The assessment to check
        profile: Role profile for the role recorded on the session, if any

    Returns:
        False for unassessed levels (<= 0) and archived skills. Otherwise
        True when the role has no profile (fail open), else True only if the
        profile tags the skill with a criticality other than Not-applicable.
    """
    if assessment.level is None or assessment.level <= 0:
        return False
    if not assessment.skill_active:
        return False
    if profile is None:
        return True

    criticality = profile.criticality_of(assessment.skill_id)
    return criticality is not None and criticality != Criticality.NOT_APPLICABLE


def session_score(
    assessments: Iterable[AssessmentRecord],
    profile: Optional[RoleProfileRecord],
) -> Optional[float]:
    """
    Mean level of the eligible assessments of one session, rounded.

    Returns None when nothing is eligible: such a session carries no score
    at all rather than a zero.
    """
    levels = [a.level for a in assessments if counts_toward_score(a, profile)]
    if not levels:
        return None
    return round_score(sum(levels) / len(levels))


def count_critical_gaps(
    assessments: Iterable[AssessmentRecord],
    profile: Optional[RoleProfileRecord],
) -> int:
    """
    Number of Critical skills in the profile scored below the competent
    threshold in the given assessments. Unassessed critical skills count as
    gaps.
    """
    if profile is None:
        return 0

    levels = {a.skill_id: a.level for a in assessments}
    gaps = 0
    for skill_id, criticality in profile.skills.items():
        if criticality != Criticality.CRITICAL:
            continue
        if (levels.get(skill_id) or 0) < COMPETENT_THRESHOLD:
            gaps += 1
    return gaps
