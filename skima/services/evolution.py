"""
Evolution analytics: team and per-employee skill trends over time.

Pipeline (one synchronous pass per request, no state kept between calls):

1. load_histories      - active collaborators and their in-range sessions
2. aggregate_employee  - sparkline, start/current score, growth, trend
3. build_chart_data    - one point per calendar month, carrying scores forward
4. extract_insights    - top improver and support cases
5. compute_evolution   - orchestrates the above into an EvolutionResponse

Session scores honour the role profile of the role recorded on each session,
so a collaborator who changed roles keeps their history scored under the
role they held at the time.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Union

from skima.schemas.evolution import (
    ChartPoint,
    EmployeeEvolution,
    EvolutionInsights,
    EvolutionMeta,
    EvolutionResponse,
    GrowthTrend,
    SkillStatus,
    SupportCase,
)
from skima.services.date_ranges import RangeSpec, ResolvedRange, add_months, iter_month_starts, resolve_range
from skima.services.ports import (
    AssessmentRecord,
    CollaboratorRecord,
    EvolutionStore,
    RoleProfileRecord,
    SessionRecord,
)
from skima.services.scoring import (
    classify_growth_trend,
    classify_status,
    count_critical_gaps,
    round_score,
    session_score,
)

logger = logging.getLogger(__name__)


@dataclass
class LoadedSession:
    record: SessionRecord
    role: str
    assessments: List[AssessmentRecord]

    @property
    def evaluated_at(self) -> datetime:
        return self.record.evaluated_at


@dataclass
class CollaboratorHistory:
    collaborator: CollaboratorRecord
    sessions: List[LoadedSession]


@dataclass
class ScoredSession:
    evaluated_at: datetime
    score: float
    role: str
    assessments: List[AssessmentRecord]


@dataclass
class EmployeeAggregate:
    """
    Computed view of one collaborator over the requested range.

    Built from the sessions that produced a score; sessions with no eligible
    assessment are not part of `timeline`.
    """
    id: int
    name: str
    role: str
    timeline: List[ScoredSession] = field(default_factory=list)
    critical_gaps: int = 0

    @property
    def sparkline(self) -> List[float]:
        return [s.score for s in self.timeline]

    @property
    def insufficient_data(self) -> bool:
        return not self.timeline

    @property
    def is_new_hire(self) -> bool:
        return len(self.timeline) == 1

    @property
    def start_score(self) -> Optional[float]:
        return self.timeline[0].score if self.timeline else None

    @property
    def current_score(self) -> Optional[float]:
        return self.timeline[-1].score if self.timeline else None

    @property
    def growth(self) -> Optional[float]:
        if len(self.timeline) < 2:
            return None
        return round_score(self.current_score - self.start_score)

    @property
    def growth_trend(self) -> GrowthTrend:
        return classify_growth_trend(self.growth)

    @property
    def status(self) -> SkillStatus:
        return classify_status(self.current_score)

    @property
    def first_evaluated_at(self) -> datetime:
        return self.timeline[0].evaluated_at

    @property
    def last_evaluated_at(self) -> datetime:
        return self.timeline[-1].evaluated_at

    def to_schema(self) -> EmployeeEvolution:
        return EmployeeEvolution(
            id=self.id,
            name=self.name,
            role=self.role,
            currentScore=self.current_score,
            startScore=self.start_score,
            growth=self.growth,
            growthTrend=self.growth_trend,
            isNewHire=self.is_new_hire,
            insufficientData=self.insufficient_data,
            lastEvaluatedAt=self.last_evaluated_at.date(),
            sparkline=self.sparkline,
            status=self.status,
        )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_histories(store: EvolutionStore, start: Optional[date], end: date) -> List[CollaboratorHistory]:
    """
    Read every active collaborator's sessions (with assessments) in range.

    Collaborators without any session in range are left out. The role of
    each session is the one snapshotted at evaluation time, falling back to
    the collaborator's current role for sessions recorded without one.
    """
    histories = []
    for collaborator in store.list_active_collaborators():
        if not collaborator.is_active:
            continue

        records = store.list_sessions_in_range(collaborator.id, start, end)
        if not records:
            continue

        sessions = [
            LoadedSession(
                record=record,
                role=record.collaborator_role or collaborator.role,
                assessments=store.list_assessments(record.id),
            )
            for record in sorted(records, key=lambda r: (r.evaluated_at, r.id))
        ]
        histories.append(CollaboratorHistory(collaborator=collaborator, sessions=sessions))

    logger.debug(f"Loaded {len(histories)} collaborator histories for range {start}..{end}")
    return histories


def load_role_profiles(store: EvolutionStore, roles: Iterable[str]) -> Dict[str, Optional[RoleProfileRecord]]:
    """Fetch each distinct role's profile once. Roles without a profile map to None."""
    profiles: Dict[str, Optional[RoleProfileRecord]] = {}
    for role in roles:
        if role in profiles:
            continue
        profiles[role] = store.get_role_profile(role)
        if profiles[role] is None:
            logger.warning(f"No role profile for role {role!r}; counting all of its assessments")
    return profiles


# ---------------------------------------------------------------------------
# Per-employee aggregation
# ---------------------------------------------------------------------------

def aggregate_employee(
    history: CollaboratorHistory,
    profiles: Dict[str, Optional[RoleProfileRecord]],
) -> EmployeeAggregate:
    timeline = []
    for session in history.sessions:
        score = session_score(session.assessments, profiles.get(session.role))
        if score is None:
            continue
        timeline.append(
            ScoredSession(
                evaluated_at=session.evaluated_at,
                score=score,
                role=session.role,
                assessments=session.assessments,
            )
        )

    collaborator = history.collaborator
    aggregate = EmployeeAggregate(
        id=collaborator.id,
        name=collaborator.name,
        role=timeline[-1].role if timeline else collaborator.role,
        timeline=timeline,
    )
    if timeline:
        latest = timeline[-1]
        aggregate.critical_gaps = count_critical_gaps(latest.assessments, profiles.get(latest.role))
    return aggregate


def _employee_sort_key(employee: EmployeeAggregate):
    # Highest growth first; new hires (no growth) last
    growth = employee.growth
    return (growth is None, -(growth or 0.0), employee.name, employee.id)


# ---------------------------------------------------------------------------
# Time bucketing
# ---------------------------------------------------------------------------

def build_chart_data(employees: List[EmployeeAggregate], start: date, end: date) -> List[ChartPoint]:
    """
    One ChartPoint per calendar month between start and end (inclusive).

    An employee contributes from the month of their first scored session on,
    with their most recent score as of the end of each month. Months where
    nobody has a fresh session but somebody contributes are carry-overs;
    months where nobody contributes yet have no average.
    """
    points = []
    for bucket_start in iter_month_starts(start, end):
        bucket_end = add_months(bucket_start, 1)
        scores = []
        new_hires = []
        landed = 0

        for employee in employees:
            as_of = [s for s in employee.timeline if s.evaluated_at.date() < bucket_end]
            if not as_of:
                continue
            scores.append(as_of[-1].score)
            if as_of[-1].evaluated_at.date() >= bucket_start:
                landed += 1
            if employee.first_evaluated_at.date() >= bucket_start:
                new_hires.append(employee.name)

        points.append(
            ChartPoint(
                date=bucket_start,
                avgScore=round_score(sum(scores) / len(scores)) if scores else None,
                count=len(scores),
                newHires=new_hires,
                isCarryOver=bool(scores) and landed == 0,
            )
        )
    return points


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

def pick_top_improver(employees: List[EmployeeAggregate]) -> Optional[EmployeeAggregate]:
    """
    Employee trending up with the largest growth.

    Equal growth goes to the most recently evaluated employee, then to the
    lowest id, so the pick is deterministic.
    """
    candidates = [e for e in employees if e.growth_trend == GrowthTrend.UP]
    if not candidates:
        return None
    return max(candidates, key=lambda e: (e.growth, e.last_evaluated_at, -e.id))


def extract_insights(employees: List[EmployeeAggregate]) -> EvolutionInsights:
    top_improver = pick_top_improver(employees)

    support = [
        e for e in employees
        if e.status == SkillStatus.ATTENTION or e.growth_trend == GrowthTrend.DOWN
    ]
    support.sort(key=lambda e: (-e.critical_gaps, e.current_score, e.id))
    support_cases = [
        SupportCase(
            id=e.id,
            name=e.name,
            role=e.role,
            currentScore=e.current_score,
            status=e.status,
            growthTrend=e.growth_trend,
            criticalGaps=e.critical_gaps,
        )
        for e in support
    ]

    return EvolutionInsights(
        topImprover=top_improver.to_schema() if top_improver else None,
        supportCases=support_cases,
        supportCount=len(support_cases),
    )


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def _mean_score(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return round_score(sum(values) / len(values))


def _chart_start(resolved: ResolvedRange, employees: List[EmployeeAggregate]) -> date:
    if resolved.start is not None:
        return resolved.start
    # Unbounded history starts at the earliest scored session
    if employees:
        return min(e.first_evaluated_at.date() for e in employees)
    return resolved.end


def compute_evolution(
    store: EvolutionStore,
    range_spec: Union[RangeSpec, str, None] = None,
    today: Optional[date] = None,
    default_preset: str = "12m",
) -> EvolutionResponse:
    """
    Compute the evolution view for the requested window.

    Args:
        store: Read-only storage port
        range_spec: Preset name ("6m", "12m", "24m", "ytd", "all") or RangeSpec
        today: Reference date for rolling presets (defaults to the current date)
        default_preset: Preset used when no range is requested

    Returns:
        EvolutionResponse with meta, chartData, employees and insights

    Raises:
        StorageError: If the store cannot be read
    """
    if isinstance(range_spec, str):
        range_spec = RangeSpec(preset=range_spec)
    today = today or date.today()
    resolved = resolve_range(range_spec, today, default_preset=default_preset)

    histories = load_histories(store, resolved.start, resolved.end)
    profiles = load_role_profiles(
        store, (session.role for history in histories for session in history.sessions)
    )

    aggregates = [aggregate_employee(history, profiles) for history in histories]
    employees = sorted((a for a in aggregates if not a.insufficient_data), key=_employee_sort_key)

    start = _chart_start(resolved, employees)
    chart_data = build_chart_data(employees, start, resolved.end) if (employees or resolved.start) else []

    maturity = _mean_score([e.current_score for e in employees])
    start_maturity = _mean_score([e.start_score for e in employees])
    period_delta = round_score(maturity - start_maturity) if maturity is not None else None

    logger.info(
        f"Evolution computed for range={resolved.key} "
        f"({start}..{resolved.end}): {len(employees)} employees, {len(chart_data)} months"
    )

    return EvolutionResponse(
        meta=EvolutionMeta(
            currentMaturityIndex=maturity,
            periodDelta=period_delta,
            timeRangeLabel=resolved.label,
            startDate=start,
            endDate=resolved.end,
            totalEmployees=len(employees),
        ),
        chartData=chart_data,
        employees=[e.to_schema() for e in employees],
        insights=extract_insights(employees),
    )
