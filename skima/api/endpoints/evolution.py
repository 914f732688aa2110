import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from skima.core.database import get_db
from skima.crud.evolution_store import SqlEvolutionStore
from skima.schemas.evolution import EvolutionResponse
from skima.services.date_ranges import RangeSpec
from skima.services.evolution import compute_evolution
from skima.services.ports import StorageError

router = APIRouter(prefix="/skills", tags=["Evolution"])
logger = logging.getLogger(__name__)


@router.get("/evolution", response_model=EvolutionResponse)
def get_evolution(
    request: Request,
    range_: Optional[str] = Query(None, alias="range", description="6m, 12m, 24m, ytd or all"),
    startDate: Optional[str] = Query(None, description="YYYY-MM-DD, overrides range together with endDate"),
    endDate: Optional[str] = Query(None, description="YYYY-MM-DD, overrides range together with startDate"),
    db: Session = Depends(get_db)
):
    """
    Team and per-employee skill evolution over a time window.

    Returns monthly team averages (with carry-over months), each active
    collaborator's growth and status, and the top improver / support cases.

    Unknown `range` values and malformed custom dates fall back to the full
    history rather than failing the request.
    """
    spec = RangeSpec(preset=range_, start_date=startDate, end_date=endDate)
    default_preset = request.app.state.settings.DEFAULT_EVOLUTION_RANGE

    try:
        return compute_evolution(SqlEvolutionStore(db), spec, default_preset=default_preset)
    except StorageError as e:
        logger.error(f"GET /skills/evolution failed (range={range_}, startDate={startDate}, endDate={endDate}): {e}")
        raise HTTPException(status_code=500, detail="Error fetching evolution data")
