"""Player count statistics endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status

from ..dependencies import get_stats_service
from ..stats import InvalidRangeQuery, LatestStatsRow, RangeResult, StatsService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/all", response_model=RangeResult)
async def get_all_stats(
    from_ms: Optional[int] = Query(None, alias="from", ge=0),
    to_ms: Optional[int] = Query(None, alias="to", ge=0),
    service: StatsService = Depends(get_stats_service),
):
    """
    Get bucketed player counts for charting.

    Without ``from``/``to`` the whole stored history is returned.
    """
    try:
        return await service.query_range(from_ms, to_ms)
    except InvalidRangeQuery as e:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get("/latest", response_model=List[LatestStatsRow])
async def get_latest_stats(service: StatsService = Depends(get_stats_service)):
    """
    Get the latest count, daily peak and record of every server.
    """
    return await service.query_latest()
