from fastapi import Request

from .stats import StatsService


def get_stats_service(request: Request) -> StatsService:
    """FastAPI dependency returning the service created at startup."""
    return request.app.state.stats_service
