"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter
from insightboard.core.performance import PerformanceMonitor

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """Duration statistics for parsing, analysis and HTTP requests."""
    return {'performance': PerformanceMonitor.get_all_metrics()}
