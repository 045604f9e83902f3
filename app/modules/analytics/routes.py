from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.analytics.schemas import ApiUsageSummary, SearchSummary
from app.modules.analytics.service import AnalyticsService
from app.core.dependencies import require_admin
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/analytics", tags=["analytics"])


def get_analytics_service(supabase: Client = Depends(get_service_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


@router.get("/api-usage", response_model=ApiUsageSummary)
async def get_api_usage(
    days: int = Query(7, ge=1, le=365),
    context: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Provider calls, success rate, cost and response time over the last `days` days"""
    return service.api_usage(days)


@router.get("/searches", response_model=SearchSummary)
async def get_search_summary(
    days: int = Query(7, ge=1, le=365),
    context: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """How badge searches ended over the last `days` days"""
    return service.search_summary(days)
