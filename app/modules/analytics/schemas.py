from pydantic import BaseModel
from typing import Dict, List


class ProviderUsage(BaseModel):
    api_provider: str
    calls: int
    successful_calls: int
    success_rate: float
    total_cost_usd: float
    avg_response_time_ms: float


class DailyUsage(BaseModel):
    date: str
    calls: int
    cost_usd: float


class ApiUsageSummary(BaseModel):
    days: int
    total_calls: int
    total_cost_usd: float
    avg_response_time_ms: float
    success_rate: float
    providers: List[ProviderUsage]
    daily: List[DailyUsage]


class SearchSummary(BaseModel):
    days: int
    total_searches: int
    found_in_database: int
    found_via_image_matching: int
    found_via_web_search: int
    no_result: int
    success_rate: float
    avg_search_time_ms: float
    by_type: Dict[str, int]
    by_source: Dict[str, int]
