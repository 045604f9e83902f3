import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.modules.analytics.schemas import ApiUsageSummary, ProviderUsage, DailyUsage, SearchSummary

logger = logging.getLogger(__name__)


def _rate(part: int, whole: int) -> float:
    return round(part * 100 / whole, 1) if whole else 0.0


def _average(values: List[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


class AnalyticsService:
    """Admin summaries over api_call_logs and analytics_searches"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _rows_since(self, table: str, days: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        try:
            result = self.supabase.table(table)\
                .select("*")\
                .gte("created_at", since.isoformat())\
                .order("created_at")\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error reading {table}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def api_usage(self, days: int = 7, now: Optional[datetime] = None) -> ApiUsageSummary:
        rows = self._rows_since("api_call_logs", days, now)

        by_provider: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        by_day: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for row in rows:
            by_provider[row.get("api_provider") or "unknown"].append(row)
            by_day[str(row.get("created_at") or "")[:10]].append(row)

        providers = []
        for provider, calls in sorted(by_provider.items()):
            successful = sum(1 for c in calls if c.get("success"))
            providers.append(ProviderUsage(
                api_provider=provider,
                calls=len(calls),
                successful_calls=successful,
                success_rate=_rate(successful, len(calls)),
                total_cost_usd=round(sum(float(c.get("estimated_cost_usd") or 0) for c in calls), 4),
                avg_response_time_ms=_average(
                    [c["response_time_ms"] for c in calls if c.get("response_time_ms") is not None]
                ),
            ))

        daily = [
            DailyUsage(
                date=day,
                calls=len(calls),
                cost_usd=round(sum(float(c.get("estimated_cost_usd") or 0) for c in calls), 4),
            )
            for day, calls in sorted(by_day.items())
        ]

        successful = sum(1 for r in rows if r.get("success"))
        return ApiUsageSummary(
            days=days,
            total_calls=len(rows),
            total_cost_usd=round(sum(p.total_cost_usd for p in providers), 4),
            avg_response_time_ms=_average(
                [r["response_time_ms"] for r in rows if r.get("response_time_ms") is not None]
            ),
            success_rate=_rate(successful, len(rows)),
            providers=providers,
            daily=daily,
        )

    def search_summary(self, days: int = 7, now: Optional[datetime] = None) -> SearchSummary:
        rows = self._rows_since("analytics_searches", days, now)

        by_type: Dict[str, int] = defaultdict(int)
        by_source: Dict[str, int] = defaultdict(int)
        for row in rows:
            by_type[row.get("search_type") or "unknown"] += 1
            if row.get("search_source_used"):
                by_source[row["search_source_used"]] += 1

        found_db = sum(1 for r in rows if r.get("found_in_database"))
        found_image = sum(1 for r in rows if r.get("found_via_image_matching"))
        found_web = sum(1 for r in rows if r.get("found_via_web_search"))
        found_any = sum(
            1 for r in rows
            if r.get("found_in_database") or r.get("found_via_image_matching")
            or r.get("found_via_web_search") or (r.get("results_found") or 0) > 0
        )
        return SearchSummary(
            days=days,
            total_searches=len(rows),
            found_in_database=found_db,
            found_via_image_matching=found_image,
            found_via_web_search=found_web,
            no_result=len(rows) - found_any,
            success_rate=_rate(found_any, len(rows)),
            avg_search_time_ms=_average(
                [r["total_duration_ms"] for r in rows if r.get("total_duration_ms") is not None]
            ),
            by_type=dict(by_type),
            by_source=dict(by_source),
        )
