import json
import logging
import re
import time
from typing import Any, Dict, Optional

import httpx
from supabase import Client
from fastapi import HTTPException

from app.core.providers import ProviderError, elapsed_ms
from app.modules.matching.service import to_data_url
from app.modules.search.clients import PerplexityClient, SerpApiClient, OpenAIVisionClient
from app.modules.search.schemas import (
    WebSearchTestRequest, WebSearchTestResponse,
    ReverseImageResponse, ReverseImageAnalysis, StatusUpdate,
    AIAnalysisResponse, AIAnalysisResult,
    FeedbackCreate, FeedbackResponse, FeedbackStats
)

logger = logging.getLogger(__name__)

REVERSE_IMAGE_CONFIDENCE = 90

_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)
AI_ANALYSIS_FIELDS = ("name", "description", "maker", "category", "confidence")


def parse_ai_analysis(raw: Dict[str, Any]) -> AIAnalysisResult:
    """First JSON object in the model's answer merged over the defaults.

    Answers without a usable JSON block keep the default analysis.
    """
    try:
        content = raw["choices"][0]["message"]["content"] or ""
        match = _JSON_BLOCK.search(content)
        if not match:
            return AIAnalysisResult()
        parsed = json.loads(match.group(0))
        return AIAnalysisResult(**{k: parsed[k] for k in AI_ANALYSIS_FIELDS if parsed.get(k) is not None})
    except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
        logger.info(f"Could not parse AI analysis, using defaults: {e}")
        return AIAnalysisResult()


class SearchService:
    def __init__(
        self,
        supabase: Client,
        perplexity: PerplexityClient,
        serpapi: SerpApiClient,
        openai: Optional[OpenAIVisionClient] = None
    ):
        self.supabase = supabase
        self.perplexity = perplexity
        self.serpapi = serpapi
        self.openai = openai or OpenAIVisionClient(None)

    async def test_web_search(self, request: WebSearchTestRequest) -> WebSearchTestResponse:
        """Run a prompt template against a chat-completions search endpoint"""
        if not request.query or not request.url or not request.prompt_template:
            raise HTTPException(status_code=400, detail="Missing required parameters: query, url, promptTemplate")
        if not self.perplexity.api_key:
            raise HTTPException(status_code=500, detail="PERPLEXITY_API_KEY not configured")

        prompt = request.prompt_template.replace("{query}", request.query, 1)
        logger.info(f"Testing web search for query '{request.query}' (source: {request.source_id})")
        try:
            raw = await self.perplexity.chat(request.url, prompt)
        except ProviderError as e:
            logger.error(f"Web search API error: {e.body}")
            raise HTTPException(
                status_code=e.status_code or 502,
                detail={"error": e.message, "details": e.body}
            )
        except httpx.HTTPError as e:
            raise HTTPException(status_code=502, detail=f"Web search request failed: {str(e)}")

        result = None
        choices = raw.get("choices") or []
        if choices and choices[0].get("message"):
            content = choices[0]["message"].get("content") or ""
            try:
                result = json.loads(content)
            except ValueError:
                result = {"text": content, "parsed": False}

        return WebSearchTestResponse(
            success=True,
            result=result,
            raw_response=raw,
            query=request.query,
            source_id=request.source_id,
            prompt_used=prompt,
        )

    async def reverse_image_search(self, image_base64: str) -> ReverseImageResponse:
        """Google reverse image search; the top image result becomes the analysis"""
        updates = [StatusUpdate(stage="google_search", status="searching", message="Trying Google reverse image search...")]
        if not self.serpapi.api_key:
            updates.append(StatusUpdate(
                stage="google_search", status="skipped",
                message="Google search unavailable - SERPAPI_KEY not configured"
            ))
            return ReverseImageResponse(
                analysis=None, status_updates=updates,
                should_continue_to_ai=True, error="SERPAPI_KEY not configured"
            )

        started = time.monotonic()
        try:
            data = await self.serpapi.reverse_image(image_base64)
        except ProviderError as e:
            logger.warning(f"Reverse image search failed: {e}")
            updates.append(StatusUpdate(
                stage="google_search", status="failed",
                message=f"Google search failed ({e.status_code})" if e.status_code else f"Google search error: {e.message}"
            ))
            return ReverseImageResponse(analysis=None, status_updates=updates, should_continue_to_ai=True)
        except httpx.HTTPError as e:
            logger.error(f"Reverse image search error: {e}")
            updates.append(StatusUpdate(stage="google_search", status="failed", message=f"Google search error: {str(e)}"))
            return ReverseImageResponse(analysis=None, status_updates=updates, should_continue_to_ai=True)

        if data.get("error"):
            updates.append(StatusUpdate(stage="google_search", status="failed", message=f"Google API error: {data['error']}"))
            return ReverseImageResponse(analysis=None, status_updates=updates, should_continue_to_ai=True)

        image_results = data.get("image_results") or []
        if not image_results:
            updates.append(StatusUpdate(stage="google_search", status="failed", message="No results found in Google search"))
            return ReverseImageResponse(analysis=None, status_updates=updates, should_continue_to_ai=True)

        top = image_results[0]
        analysis = ReverseImageAnalysis(
            name=top.get("title") or "Unknown Badge",
            description=top.get("snippet") or "Found via Google reverse image search",
            external_link=top.get("link"),
            thumbnail=top.get("thumbnail"),
            confidence=REVERSE_IMAGE_CONFIDENCE,
        )
        updates.append(StatusUpdate(stage="google_search", status="success", message=f"Found: {analysis.name}"))
        self.record_web_search(elapsed_ms(started))
        return ReverseImageResponse(analysis=analysis, status_updates=updates)

    def record_web_search(self, duration_ms: int) -> None:
        try:
            self.supabase.table("analytics_searches").insert({
                "search_type": "google_image_search",
                "total_duration_ms": duration_ms,
                "results_found": 1,
                "best_confidence_score": REVERSE_IMAGE_CONFIDENCE,
                "found_in_database": False,
                "found_via_web_search": True,
                "found_via_image_matching": False,
                "search_source_used": "Google Image Search",
            }).execute()
        except Exception as e:
            logger.error(f"Analytics tracking error: {e}")

    async def ai_analysis(self, image_base64: str) -> AIAnalysisResponse:
        """Identify a badge photo with the vision model; the last step after matching and reverse image search"""
        if not self.openai.api_key:
            raise HTTPException(status_code=500, detail="OPENAI_API_KEY not configured")

        updates = [
            StatusUpdate(stage="ai_analysis", status="searching", message="Running AI analysis as fallback..."),
            StatusUpdate(stage="ai_analysis", status="processing", message="Analyzing badge features with AI..."),
        ]
        started = time.monotonic()
        try:
            raw = await self.openai.analyze_image(to_data_url(image_base64))
        except (ProviderError, httpx.HTTPError) as e:
            logger.error(f"AI analysis error: {e}")
            duration = elapsed_ms(started)
            updates.append(StatusUpdate(stage="ai_analysis", status="failed", message=f"AI analysis failed: {e}"))
            self.record_ai_search(duration, None)
            analysis = AIAnalysisResult(
                name="Unknown Badge",
                description="Could not identify this badge",
                confidence=0,
                found_via_ai=False,
                error="AI analysis failed",
            )
            return AIAnalysisResponse(analysis=analysis, status_updates=updates, duration_ms=duration)

        analysis = parse_ai_analysis(raw)
        duration = elapsed_ms(started)
        updates.append(StatusUpdate(
            stage="ai_analysis", status="success",
            message=f"AI identified: {analysis.name} ({analysis.confidence}% confidence)"
        ))
        logger.info(f"AI analysis complete: '{analysis.name}' ({analysis.confidence}% confidence)")
        self.record_ai_search(duration, analysis)
        return AIAnalysisResponse(analysis=analysis, status_updates=updates, duration_ms=duration)

    def record_ai_search(self, duration_ms: int, analysis: Optional[AIAnalysisResult]) -> None:
        """analytics_searches row for an AI analysis; analysis is None when the call failed"""
        try:
            self.supabase.table("analytics_searches").insert({
                "search_type": "ai_analysis",
                "ai_analysis_duration_ms": duration_ms,
                "total_duration_ms": duration_ms,
                "results_found": 1 if analysis else 0,
                "best_confidence_score": analysis.confidence if analysis else 0,
                "found_in_database": False,
                "found_via_web_search": False,
                "found_via_image_matching": False,
                "search_source_used": "AI Analysis" if analysis else "AI Analysis Failed",
            }).execute()
        except Exception as e:
            logger.error(f"Analytics tracking error: {e}")

    def submit_feedback(self, data: FeedbackCreate, user_id: Optional[str] = None) -> FeedbackResponse:
        try:
            result = self.supabase.table("ai_search_feedback").insert({
                "user_id": user_id,
                "search_query": data.search_query,
                "ai_result": data.ai_result,
                "feedback_type": data.feedback_type,
                "source_url": data.source_url,
                "notes": data.notes,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to submit feedback")
            return FeedbackResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_feedback_stats(self, search_query: str) -> FeedbackStats:
        try:
            result = self.supabase.table("ai_search_feedback")\
                .select("feedback_type")\
                .eq("search_query", search_query)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        stats = FeedbackStats(total=len(result.data or []))
        for row in result.data or []:
            feedback_type = row.get("feedback_type")
            if feedback_type in ("helpful", "not_helpful", "incorrect", "spam"):
                setattr(stats, feedback_type, getattr(stats, feedback_type) + 1)
        return stats
