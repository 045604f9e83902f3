import logging
import time
from typing import List, Dict, Any, Optional

import httpx
from supabase import Client
from fastapi import HTTPException

from app.config import settings
from app.core.providers import check_url_reachable, elapsed_ms
from app.modules.matching.replicate_client import ReplicateClient
from app.modules.matching.similarity import parse_embedding, prefilter_by_text, rank_matches
from app.modules.matching.schemas import (
    MatchResponse, BadgeMatch, AnalyzeResponse, AnalysisResult,
    ProcessEmbeddingsResponse, EmbeddingProcessResult,
    ConfirmationCreate, ConfirmationResponse, ConfirmationStats
)

logger = logging.getLogger(__name__)

# Best match confidence at which an analysis counts as found in the catalog
FOUND_LOCALLY_MIN_CONFIDENCE = 50

CANDIDATE_SELECT = "badge_id, embedding, badges(id, name, description, year, category, maker_id, team_name, image_url)"


def to_data_url(image_base64: str) -> str:
    if image_base64.startswith("data:") or image_base64.startswith("http://") or image_base64.startswith("https://"):
        return image_base64
    return f"data:image/jpeg;base64,{image_base64}"


class MatchingService:
    def __init__(
        self,
        supabase: Client,
        replicate: ReplicateClient,
        threshold: Optional[float] = None,
        top_n: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.supabase = supabase
        self.replicate = replicate
        self.threshold = settings.match_threshold if threshold is None else threshold
        self.top_n = settings.match_top_n if top_n is None else top_n
        self.transport = transport

    def load_candidates(self) -> List[Dict[str, Any]]:
        """Every stored embedding joined to its badge."""
        try:
            result = self.supabase.table("badge_embeddings")\
                .select(CANDIDATE_SELECT)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading badge embeddings: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to load badge embeddings: {str(e)}")
        candidates = []
        for row in result.data or []:
            embedding = parse_embedding(row.get("embedding"))
            if not embedding:
                continue
            candidates.append({
                "badge": row.get("badges") or {"id": row.get("badge_id")},
                "embedding": embedding,
            })
        return candidates

    async def match_badge_image(self, image_base64: str, user_text: Optional[str] = None, debug: bool = False) -> MatchResponse:
        """Embed the image and rank it against stored badge embeddings"""
        started = time.monotonic()
        info: Dict[str, Any] = {"threshold": self.threshold, "top_n": self.top_n}

        embedding_result = await self.replicate.embed_image(to_data_url(image_base64))
        info["embedding_status"] = embedding_result.status
        info["poll_attempts"] = embedding_result.attempts
        if not embedding_result.ok:
            logger.warning(f"Image embedding unavailable ({embedding_result.status}): {embedding_result.error}")
            info["error"] = embedding_result.error
            info["duration_ms"] = elapsed_ms(started)
            return MatchResponse(matches=[], debug=info if debug else None)

        candidates = self.load_candidates()
        filtered = prefilter_by_text(candidates, user_text)
        info["candidates"] = len(candidates)
        info["candidates_after_text_filter"] = len(filtered)
        if len(filtered) != len(candidates):
            logger.info(f"Text pre-filtering narrowed {len(candidates)} candidates to {len(filtered)}")

        matches = rank_matches(embedding_result.embedding, filtered, threshold=self.threshold, top_n=self.top_n)
        info["duration_ms"] = elapsed_ms(started)
        logger.info(f"Badge matching found {len(matches)} matches among {len(filtered)} candidates")
        return MatchResponse(
            matches=[BadgeMatch(**m) for m in matches],
            debug=info if debug else None,
        )

    def record_search(self, duration_ms: int, results_found: int, best_confidence: int) -> None:
        """Insert an analytics_searches row; failures are logged only."""
        found = best_confidence >= FOUND_LOCALLY_MIN_CONFIDENCE
        try:
            self.supabase.table("analytics_searches").insert({
                "search_type": "image_analysis",
                "image_matching_duration_ms": duration_ms,
                "total_duration_ms": duration_ms,
                "results_found": results_found,
                "best_confidence_score": best_confidence,
                "found_in_database": found,
                "found_via_web_search": False,
                "found_via_image_matching": found,
                "search_source_used": "image_matching" if found else None,
            }).execute()
        except Exception as e:
            logger.error(f"Analytics tracking error: {e}")

    async def analyze_badge_image(self, image_base64: str, debug: bool = False) -> AnalyzeResponse:
        """Match against the local catalog and either report the badge or suggest adding it"""
        started = time.monotonic()
        result = await self.match_badge_image(image_base64, debug=debug)
        best_confidence = result.matches[0].confidence if result.matches else 0
        self.record_search(elapsed_ms(started), len(result.matches), best_confidence)

        if best_confidence >= FOUND_LOCALLY_MIN_CONFIDENCE:
            best = result.matches[0].badge
            return AnalyzeResponse(
                analysis=AnalysisResult(
                    name=best.get("name"),
                    description=best.get("description"),
                    confidence=best_confidence,
                ),
                matches=result.matches,
                can_add_to_database=False,
                debug=result.debug,
            )
        return AnalyzeResponse(
            analysis=None,
            matches=result.matches,
            can_add_to_database=True,
            suggest_new_badge=True,
            message="Badge not found in database. Would you like to add it for review?",
            debug=result.debug,
        )

    async def process_badge_embeddings(self, batch_size: Optional[int] = None) -> ProcessEmbeddingsResponse:
        """Embed badge images that have no stored embedding yet, a few at a time"""
        batch_size = batch_size or settings.embedding_batch_size
        try:
            badges_result = self.supabase.table("badges")\
                .select("id, name, image_url")\
                .execute()
            embeddings_result = self.supabase.table("badge_embeddings")\
                .select("badge_id")\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching badges for embedding: {e}")
            raise HTTPException(status_code=500, detail=f"Error fetching badges: {str(e)}")

        existing = {row["badge_id"] for row in embeddings_result.data or []}
        pending = [
            b for b in badges_result.data or []
            if b.get("image_url") and b["id"] not in existing
        ]
        if not pending:
            return ProcessEmbeddingsResponse(
                processed=0, total=0, results=[],
                message="All badges already have embeddings",
            )

        processed = 0
        results: List[EmbeddingProcessResult] = []
        for badge in pending[:batch_size]:
            logger.info(f"Processing embedding for badge {badge['id']} ({badge.get('name')})")
            reachable, status_code = await check_url_reachable(badge["image_url"], self.transport)
            if not reachable:
                results.append(EmbeddingProcessResult(
                    badge_id=badge["id"], success=False,
                    error=f"Image URL not accessible: {status_code}",
                ))
                continue

            embedding_result = await self.replicate.embed_image(badge["image_url"])
            if not embedding_result.ok:
                results.append(EmbeddingProcessResult(
                    badge_id=badge["id"], success=False,
                    error=embedding_result.error or embedding_result.status,
                ))
                continue

            try:
                self.supabase.table("badge_embeddings").insert({
                    "badge_id": badge["id"],
                    "embedding": embedding_result.embedding,
                }).execute()
            except Exception as e:
                logger.error(f"Error storing embedding for badge {badge['id']}: {e}")
                results.append(EmbeddingProcessResult(
                    badge_id=badge["id"], success=False, error=f"Database error: {str(e)}"
                ))
                continue
            results.append(EmbeddingProcessResult(badge_id=badge["id"], success=True))
            processed += 1

        return ProcessEmbeddingsResponse(
            processed=processed,
            total=len(pending),
            results=results,
            message=f"Processed {processed} badges successfully",
        )

    def confirm_match(self, user_id: str, data: ConfirmationCreate) -> ConfirmationResponse:
        """Record that a suggested match was correct"""
        try:
            result = self.supabase.table("badge_confirmations").insert({
                "user_id": user_id,
                "badge_id": data.badge_id,
                "confidence_at_time": data.confidence_at_time,
                "similarity_score": data.similarity_score,
                "confirmation_type": data.confirmation_type,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to confirm match")
            return ConfirmationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_confirmation_stats(self, badge_id: str) -> ConfirmationStats:
        try:
            result = self.supabase.table("badge_confirmations")\
                .select("confirmation_type, confidence_at_time")\
                .eq("badge_id", badge_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        rows = result.data or []
        total = len(rows)
        correct = len([r for r in rows if r.get("confirmation_type") == "correct_match"])
        avg_confidence = round(sum(r.get("confidence_at_time") or 0 for r in rows) / total) if total else 0
        return ConfirmationStats(
            badge_id=badge_id,
            total_confirmations=total,
            correct_matches=correct,
            avg_confidence=avg_confidence,
            success_rate=round(correct / total * 100) if total else 0,
        )
