from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class MatchRequest(BaseModel):
    image_base64: str = Field(..., min_length=1)  # raw base64 or a data: URL
    user_text: Optional[str] = None
    debug: bool = False


class BadgeMatch(BaseModel):
    badge: Dict[str, Any]
    similarity: float
    confidence: int


class MatchResponse(BaseModel):
    matches: List[BadgeMatch]
    debug: Optional[Dict[str, Any]] = None


class AnalysisResult(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    confidence: int
    search_source: str = "Local Database"
    found_locally: bool = True


class AnalyzeResponse(BaseModel):
    analysis: Optional[AnalysisResult] = None
    matches: List[BadgeMatch]
    can_add_to_database: bool
    suggest_new_badge: bool = False
    message: Optional[str] = None
    debug: Optional[Dict[str, Any]] = None


class ProcessEmbeddingsRequest(BaseModel):
    batch_size: Optional[int] = Field(None, ge=1, le=50)


class EmbeddingProcessResult(BaseModel):
    badge_id: str
    success: bool
    error: Optional[str] = None


class ProcessEmbeddingsResponse(BaseModel):
    processed: int
    total: int
    results: List[EmbeddingProcessResult]
    message: str


class ConfirmationCreate(BaseModel):
    badge_id: str
    similarity_score: float = Field(..., ge=0, le=1)
    confidence_at_time: int = Field(..., ge=0, le=100)
    confirmation_type: str = "correct_match"


class ConfirmationResponse(BaseModel):
    id: str
    user_id: str
    badge_id: str
    similarity_score: Optional[float] = None
    confidence_at_time: Optional[int] = None
    confirmation_type: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConfirmationStats(BaseModel):
    badge_id: str
    total_confirmations: int
    correct_matches: int
    avg_confidence: int
    success_rate: int
