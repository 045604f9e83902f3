from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

FeedbackType = Literal["helpful", "not_helpful", "incorrect", "spam"]


class WebSearchTestRequest(BaseModel):
    # query, url and prompt_template are checked by the service (400 when missing)
    query: Optional[str] = None
    source_id: Optional[str] = None
    url: Optional[str] = None
    prompt_template: Optional[str] = None


class WebSearchTestResponse(BaseModel):
    success: bool
    result: Optional[Any] = None
    raw_response: Dict[str, Any]
    query: str
    source_id: Optional[str] = None
    prompt_used: str


class ReverseImageRequest(BaseModel):
    image_base64: str = Field(..., min_length=1)


class StatusUpdate(BaseModel):
    stage: str
    status: str
    message: str


class ReverseImageAnalysis(BaseModel):
    name: str
    description: str
    external_link: Optional[str] = None
    thumbnail: Optional[str] = None
    confidence: int = 90
    source: str = "Google Image Search"
    search_source: str = "Google Image Search"
    found_via_google: bool = True


class ReverseImageResponse(BaseModel):
    analysis: Optional[ReverseImageAnalysis] = None
    status_updates: List[StatusUpdate] = Field(default_factory=list)
    should_continue_to_ai: bool = False
    error: Optional[str] = None


class AIAnalysisRequest(BaseModel):
    image_base64: str = Field(..., min_length=1)


class AIAnalysisResult(BaseModel):
    name: str = "Unknown Electronic Badge"
    description: str = "Electronic conference or hacker badge"
    maker: Optional[str] = None
    category: Optional[str] = None
    confidence: int = 50
    search_source: str = "AI Analysis"
    found_via_ai: bool = True
    error: Optional[str] = None


class AIAnalysisResponse(BaseModel):
    analysis: AIAnalysisResult
    status_updates: List[StatusUpdate] = Field(default_factory=list)
    duration_ms: int = 0


class FeedbackCreate(BaseModel):
    search_query: str = Field(..., min_length=1)
    ai_result: Optional[Any] = None
    feedback_type: FeedbackType
    source_url: Optional[str] = None
    notes: Optional[str] = None


class FeedbackResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    search_query: str
    ai_result: Optional[Any] = None
    feedback_type: str
    source_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FeedbackStats(BaseModel):
    helpful: int = 0
    not_helpful: int = 0
    incorrect: int = 0
    spam: int = 0
    total: int = 0
