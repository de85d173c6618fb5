"""
Pydantic response models for API endpoints.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class TranscriptItemModel(BaseModel):
    """Timed caption line."""
    text: str
    offsetMs: float
    durationMs: float


class VideoMetadataModel(BaseModel):
    """Video metadata."""
    title: str
    durationSeconds: float
    author: str


class MainTopicModel(BaseModel):
    topic: str
    timestamp: str
    description: str


class KeyConceptModel(BaseModel):
    concept: str
    definition: str


class TimelineEventModel(BaseModel):
    time: str
    event: str


class AnalysisModel(BaseModel):
    """Video analysis."""
    summary: str
    mainTopics: List[MainTopicModel] = []
    keyConcepts: List[KeyConceptModel] = []
    timeline: List[TimelineEventModel] = []


class TranscriptResponse(BaseModel):
    """Response model for transcript loading."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    metadata: VideoMetadataModel
    transcript: List[TranscriptItemModel]
    analysis: AnalysisModel
    language: str
    caption_type: str = Field(..., alias="captionType")


class ChatResponse(BaseModel):
    """Response model for chatbot."""
    response: str


class ErrorResponse(BaseModel):
    """Body of every failed request."""
    error: str
    kind: Optional[str] = None
