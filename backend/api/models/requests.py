"""
Pydantic request models for API endpoints.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class TranscriptRequest(BaseModel):
    """Request model for loading a video transcript."""
    url: Optional[str] = Field(default=None, description="YouTube video URL")


class ChatRequest(BaseModel):
    """Request model for chatbot."""
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = Field(default=None, description="User message")
    video_id: Optional[str] = Field(default=None, alias="videoId", description="Loaded video ID")
