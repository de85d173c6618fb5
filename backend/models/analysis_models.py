"""
Data models for the LLM-derived video analysis.
"""
from dataclasses import dataclass
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class MainTopic(BaseModel):
    """Topic or section with the time it starts at."""
    model_config = ConfigDict(frozen=True)

    topic: str
    timestamp: str = Field(..., description="MM:SS or HH:MM:SS")
    description: str


class KeyConcept(BaseModel):
    """Term introduced in the video."""
    model_config = ConfigDict(frozen=True)

    concept: str
    definition: str


class TimelineEvent(BaseModel):
    """Notable moment in the video."""
    model_config = ConfigDict(frozen=True)

    time: str = Field(..., description="MM:SS or HH:MM:SS")
    event: str


class AnalysisResult(BaseModel):
    """Structured analysis of one video. Serialized with camelCase keys."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    summary: str
    main_topics: List[MainTopic] = Field(..., alias="mainTopics")
    key_concepts: List[KeyConcept] = Field(..., alias="keyConcepts")
    timeline: List[TimelineEvent]

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class AnalysisDecodeResult:
    """Tagged outcome of decoding an analysis completion."""
    analysis: Optional[AnalysisResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.analysis is not None
