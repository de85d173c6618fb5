"""
Data models for transcripts and chunks.
"""
from dataclasses import dataclass, field
from typing import List, Dict, Any


@dataclass(frozen=True)
class TranscriptItem:
    """Single timed caption line with whitespace-normalized text."""
    text: str
    offset_ms: float
    duration_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "offsetMs": self.offset_ms,
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True)
class Chunk:
    """Contiguous span of transcript items with its time window."""
    text: str
    start_time_ms: float
    end_time_ms: float
    items: List[TranscriptItem] = field(default_factory=list)


@dataclass(frozen=True)
class VideoMetadata:
    """Video-level facts used in prompts and responses."""
    title: str
    duration_seconds: float
    author: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "durationSeconds": self.duration_seconds,
            "author": self.author,
        }


@dataclass(frozen=True)
class FetchedTranscript:
    """Output of a transcript source."""
    items: List[TranscriptItem]
    language: str = "en"  # caption language tag as reported by YouTube
    caption_type: str = "auto"  # 'manual' | 'auto'


@dataclass(frozen=True)
class CacheEntry:
    """Processed transcript bundle for one video"""
    metadata: VideoMetadata
    transcript: List[TranscriptItem]
    chunks: List[Chunk]
    language: str
    caption_type: str
