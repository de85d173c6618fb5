"""
Cache manager for processed videos and their analyses.
"""
import math
import threading
import time
from typing import Callable, NamedTuple, Optional

from cachetools import Cache, LRUCache, TTLCache

from core.config import CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS
from models.analysis_models import AnalysisResult
from models.transcript_models import CacheEntry


class _CachedVideo(NamedTuple):
    entry: CacheEntry
    analysis: AnalysisResult


class VideoCache:
    """
    Keyed store of processed videos.

    Unbounded and non-expiring by default. With max_entries set, the least
    recently read video is evicted first; with ttl_seconds set, entries
    older than the TTL read as absent.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries or None
        self.ttl_seconds = ttl_seconds or None
        maxsize = self.max_entries or math.inf

        if self.ttl_seconds is not None:
            self._videos = TTLCache(maxsize=maxsize, ttl=self.ttl_seconds, timer=clock)
        elif self.max_entries is not None:
            self._videos = LRUCache(maxsize=maxsize)
        else:
            self._videos = Cache(maxsize=maxsize)
        # cachetools caches are not thread-safe
        self._lock = threading.RLock()

    def get(self, video_id: str) -> Optional[CacheEntry]:
        """Return the processed transcript bundle, or None."""
        cached = self._lookup(video_id)
        return cached.entry if cached else None

    def get_analysis(self, video_id: str) -> Optional[AnalysisResult]:
        """Return the analysis stored with a video, or None."""
        cached = self._lookup(video_id)
        return cached.analysis if cached else None

    def put(self, video_id: str, entry: CacheEntry, analysis: AnalysisResult) -> None:
        """Store a video and its analysis, evicting the oldest when full."""
        with self._lock:
            self._videos[video_id] = _CachedVideo(entry, analysis)

    def evict(self, video_id: str) -> bool:
        """Remove a video. Returns True if it was cached."""
        with self._lock:
            return self._videos.pop(video_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._videos.clear()

    def __contains__(self, video_id: str) -> bool:
        return self._lookup(video_id) is not None

    def __len__(self) -> int:
        with self._lock:
            if isinstance(self._videos, TTLCache):
                self._videos.expire()
            return len(self._videos)

    def _lookup(self, video_id: str) -> Optional[_CachedVideo]:
        with self._lock:
            return self._videos.get(video_id)


def build_video_cache() -> VideoCache:
    """Cache configured from CACHE_MAX_ENTRIES / CACHE_TTL_SECONDS."""
    return VideoCache(max_entries=CACHE_MAX_ENTRIES, ttl_seconds=CACHE_TTL_SECONDS)
