"""
Main pipeline orchestration for loading videos and answering chat questions.
"""
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from core.config import (
    OLLAMA_CHAT_MODEL,
    CHAT_TEMPERATURE,
    CHAT_MAX_TOKENS,
    CHAT_TIMEOUT_SEC,
)
from core.errors import AcquisitionError, CacheMissError, InvalidInputError, UpstreamLLMError
from core.ollama_client import OllamaClient, OllamaError, ollama
from core.prompt_manager import PromptManager, prompt_manager
from models.analysis_models import AnalysisResult
from models.transcript_models import CacheEntry, VideoMetadata
from services.analysis.analyzer import TranscriptAnalyzer
from services.ingestion.cache_manager import VideoCache, build_video_cache
from services.ingestion.transcript_sources import TranscriptSource, build_transcript_source
from services.ingestion.youtube_fetcher import (
    VideoInfoFetcher,
    extract_video_id,
    video_info_fetcher,
)
from services.processing.chunker import TranscriptChunker
from services.retrieval.context_builder import ContextBuilder
from services.retrieval.query_matcher import QueryMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    """Outcome of loading a video."""
    video_id: str
    entry: CacheEntry
    analysis: AnalysisResult
    from_cache: bool


class VideoChatPipeline:
    """Orchestrates transcript loading and chat over a loaded transcript."""

    def __init__(
        self,
        source: TranscriptSource,
        analyzer: Optional[TranscriptAnalyzer] = None,
        cache: Optional[VideoCache] = None,
        info_fetcher: Optional[VideoInfoFetcher] = None,
        chunker: Optional[TranscriptChunker] = None,
        matcher: Optional[QueryMatcher] = None,
        context_builder: Optional[ContextBuilder] = None,
        llm: Optional[OllamaClient] = None,
        prompts: Optional[PromptManager] = None,
    ):
        self.source = source
        self.llm = llm or ollama
        self.prompts = prompts or prompt_manager
        self.chunker = chunker or TranscriptChunker()
        self.analyzer = analyzer or TranscriptAnalyzer(llm=self.llm, chunker=self.chunker, prompts=self.prompts)
        self.cache = cache if cache is not None else VideoCache()
        self.info_fetcher = info_fetcher or video_info_fetcher
        self.matcher = matcher or QueryMatcher()
        self.context_builder = context_builder or ContextBuilder(self.prompts)

        # video_id -> (lock, callers holding or waiting on it)
        self._locks: Dict[str, Tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    def load_video(self, url: Optional[str]) -> LoadResult:
        """
        Load, chunk and analyze a video, or return it from the cache.

        Pipeline Stages:
        1. Resolve the video ID
        2. Cache lookup (short-circuits everything below)
        3. Transcript acquisition
        4. Chunking and metadata
        5. LLM analysis
        6. Cache store

        Raises:
            InvalidInputError: missing URL or no video ID in it
            AcquisitionError: no transcript from any source
            UpstreamLLMError: the analysis call failed
        """
        if not url or not url.strip():
            raise InvalidInputError("URL is required")

        video_id = extract_video_id(url)
        if not video_id:
            logger.info("Invalid video ID extracted from URL: %s", url)
            raise InvalidInputError("Invalid YouTube URL")

        cached = self._cached(video_id)
        if cached:
            logger.info("Returning cached data for video: %s", video_id)
            return cached

        # One expensive load per video at a time; later callers hit the cache
        with self._load_lock(video_id):
            cached = self._cached(video_id)
            if cached:
                return cached

            logger.info("Fetching transcript for video: %s", video_id)
            try:
                fetched = self.source.fetch(video_id)
            except AcquisitionError as e:
                logger.error("Transcript fetch failed for %s: %s", video_id, e)
                raise AcquisitionError(AcquisitionError.USER_MESSAGE) from e

            chunks, total_duration_ms = self.chunker.chunk(fetched.items)
            logger.info(
                "Processed transcript for %s: %d items, %d chunks, %.0fms",
                video_id, len(fetched.items), len(chunks), total_duration_ms,
            )

            title, author = self.info_fetcher.fetch_video_info(video_id)
            metadata = VideoMetadata(
                title=title,
                duration_seconds=total_duration_ms / 1000,
                author=author,
            )

            logger.info("Starting transcript analysis for %s", video_id)
            analysis = self.analyzer.analyze(fetched.items, metadata, fetched.language)

            entry = CacheEntry(
                metadata=metadata,
                transcript=fetched.items,
                chunks=chunks,
                language=fetched.language,
                caption_type=fetched.caption_type,
            )
            self.cache.put(video_id, entry, analysis)
            logger.info("Data cached for video: %s", video_id)

            return LoadResult(video_id=video_id, entry=entry, analysis=analysis, from_cache=False)

    def chat(self, video_id: Optional[str], message: Optional[str]) -> str:
        """
        Answer a question about a loaded video.

        Raises:
            InvalidInputError: empty message
            CacheMissError: the video was never loaded
            UpstreamLLMError: the chat completion failed
        """
        if not message or not message.strip():
            raise InvalidInputError("Message is required")

        entry = self.cache.get(video_id) if video_id else None
        analysis = self.cache.get_analysis(video_id) if video_id else None
        if entry is None or analysis is None:
            raise CacheMissError()

        relevant_chunks = self.matcher.match(entry.chunks, message, analysis)
        logger.debug("Matched %d of %d chunks for %s", len(relevant_chunks), len(entry.chunks), video_id)

        context = self.context_builder.build(
            message, entry.metadata, analysis, relevant_chunks, entry.language
        )
        messages = [
            {"role": "system", "content": self.prompts.get_prompt("chat_system", entry.language)},
            {"role": "user", "content": context},
        ]

        try:
            return self.llm.chat(
                messages,
                model=OLLAMA_CHAT_MODEL,
                temperature=CHAT_TEMPERATURE,
                max_tokens=CHAT_MAX_TOKENS,
                timeout=CHAT_TIMEOUT_SEC,
            )
        except OllamaError as e:
            logger.error("Chat completion failed for %s: %s", video_id, e)
            raise UpstreamLLMError(f"Failed to process chat message: {e}") from e

    def _cached(self, video_id: str) -> Optional[LoadResult]:
        entry = self.cache.get(video_id)
        analysis = self.cache.get_analysis(video_id)
        if entry is None or analysis is None:
            return None
        return LoadResult(video_id=video_id, entry=entry, analysis=analysis, from_cache=True)

    @contextmanager
    def _load_lock(self, video_id: str) -> Iterator[None]:
        """Hold the per-video load lock, dropping it once no caller needs it."""
        with self._locks_guard:
            lock, callers = self._locks.get(video_id, (None, 0))
            lock = lock or threading.Lock()
            self._locks[video_id] = (lock, callers + 1)

        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, callers = self._locks[video_id]
                if callers == 1:
                    del self._locks[video_id]
                else:
                    self._locks[video_id] = (lock, callers - 1)


_pipeline: Optional[VideoChatPipeline] = None
_pipeline_guard = threading.Lock()


def get_pipeline() -> VideoChatPipeline:
    """Process-wide pipeline, built on first use."""
    global _pipeline
    with _pipeline_guard:
        if _pipeline is None:
            _pipeline = VideoChatPipeline(
                source=build_transcript_source(),
                cache=build_video_cache(),
            )
        return _pipeline
