"""
LLM-powered transcript analysis with a deterministic fallback.
"""
import json
import logging
import re
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from core.config import (
    OLLAMA_ANALYSIS_MODEL,
    ANALYSIS_TEMPERATURE,
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_TIMEOUT_SEC,
)
from core.errors import UpstreamLLMError
from core.ollama_client import OllamaClient, OllamaError, ollama
from core.prompt_manager import PromptManager, prompt_manager
from models.analysis_models import (
    AnalysisDecodeResult,
    AnalysisResult,
    KeyConcept,
    MainTopic,
    TimelineEvent,
)
from models.transcript_models import Chunk, TranscriptItem, VideoMetadata
from services.processing.chunker import TranscriptChunker
from services.processing.utils import (
    format_duration,
    format_timestamp,
    parse_timestamp,
    truncate,
)

logger = logging.getLogger(__name__)

# Largest allowed distance between consecutive analysis timestamps (seconds)
MAX_COVERAGE_GAP_SEC = 180

FALLBACK_TOPIC_STEP = 3
FALLBACK_TIMELINE_STEP = 2
FALLBACK_DESCRIPTION_CHARS = 100
FALLBACK_EVENT_CHARS = 50


def build_transcript_text(chunks: Sequence[Chunk]) -> str:
    """Chunk-formatted transcript: one "[M:SS] text" line per chunk."""
    return "\n".join(
        f"[{format_timestamp(chunk.start_time_ms)}] {chunk.text}" for chunk in chunks
    )


def build_analysis_messages(
    chunks: Sequence[Chunk],
    metadata: VideoMetadata,
    language: str = "en",
    prompts: Optional[PromptManager] = None,
) -> List[Dict[str, str]]:
    """System and user messages for the analysis completion."""
    prompts = prompts or prompt_manager
    analysis_prompt = prompts.get_prompt("analysis_prompt", language).format(
        duration=format_duration(metadata.duration_seconds),
        title=metadata.title,
        chunk_count=len(chunks),
        transcript=build_transcript_text(chunks),
    )
    return [
        {"role": "system", "content": prompts.get_prompt("analysis_system", language)},
        {"role": "user", "content": analysis_prompt},
    ]


def decode_analysis(response_text: str) -> AnalysisDecodeResult:
    """
    Parse and schema-check an analysis completion.

    Markdown code fences around the JSON are tolerated. Never raises.
    """
    text = (response_text or "").strip()
    fence_match = re.match(r'^```(?:json)?\s*(.*?)\s*```$', text, re.DOTALL)
    if fence_match:
        text = fence_match.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return AnalysisDecodeResult(error=f"Invalid JSON: {e}")

    try:
        return AnalysisDecodeResult(analysis=AnalysisResult.model_validate(data))
    except ValidationError as e:
        return AnalysisDecodeResult(error=f"Schema mismatch: {e.error_count()} errors: {e}")


def build_fallback_analysis(
    chunks: Sequence[Chunk],
    metadata: VideoMetadata,
    language: str = "en",
    prompts: Optional[PromptManager] = None,
) -> AnalysisResult:
    """
    Deterministic analysis built from the chunk list alone.

    mainTopics takes every third chunk, timeline every second chunk.
    """
    prompts = prompts or prompt_manager
    section_label = prompts.get_prompt("fallback_section", language)

    main_topics = [
        MainTopic(
            topic=section_label.format(number=i + 1),
            timestamp=format_timestamp(chunk.start_time_ms),
            description=truncate(chunk.text, FALLBACK_DESCRIPTION_CHARS),
        )
        for i, chunk in enumerate(chunks[::FALLBACK_TOPIC_STEP])
    ]
    timeline = [
        TimelineEvent(
            time=format_timestamp(chunk.start_time_ms),
            event=truncate(chunk.text, FALLBACK_EVENT_CHARS),
        )
        for chunk in chunks[::FALLBACK_TIMELINE_STEP]
    ]

    return AnalysisResult(
        summary=prompts.get_prompt("fallback_summary", language).format(
            title=metadata.title,
            duration=format_duration(metadata.duration_seconds),
        ),
        main_topics=main_topics,
        key_concepts=[
            KeyConcept(
                concept=prompts.get_prompt("fallback_concept", language),
                definition=prompts.get_prompt("fallback_definition", language),
            )
        ],
        timeline=timeline,
    )


def find_coverage_gaps(analysis: AnalysisResult, max_gap_sec: int = MAX_COVERAGE_GAP_SEC) -> List[str]:
    """
    Describe temporal coverage problems in an analysis.

    Checks:
        - first timestamp later than max_gap_sec
        - gap between consecutive sorted timestamps above max_gap_sec
        - timestamps that cannot be parsed
    """
    issues = []
    raw = [t.timestamp for t in analysis.main_topics] + [e.time for e in analysis.timeline]

    seconds = []
    for value in raw:
        try:
            seconds.append(parse_timestamp(value))
        except ValueError:
            issues.append(f"Unparseable timestamp: {value!r}")
    seconds.sort()

    for i, time in enumerate(seconds):
        if i == 0:
            if time > max_gap_sec:
                issues.append(f"First timestamp starts late at {format_duration(time)}")
        elif time - seconds[i - 1] > max_gap_sec:
            issues.append(
                f"Gap of {time - seconds[i - 1]}s between "
                f"{format_duration(seconds[i - 1])} and {format_duration(time)}"
            )
    return issues


class TranscriptAnalyzer:
    """Requests a structured analysis for a transcript."""

    def __init__(
        self,
        llm: Optional[OllamaClient] = None,
        chunker: Optional[TranscriptChunker] = None,
        prompts: Optional[PromptManager] = None,
        model_name: str = OLLAMA_ANALYSIS_MODEL,
        temperature: float = ANALYSIS_TEMPERATURE,
        max_tokens: int = ANALYSIS_MAX_TOKENS,
        timeout: float = ANALYSIS_TIMEOUT_SEC,
    ):
        self.llm = llm or ollama
        self.chunker = chunker or TranscriptChunker()
        self.prompts = prompts or prompt_manager
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def analyze(
        self,
        transcript: Sequence[TranscriptItem],
        metadata: VideoMetadata,
        language: str = "en",
    ) -> AnalysisResult:
        """
        Analyze a transcript.

        Returns the decoded analysis, or the fallback analysis when the
        completion cannot be decoded.

        Raises:
            UpstreamLLMError: if the completion call itself fails
        """
        chunks, _ = self.chunker.chunk(transcript)
        messages = build_analysis_messages(chunks, metadata, language, self.prompts)

        try:
            response_text = self.llm.chat(
                messages,
                model=self.model_name,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                format="json",
                timeout=self.timeout,
            )
        except OllamaError as e:
            logger.error("Analysis request failed for %r: %s", metadata.title, e)
            raise UpstreamLLMError(f"Failed to analyze transcript: {e}") from e

        decoded = decode_analysis(response_text)
        if not decoded.ok:
            logger.error("Analysis parse error: %s", decoded.error)
            logger.error("Response text: %s", (response_text or "")[:500])
            return build_fallback_analysis(chunks, metadata, language, self.prompts)

        for issue in find_coverage_gaps(decoded.analysis):
            logger.warning("Analysis coverage warning for %r: %s", metadata.title, issue)

        return decoded.analysis
