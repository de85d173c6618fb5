"""
Query-to-chunk matching for chat requests.
"""
import logging
import re
from typing import List, Optional, Sequence

from models.analysis_models import AnalysisResult
from models.transcript_models import Chunk
from services.processing.utils import parse_timestamp

logger = logging.getLogger(__name__)

# Seconds on either side of a referenced timestamp
TIME_WINDOW_SEC = 300
# Lexical fallback ignores words of this length or shorter
MIN_WORD_LENGTH = 3

TIMESTAMP_PATTERN = re.compile(r'(\d{1,2}:)?(\d{1,2}:\d{2}|\d{1,2})', re.ASCII)


class QueryMatcher:
    """
    Selects the chunks relevant to a chat query.

    Strategies, first applicable wins:
        1. Timestamp in the query: chunks near that time (may be empty)
        2. Query names an analysis topic that has a timestamp: chunks near it
        3. Lexical: chunks containing any query word longer than 3 chars
    """

    def __init__(self, window_sec: int = TIME_WINDOW_SEC):
        self.window_sec = window_sec

    def match(
        self,
        chunks: Sequence[Chunk],
        query: str,
        analysis: AnalysisResult,
    ) -> List[Chunk]:
        """Return the relevant chunks in their original order."""
        target_seconds = self.find_query_timestamp(query)
        if target_seconds is not None:
            logger.debug("Timestamp match at %ss for query %r", target_seconds, query)
            return self.chunks_near(chunks, target_seconds)

        query_lower = query.lower()
        topic_seconds = self._match_topic_time(query_lower, analysis)
        if topic_seconds is not None:
            logger.debug("Topic match at %ss for query %r", topic_seconds, query)
            return self.chunks_near(chunks, topic_seconds)

        return self.lexical_match(chunks, query_lower)

    @staticmethod
    def find_query_timestamp(query: str) -> Optional[int]:
        """Seconds for the first timestamp-like token in the query, if any."""
        time_match = TIMESTAMP_PATTERN.search(query)
        if not time_match:
            return None
        try:
            return parse_timestamp(time_match.group(0))
        except ValueError:
            logger.warning("Ignoring unparseable timestamp %r in query", time_match.group(0))
            return None

    def chunks_near(self, chunks: Sequence[Chunk], target_seconds: float) -> List[Chunk]:
        """Chunks whose [start, end] interval intersects target ± window."""
        low = target_seconds - self.window_sec
        high = target_seconds + self.window_sec
        return [
            chunk for chunk in chunks
            if chunk.start_time_ms / 1000 <= high and chunk.end_time_ms / 1000 >= low
        ]

    @staticmethod
    def lexical_match(chunks: Sequence[Chunk], query_lower: str) -> List[Chunk]:
        words = [w for w in query_lower.split() if len(w) > MIN_WORD_LENGTH]
        if not words:
            return []
        results = []
        for chunk in chunks:
            chunk_text = chunk.text.lower()
            if any(word in chunk_text for word in words):
                results.append(chunk)
        return results

    @staticmethod
    def _match_topic_time(query_lower: str, analysis: AnalysisResult) -> Optional[int]:
        """Seconds of the first matched topic, or None to fall through."""
        matched_topic = next(
            (t for t in analysis.main_topics if mentions(query_lower, t.topic)),
            None,
        )
        if matched_topic is None:
            matched_concept = next(
                (c for c in analysis.key_concepts if mentions(query_lower, c.concept)),
                None,
            )
            if matched_concept is not None:
                # Concepts carry no timestamp, so they never narrow by time
                logger.debug("Concept %r matched, using lexical search", matched_concept.concept)
            return None

        if not matched_topic.timestamp:
            return None
        try:
            return parse_timestamp(matched_topic.timestamp)
        except ValueError:
            logger.warning(
                "Topic %r has unparseable timestamp %r",
                matched_topic.topic,
                matched_topic.timestamp,
            )
            return None


def mentions(query_lower: str, term: str) -> bool:
    """Case-insensitive substring match in either direction."""
    term_lower = term.strip().lower()
    query_lower = query_lower.strip()
    if not term_lower or not query_lower:
        return False
    return term_lower in query_lower or query_lower in term_lower


def match_chunks(chunks: Sequence[Chunk], query: str, analysis: AnalysisResult) -> List[Chunk]:
    """Match with the default window."""
    return QueryMatcher().match(chunks, query, analysis)
