"""
Chat prompt context assembly.
"""
from typing import List, Optional, Sequence

from core.prompt_manager import PromptManager, prompt_manager
from models.analysis_models import AnalysisResult, KeyConcept, MainTopic
from models.transcript_models import Chunk, VideoMetadata
from services.processing.utils import format_duration, format_timestamp
from services.retrieval.query_matcher import mentions

# Topics and concepts quoted in a single context
MAX_CONTEXT_TOPICS = 3
MAX_CONTEXT_CONCEPTS = 3


class ContextBuilder:
    """Renders the user message sent with a chat question."""

    def __init__(self, prompts: Optional[PromptManager] = None):
        self.prompts = prompts or prompt_manager

    def build(
        self,
        query: str,
        metadata: VideoMetadata,
        analysis: AnalysisResult,
        relevant_chunks: Sequence[Chunk],
        language: str = "en",
    ) -> str:
        """
        Build the context block.

        Layout (blocks separated by a blank line, empty blocks omitted):
            Video: "<title>" (<duration>)
            <topics label> [timestamp] topic: description ...
            <concepts label> concept: definition ...
            <transcript label> [start - end] chunk text ...
            <question label> <query>
        """
        query_lower = query.strip().lower()
        blocks = [f'Video: "{metadata.title}" ({format_duration(metadata.duration_seconds)})']

        topics = self.relevant_topics(query_lower, analysis)
        if topics:
            lines = [f"[{t.timestamp}] {t.topic}: {t.description}" for t in topics]
            blocks.append(self._label("context_topics", language) + "\n" + "\n".join(lines))

        concepts = self.relevant_concepts(query_lower, analysis)
        if concepts:
            lines = [f"{c.concept}: {c.definition}" for c in concepts]
            blocks.append(self._label("context_concepts", language) + "\n" + "\n".join(lines))

        if relevant_chunks:
            sections = "\n\n".join(
                f"[{format_timestamp(chunk.start_time_ms)} - {format_timestamp(chunk.end_time_ms)}]\n{chunk.text}"
                for chunk in relevant_chunks
            )
            blocks.append(self._label("context_transcript", language) + "\n" + sections)

        blocks.append(f"{self._label('context_question', language)} {query}")
        return "\n\n".join(blocks)

    @staticmethod
    def relevant_topics(query_lower: str, analysis: AnalysisResult) -> List[MainTopic]:
        return [t for t in analysis.main_topics if mentions(query_lower, t.topic)][:MAX_CONTEXT_TOPICS]

    @staticmethod
    def relevant_concepts(query_lower: str, analysis: AnalysisResult) -> List[KeyConcept]:
        return [c for c in analysis.key_concepts if mentions(query_lower, c.concept)][:MAX_CONTEXT_CONCEPTS]

    def _label(self, name: str, language: str) -> str:
        return self.prompts.get_prompt(name, language)


def build_chat_context(
    query: str,
    metadata: VideoMetadata,
    analysis: AnalysisResult,
    relevant_chunks: Sequence[Chunk],
    language: str = "en",
) -> str:
    """Build a context with the global prompt manager."""
    return ContextBuilder().build(query, metadata, analysis, relevant_chunks, language)
