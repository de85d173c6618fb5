"""
Transcript chunking service for grouping caption items into bounded chunks.
"""
from typing import List, Sequence, Tuple
from models.transcript_models import TranscriptItem, Chunk

# Accumulated text length that closes a chunk
CHUNK_MAX_CHARS = 1500


class TranscriptChunker:
    """Groups timed transcript items into chunks of roughly CHUNK_MAX_CHARS."""

    def chunk(self, transcript: Sequence[TranscriptItem]) -> Tuple[List[Chunk], float]:
        """
        Partition transcript items into chunks.

        Algorithm:
            1. Append items to a pending group, tracking text length
            2. Close the group once its length reaches CHUNK_MAX_CHARS
            3. Close whatever remains as the final (possibly shorter) chunk

        Returns:
            (chunks, total_duration_ms) where the total is the sum of every
            item's duration, independent of chunk boundaries.
        """
        chunks: List[Chunk] = []
        pending: List[TranscriptItem] = []
        pending_length = 0
        total_duration_ms = 0

        for item in transcript:
            pending.append(item)
            pending_length += len(item.text)
            total_duration_ms += item.duration_ms or 0

            if pending_length >= CHUNK_MAX_CHARS:
                chunks.append(self._create_chunk(pending))
                pending = []
                pending_length = 0

        if pending:
            chunks.append(self._create_chunk(pending))

        return chunks, total_duration_ms

    @staticmethod
    def _create_chunk(items: List[TranscriptItem]) -> Chunk:
        last = items[-1]
        return Chunk(
            text=" ".join(item.text for item in items),
            start_time_ms=items[0].offset_ms,
            end_time_ms=last.offset_ms + last.duration_ms,
            items=list(items),
        )


def chunk_transcript(transcript: Sequence[TranscriptItem]) -> Tuple[List[Chunk], float]:
    """Chunk a transcript with the default chunker."""
    return TranscriptChunker().chunk(transcript)
