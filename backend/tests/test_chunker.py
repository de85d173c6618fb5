"""
Unit tests for transcript chunking.
"""
from models.transcript_models import TranscriptItem
from services.processing.chunker import CHUNK_MAX_CHARS, TranscriptChunker, chunk_transcript


def make_items(count, text_length, duration_ms=1000):
    return [
        TranscriptItem(text="x" * text_length, offset_ms=i * duration_ms, duration_ms=duration_ms)
        for i in range(count)
    ]


class TestTranscriptChunker:
    """Test chunk boundaries and time windows."""

    def test_short_transcript_single_chunk(self):
        """Test the two-item scenario below the threshold."""
        items = [
            TranscriptItem(text="hello world", offset_ms=0, duration_ms=2000),
            TranscriptItem(text="more text here", offset_ms=2000, duration_ms=3000),
        ]

        chunks, total = chunk_transcript(items)

        assert len(chunks) == 1
        assert chunks[0].text == "hello world more text here"
        assert chunks[0].start_time_ms == 0
        assert chunks[0].end_time_ms == 5000
        assert total == 5000

    def test_empty_transcript(self):
        """Test that empty input yields nothing."""
        chunks, total = TranscriptChunker().chunk([])

        assert chunks == []
        assert total == 0

    def test_threshold_closes_chunk(self):
        """Test that reaching the threshold closes the chunk on that item."""
        items = make_items(4, CHUNK_MAX_CHARS // 2)

        chunks, _ = chunk_transcript(items)

        assert len(chunks) == 2
        assert [len(c.items) for c in chunks] == [2, 2]

    def test_final_chunk_may_be_short(self):
        """Test that leftover items form a shorter final chunk."""
        items = make_items(3, CHUNK_MAX_CHARS // 2)

        chunks, _ = chunk_transcript(items)

        assert len(chunks) == 2
        assert len(chunks[-1].items) == 1
        assert len(chunks[-1].text) < CHUNK_MAX_CHARS

    def test_single_long_item_is_own_chunk(self):
        """Test that an item longer than the threshold stands alone."""
        items = make_items(3, CHUNK_MAX_CHARS + 10)

        chunks, _ = chunk_transcript(items)

        assert len(chunks) == 3

    def test_partition_is_lossless(self):
        """Test that chunks reproduce the input sequence in order."""
        items = [
            TranscriptItem(text=f"line {i} " + "word " * (i % 40), offset_ms=i * 1500, duration_ms=1500)
            for i in range(200)
        ]

        chunks, _ = chunk_transcript(items)

        rebuilt = [item for chunk in chunks for item in chunk.items]
        assert rebuilt == items

    def test_chunk_time_window_invariant(self):
        """Test that start/end come from the first and last items."""
        items = make_items(50, 200, duration_ms=2500)

        chunks, _ = chunk_transcript(items)

        for chunk in chunks:
            assert chunk.start_time_ms == chunk.items[0].offset_ms
            assert chunk.end_time_ms == chunk.items[-1].offset_ms + chunk.items[-1].duration_ms
            assert chunk.text == " ".join(item.text for item in chunk.items)

    def test_total_duration_independent_of_boundaries(self):
        """Test that total duration sums every item's duration."""
        items = [
            TranscriptItem(text="a" * 700, offset_ms=0, duration_ms=1234),
            TranscriptItem(text="b" * 900, offset_ms=5000, duration_ms=4321),
            TranscriptItem(text="c", offset_ms=10000, duration_ms=100),
        ]

        chunks, total = chunk_transcript(items)

        assert len(chunks) == 2
        assert total == 1234 + 4321 + 100
