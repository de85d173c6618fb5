"""
Unit tests for transcript analysis, decoding and fallback synthesis.
"""
import json
from unittest.mock import Mock

import pytest

from core.errors import UpstreamLLMError
from core.ollama_client import OllamaError
from models.transcript_models import Chunk, TranscriptItem, VideoMetadata
from services.analysis.analyzer import (
    TranscriptAnalyzer,
    build_analysis_messages,
    build_fallback_analysis,
    decode_analysis,
    find_coverage_gaps,
)

METADATA = VideoMetadata(title="Deep Dive", duration_seconds=600, author="Someone")

VALID_ANALYSIS = {
    "summary": "A video about things",
    "mainTopics": [
        {"topic": "Intro", "timestamp": "00:00", "description": "Opening"},
        {"topic": "Middle", "timestamp": "02:30", "description": "Core"},
    ],
    "keyConcepts": [{"concept": "Thing", "definition": "A noun"}],
    "timeline": [
        {"time": "01:00", "event": "Starts"},
        {"time": "04:00", "event": "Ends"},
    ],
}


def make_chunks(count):
    return [
        Chunk(
            text=f"chunk {i} " + "lorem ipsum " * 20,
            start_time_ms=i * 60000,
            end_time_ms=(i + 1) * 60000,
            items=[],
        )
        for i in range(count)
    ]


def make_transcript():
    return [
        TranscriptItem(text="hello world", offset_ms=0, duration_ms=2000),
        TranscriptItem(text="more text here", offset_ms=2000, duration_ms=3000),
    ]


class TestDecodeAnalysis:
    """Test schema-checked decoding."""

    def test_valid_json(self):
        result = decode_analysis(json.dumps(VALID_ANALYSIS))

        assert result.ok
        assert result.error is None
        assert result.analysis.main_topics[1].timestamp == "02:30"
        assert result.analysis.to_dict() == VALID_ANALYSIS

    def test_code_fence_tolerated(self):
        result = decode_analysis("```json\n" + json.dumps(VALID_ANALYSIS) + "\n```")

        assert result.ok

    def test_invalid_json(self):
        result = decode_analysis("not json at all")

        assert not result.ok
        assert "Invalid JSON" in result.error

    def test_missing_key(self):
        data = dict(VALID_ANALYSIS)
        del data["timeline"]

        result = decode_analysis(json.dumps(data))

        assert not result.ok
        assert "Schema mismatch" in result.error

    def test_wrong_item_shape(self):
        data = dict(VALID_ANALYSIS, mainTopics=[{"topic": "x"}])

        assert not decode_analysis(json.dumps(data)).ok


class TestFallbackAnalysis:
    """Test deterministic fallback synthesis."""

    def test_indices_and_truncation(self):
        chunks = make_chunks(7)

        analysis = build_fallback_analysis(chunks, METADATA)

        assert analysis.summary == "Deep Dive - 10:00 video analysis"
        assert [t.topic for t in analysis.main_topics] == ["Section 1", "Section 2", "Section 3"]
        assert [t.timestamp for t in analysis.main_topics] == ["0:00", "3:00", "6:00"]
        assert analysis.main_topics[0].description == chunks[0].text[:100] + "..."
        assert [e.time for e in analysis.timeline] == ["0:00", "2:00", "4:00", "6:00"]
        assert analysis.timeline[1].event == chunks[2].text[:50] + "..."
        assert len(analysis.key_concepts) == 1
        assert analysis.key_concepts[0].concept == "Video Content"

    def test_deterministic(self):
        chunks = make_chunks(10)

        assert build_fallback_analysis(chunks, METADATA) == build_fallback_analysis(chunks, METADATA)

    def test_malay_strings(self):
        analysis = build_fallback_analysis(make_chunks(1), METADATA, "ms")

        assert analysis.main_topics[0].topic == "Bahagian 1"

    def test_no_chunks(self):
        analysis = build_fallback_analysis([], METADATA)

        assert analysis.main_topics == []
        assert analysis.timeline == []


class TestCoverageGaps:
    """Test temporal coverage validation."""

    def test_well_covered(self):
        analysis = decode_analysis(json.dumps(VALID_ANALYSIS)).analysis

        assert find_coverage_gaps(analysis) == []

    def test_late_start_and_gap(self):
        data = dict(
            VALID_ANALYSIS,
            mainTopics=[{"topic": "Late", "timestamp": "04:00", "description": "d"}],
            timeline=[{"time": "10:00", "event": "e"}],
        )
        analysis = decode_analysis(json.dumps(data)).analysis

        issues = find_coverage_gaps(analysis)

        assert len(issues) == 2
        assert "starts late" in issues[0]
        assert "Gap of 360s" in issues[1]

    def test_unparseable_reported(self):
        data = dict(VALID_ANALYSIS, timeline=[{"time": "soon", "event": "e"}])
        analysis = decode_analysis(json.dumps(data)).analysis

        assert any("Unparseable" in issue for issue in find_coverage_gaps(analysis))


class TestTranscriptAnalyzer:
    """Test the analysis request flow (with mocking)."""

    def test_messages_embed_metadata(self):
        chunks = make_chunks(3)

        messages = build_analysis_messages(chunks, METADATA, "en")

        assert [m["role"] for m in messages] == ["system", "user"]
        assert 'Analyze this 10:00 video titled "Deep Dive"' in messages[1]["content"]
        assert "3 segments" in messages[1]["content"]
        assert "[1:00] chunk 1" in messages[1]["content"]

    def test_successful_analysis(self):
        llm = Mock()
        llm.chat.return_value = json.dumps(VALID_ANALYSIS)

        analysis = TranscriptAnalyzer(llm=llm).analyze(make_transcript(), METADATA, "en")

        assert analysis.summary == "A video about things"
        _, kwargs = llm.chat.call_args
        assert kwargs["format"] == "json"

    def test_parse_failure_uses_fallback(self):
        llm = Mock()
        llm.chat.return_value = "Sorry, I cannot do that"

        analysis = TranscriptAnalyzer(llm=llm).analyze(make_transcript(), METADATA, "en")

        assert analysis.summary == "Deep Dive - 10:00 video analysis"
        assert analysis.main_topics[0].description == "hello world more text here..."

    def test_coverage_warning_does_not_alter_result(self, caplog):
        data = dict(VALID_ANALYSIS, timeline=[{"time": "30:00", "event": "late"}])
        llm = Mock()
        llm.chat.return_value = json.dumps(data)

        with caplog.at_level("WARNING"):
            analysis = TranscriptAnalyzer(llm=llm).analyze(make_transcript(), METADATA, "en")

        assert analysis.to_dict() == data
        assert "coverage warning" in caplog.text

    def test_upstream_failure_propagates(self):
        llm = Mock()
        llm.chat.side_effect = OllamaError("connection refused")

        with pytest.raises(UpstreamLLMError):
            TranscriptAnalyzer(llm=llm).analyze(make_transcript(), METADATA, "en")
