"""
Unit tests for URL parsing and video metadata lookup.
"""
from unittest.mock import MagicMock, patch

import pytest

from services.ingestion.youtube_fetcher import (
    DEFAULT_AUTHOR,
    DEFAULT_TITLE,
    VideoInfoFetcher,
    extract_video_id,
)


class TestExtractVideoId:
    """Test video ID extraction."""

    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42s",
        "https://m.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ?si=abc",
        "  @https://www.youtube.com/watch?v=dQw4w9WgXcQ  ",
    ])
    def test_valid_urls(self, url):
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize("url", [
        None,
        "",
        "not a url",
        "https://vimeo.com/12345",
        "https://www.youtube.com/watch?v=short",
        "https://www.youtube.com/channel/UC123",
        "https://youtu.be/",
    ])
    def test_invalid_urls(self, url):
        assert extract_video_id(url) is None


class TestVideoInfoFetcher:
    """Test metadata lookup (with mocking)."""

    @patch('services.ingestion.youtube_fetcher.yt_dlp.YoutubeDL')
    def test_fetch_video_info(self, mock_ydl_class):
        mock_ydl = MagicMock()
        mock_ydl.extract_info.return_value = {'title': 'Great Talk', 'uploader': 'Conference'}
        mock_ydl_class.return_value.__enter__.return_value = mock_ydl

        title, author = VideoInfoFetcher().fetch_video_info("dQw4w9WgXcQ")

        assert title == "Great Talk"
        assert author == "Conference"
        mock_ydl.extract_info.assert_called_once_with(
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ", download=False
        )

    @patch('services.ingestion.youtube_fetcher.yt_dlp.YoutubeDL')
    def test_channel_used_when_uploader_missing(self, mock_ydl_class):
        mock_ydl = MagicMock()
        mock_ydl.extract_info.return_value = {'title': 'Talk', 'channel': 'Channel Name'}
        mock_ydl_class.return_value.__enter__.return_value = mock_ydl

        assert VideoInfoFetcher().fetch_video_info("dQw4w9WgXcQ") == ("Talk", "Channel Name")

    @patch('services.ingestion.youtube_fetcher.yt_dlp.YoutubeDL')
    def test_failure_uses_defaults(self, mock_ydl_class):
        mock_ydl = MagicMock()
        mock_ydl.extract_info.side_effect = Exception("network down")
        mock_ydl_class.return_value.__enter__.return_value = mock_ydl

        title, author = VideoInfoFetcher().fetch_video_info("dQw4w9WgXcQ")

        assert title == DEFAULT_TITLE
        assert author == DEFAULT_AUTHOR
