"""
YouTube URL handling and video metadata lookup using yt-dlp.
"""
import logging
from typing import Optional, Tuple
from urllib.parse import urlparse, parse_qs

import yt_dlp

from core.config import METADATA_TIMEOUT_SEC

logger = logging.getLogger(__name__)

VIDEO_ID_LENGTH = 11
DEFAULT_TITLE = "YouTube Video"
DEFAULT_AUTHOR = "YouTube Creator"


def extract_video_id(url: Optional[str]) -> Optional[str]:
    """
    Extract the 11-character video ID from a YouTube URL.

    Accepts youtube.com URLs with a ?v= parameter and youtu.be short links.
    A leading "@" (pasted from chat mentions) is stripped.
    """
    if not url:
        return None
    url = url.strip()
    if url.startswith("@"):
        url = url[1:]

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname or ""
    except ValueError:
        return None

    video_id = None
    if "youtube.com" in hostname:
        values = parse_qs(parsed.query).get("v")
        video_id = values[0] if values else None
    elif "youtu.be" in hostname:
        path_parts = [part for part in parsed.path.split("/") if part]
        video_id = path_parts[0] if path_parts else None

    if video_id and len(video_id) == VIDEO_ID_LENGTH:
        return video_id
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


class VideoInfoFetcher:
    """Fetches video title and uploader."""

    def __init__(self, timeout: float = METADATA_TIMEOUT_SEC):
        self.timeout = timeout

    def fetch_video_info(self, video_id: str) -> Tuple[str, str]:
        """
        Return (title, author) for a video.

        Lookup failures are logged and fall back to generic labels.
        """
        ydl_opts = {
            'skip_download': True,
            'quiet': True,
            'no_warnings': True,
            'socket_timeout': self.timeout,
        }

        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(watch_url(video_id), download=False) or {}
        except Exception as e:
            logger.warning("Failed to fetch video info for %s: %s", video_id, e)
            return DEFAULT_TITLE, DEFAULT_AUTHOR

        title = info.get('title') or DEFAULT_TITLE
        author = info.get('uploader') or info.get('channel') or DEFAULT_AUTHOR
        return title, author


# Global video info fetcher instance
video_info_fetcher = VideoInfoFetcher()
