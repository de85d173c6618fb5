"""
Transcript acquisition strategies.

Every source implements fetch(video_id) -> FetchedTranscript and raises
AcquisitionError when it cannot produce a non-empty transcript.
"""
import json
import logging
import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import requests
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from youtube_transcript_api import (
    YouTubeTranscriptApi,
    CouldNotRetrieveTranscript,
    NoTranscriptFound,
)

from core.config import (
    GOOGLE_APPLICATION_CREDENTIALS,
    GOOGLE_APPLICATION_CREDENTIALS_JSON,
    TRANSCRIPT_FETCH_TIMEOUT_SEC,
    TRANSCRIPT_LANGUAGES,
    TRANSCRIPT_SOURCES,
    YOUTUBE_SCOPES,
)
from core.errors import AcquisitionError
from models.transcript_models import FetchedTranscript
from services.ingestion.youtube_fetcher import watch_url
from services.processing.transcriber import (
    normalize_items,
    parse_srt_captions,
    parse_timedtext_xml,
)

logger = logging.getLogger(__name__)

TIMEDTEXT_URL = "https://www.youtube.com/api/timedtext"


class TranscriptSource:
    """Base class for transcript acquisition strategies."""

    name = "base"

    def fetch(self, video_id: str) -> FetchedTranscript:
        raise NotImplementedError


class _TimeoutSession(requests.Session):
    """requests session applying a default timeout to every request."""

    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def request(self, method, url, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, **kwargs)


class CommunityTranscriptSource(TranscriptSource):
    """Transcripts via the youtube-transcript-api scraping library."""

    name = "community"

    def __init__(
        self,
        languages: Sequence[str] = TRANSCRIPT_LANGUAGES,
        timeout: float = TRANSCRIPT_FETCH_TIMEOUT_SEC,
        api: Optional[YouTubeTranscriptApi] = None,
    ):
        self.languages = list(languages)
        self.api = api or YouTubeTranscriptApi(http_client=_TimeoutSession(timeout))

    def fetch(self, video_id: str) -> FetchedTranscript:
        """
        Pick a caption track and fetch it.

        Preference order: manually created in a preferred language,
        generated in a preferred language, first listed track.
        """
        try:
            transcript_list = self.api.list(video_id)
            transcript = self._select_transcript(transcript_list)
            snippets = transcript.fetch()
        except CouldNotRetrieveTranscript as e:
            raise AcquisitionError(f"youtube-transcript-api: {e}") from e

        items = normalize_items(
            (snippet.text, snippet.start * 1000, snippet.duration * 1000)
            for snippet in snippets
        )
        if not items:
            raise AcquisitionError(f"Empty transcript for {video_id}")

        return FetchedTranscript(
            items=items,
            language=transcript.language_code,
            caption_type="auto" if transcript.is_generated else "manual",
        )

    def _select_transcript(self, transcript_list):
        if self.languages:
            try:
                return transcript_list.find_manually_created_transcript(self.languages)
            except NoTranscriptFound:
                pass
            try:
                return transcript_list.find_generated_transcript(self.languages)
            except NoTranscriptFound:
                pass

        available = list(transcript_list)
        if not available:
            raise AcquisitionError("No caption tracks listed")
        return available[0]


class XmlScrapeTranscriptSource(TranscriptSource):
    """Captions scraped from the public timedtext endpoint and watch page."""

    name = "xml_scrape"

    CAPTION_TRACKS_PATTERN = re.compile(r'"captionTracks":\s*(\[.*?\])', re.DOTALL)

    def __init__(
        self,
        languages: Sequence[str] = TRANSCRIPT_LANGUAGES,
        timeout: float = TRANSCRIPT_FETCH_TIMEOUT_SEC,
        session: Optional[requests.Session] = None,
    ):
        self.languages = list(languages)
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, video_id: str) -> FetchedTranscript:
        for url, language, caption_type in self._candidate_urls(video_id):
            result = self._try_caption_url(url, language, caption_type)
            if result:
                return result

        for url, language, caption_type in self._page_caption_tracks(video_id):
            result = self._try_caption_url(url, language, caption_type)
            if result:
                return result

        raise AcquisitionError(f"No caption XML found for {video_id}")

    def _candidate_urls(self, video_id: str) -> Iterable[Tuple[str, str, str]]:
        for lang in self.languages:
            base = f"{TIMEDTEXT_URL}?v={video_id}&lang={lang}"
            yield base, lang, "manual"
            yield f"{base}&fmt=srv3", lang, "manual"
            yield f"{base}&kind=asr", lang, "auto"

    def _page_caption_tracks(self, video_id: str) -> List[Tuple[str, str, str]]:
        """Caption tracks listed in the watch page player response."""
        try:
            response = self.session.get(watch_url(video_id), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Failed to load watch page for %s: %s", video_id, e)
            return []

        match = self.CAPTION_TRACKS_PATTERN.search(response.text)
        if not match:
            return []
        try:
            tracks = json.loads(match.group(1))
        except json.JSONDecodeError as e:
            logger.warning("Failed to parse caption data for %s: %s", video_id, e)
            return []

        candidates = [
            (
                track["baseUrl"],
                track.get("languageCode", "en"),
                "auto" if track.get("kind") == "asr" else "manual",
            )
            for track in tracks
            if isinstance(track, dict) and track.get("baseUrl")
        ]
        # Preferred languages first, original order otherwise
        return sorted(candidates, key=lambda c: self._language_rank(c[1]))

    def _language_rank(self, language: str) -> int:
        primary = language.split("-")[0]
        return self.languages.index(primary) if primary in self.languages else len(self.languages)

    def _try_caption_url(self, url: str, language: str, caption_type: str) -> Optional[FetchedTranscript]:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug("Caption request failed for %s: %s", url, e)
            return None

        text = response.text
        if not response.ok or not text or not ("<transcript>" in text or "<text" in text):
            return None

        items = parse_timedtext_xml(text)
        if not items:
            return None
        logger.info("Found captions via %s", url)
        return FetchedTranscript(items=items, language=language, caption_type=caption_type)


class CaptionApiTranscriptSource(TranscriptSource):
    """Captions downloaded through the YouTube Data API with a service account."""

    name = "caption_api"

    def __init__(
        self,
        languages: Sequence[str] = TRANSCRIPT_LANGUAGES,
        service_factory: Optional[Callable[[], object]] = None,
    ):
        self.languages = list(languages)
        self.service_factory = service_factory or self._build_service
        self._service = None

    def _build_service(self):
        if GOOGLE_APPLICATION_CREDENTIALS_JSON:
            credentials = service_account.Credentials.from_service_account_info(
                json.loads(GOOGLE_APPLICATION_CREDENTIALS_JSON), scopes=YOUTUBE_SCOPES
            )
        elif GOOGLE_APPLICATION_CREDENTIALS:
            credentials = service_account.Credentials.from_service_account_file(
                GOOGLE_APPLICATION_CREDENTIALS, scopes=YOUTUBE_SCOPES
            )
        else:
            raise AcquisitionError("YouTube API credentials are not configured")

        return build("youtube", "v3", credentials=credentials, cache_discovery=False)

    @property
    def service(self):
        if self._service is None:
            self._service = self.service_factory()
        return self._service

    def fetch(self, video_id: str) -> FetchedTranscript:
        try:
            video_response = self.service.videos().list(
                part="snippet,contentDetails",
                id=video_id,
            ).execute()
            if not video_response.get("items"):
                raise AcquisitionError(f"Video not found: {video_id}")

            captions_response = self.service.captions().list(
                part="snippet,id",
                videoId=video_id,
            ).execute()
        except HttpError as e:
            raise AcquisitionError(f"YouTube API error: {e}") from e

        tracks = self._order_tracks(captions_response.get("items", []))
        if not tracks:
            raise AcquisitionError(f"No caption tracks for {video_id}")

        for track in tracks:
            snippet = track.get("snippet", {})
            try:
                payload = self.service.captions().download(id=track["id"], tfmt="srt").execute()
            except HttpError as e:
                logger.warning("Failed to download caption %s: %s", track.get("id"), e)
                continue

            if isinstance(payload, bytes):
                payload = payload.decode("utf-8", errors="replace")
            items = parse_srt_captions(payload or "")
            if items:
                return FetchedTranscript(
                    items=items,
                    language=snippet.get("language", "en"),
                    caption_type="auto" if snippet.get("trackKind") == "ASR" else "manual",
                )

        raise AcquisitionError(f"No caption track could be downloaded for {video_id}")

    def _order_tracks(self, tracks: List[dict]) -> List[dict]:
        """Preferred languages first, manual before ASR within a language."""
        def rank(track):
            snippet = track.get("snippet", {})
            primary = snippet.get("language", "").split("-")[0]
            lang_rank = self.languages.index(primary) if primary in self.languages else len(self.languages)
            return (lang_rank, snippet.get("trackKind") == "ASR")
        return sorted(tracks, key=rank)


class FallbackTranscriptSource(TranscriptSource):
    """Tries each source in order and reports one failure if all fail."""

    name = "fallback"

    def __init__(self, sources: Sequence[TranscriptSource]):
        self.sources = list(sources)

    def fetch(self, video_id: str) -> FetchedTranscript:
        for source in self.sources:
            try:
                result = source.fetch(video_id)
                logger.info(
                    "Transcript for %s fetched via %s (%s, %s captions, %d items)",
                    video_id, source.name, result.language, result.caption_type, len(result.items),
                )
                return result
            except AcquisitionError as e:
                logger.warning("Transcript source %s failed for %s: %s", source.name, video_id, e)
            except Exception as e:
                logger.warning(
                    "Transcript source %s errored for %s: %s", source.name, video_id, e,
                    exc_info=True,
                )

        raise AcquisitionError(AcquisitionError.USER_MESSAGE)


SOURCE_TYPES = {
    CommunityTranscriptSource.name: CommunityTranscriptSource,
    XmlScrapeTranscriptSource.name: XmlScrapeTranscriptSource,
    CaptionApiTranscriptSource.name: CaptionApiTranscriptSource,
}


def build_transcript_source(names: Sequence[str] = TRANSCRIPT_SOURCES) -> TranscriptSource:
    """
    Build the configured acquisition chain.

    Raises:
        ValueError: on an unknown or empty source list
    """
    unknown = [name for name in names if name not in SOURCE_TYPES]
    if unknown:
        raise ValueError(f"Unknown transcript sources: {', '.join(unknown)}")
    if not names:
        raise ValueError("At least one transcript source must be configured")
    return FallbackTranscriptSource([SOURCE_TYPES[name]() for name in names])
