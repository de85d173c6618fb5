"""
Transcript loading API routes.
"""
import logging
from fastapi import APIRouter, Depends

from api.models.requests import TranscriptRequest
from api.models.responses import TranscriptResponse
from core.pipeline import VideoChatPipeline, get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=TranscriptResponse)
def load_transcript(
    request: TranscriptRequest,
    pipeline: VideoChatPipeline = Depends(get_pipeline),
):
    """
    Fetch, chunk and analyze a video's captions.
    Served from the cache when the video was loaded before.
    """
    logger.info("Received transcript request: %s", request.url)
    result = pipeline.load_video(request.url)
    entry = result.entry

    if result.from_cache:
        message = "Transcript loaded from cache"
    else:
        label = "Auto-generated" if entry.caption_type == "auto" else "Manual"
        message = f"Transcript loaded successfully ({label} captions)"

    return TranscriptResponse(
        success=True,
        message=message,
        metadata=entry.metadata.to_dict(),
        transcript=[item.to_dict() for item in entry.transcript],
        analysis=result.analysis.to_dict(),
        language=entry.language,
        caption_type=entry.caption_type,
    )
