"""
Chatbot API routes.
"""
from fastapi import APIRouter, Depends
from api.models.requests import ChatRequest
from api.models.responses import ChatResponse
from core.pipeline import VideoChatPipeline, get_pipeline

router = APIRouter()


@router.post("", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    pipeline: VideoChatPipeline = Depends(get_pipeline),
):
    """
    Answer a question about a previously loaded video.
    The video must have been loaded through the transcript endpoint first.
    """
    return ChatResponse(response=pipeline.chat(request.video_id, request.message))
