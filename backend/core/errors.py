"""
Error kinds surfaced by the video chat backend.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Stable error identifiers returned next to the error message."""
    INVALID_INPUT = "invalid_input"
    ACQUISITION_FAILURE = "acquisition_failure"
    UPSTREAM_LLM_FAILURE = "upstream_llm_failure"
    CACHE_MISS = "cache_miss"


class VideoChatError(Exception):
    """Base class for errors rendered as {"error": ...} responses."""

    kind = ErrorKind.INVALID_INPUT
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(VideoChatError):
    """Missing or malformed request input."""
    kind = ErrorKind.INVALID_INPUT
    status_code = 400


class CacheMissError(InvalidInputError):
    """Chat requested for a video that was never loaded."""
    kind = ErrorKind.CACHE_MISS

    def __init__(self, message: str = "Transcript not found. Please load the video first."):
        super().__init__(message)


class AcquisitionError(VideoChatError):
    """No caption track could be obtained for a video."""
    kind = ErrorKind.ACQUISITION_FAILURE
    status_code = 500

    USER_MESSAGE = (
        "Failed to load video captions. "
        "Please ensure the video has either manual or auto-generated captions available, "
        "or try another video."
    )


class UpstreamLLMError(VideoChatError):
    """The completion call itself failed (network, quota, bad envelope)."""
    kind = ErrorKind.UPSTREAM_LLM_FAILURE
    status_code = 500
