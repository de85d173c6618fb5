"""
FastAPI main application.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import API_PREFIX, CORS_ORIGINS, LOG_LEVEL, HOST, PORT
from core.config_validator import config_validator
from core.errors import ErrorKind, VideoChatError
from api.models.responses import ErrorResponse
from api.routes import transcript, chat

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="YouTube Chat API",
    description="Chat with YouTube videos through their captions",
    version="1.0.0",
)

@app.on_event("startup")
async def validate_configuration():
    """Validate configuration on application startup."""

    print("🔍 Validating configuration...")

    validation_result = config_validator.validate_all()

    # Print warnings
    for warning in validation_result["warnings"]:
        print(f"⚠️  WARNING: {warning}")

    # Print errors and fail if invalid
    if not validation_result["valid"]:
        print("\n❌ CONFIGURATION ERRORS DETECTED:\n")
        for error in validation_result["errors"]:
            print(f"   ❌ {error}")
        print("\n🛑 Application startup aborted due to configuration errors.\n")
        raise SystemExit(1)

    print("✅ Configuration validated successfully\n")


@app.exception_handler(VideoChatError)
async def video_chat_error_handler(request: Request, exc: VideoChatError):
    """Render domain errors as {"error": message, "kind": kind}."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "kind": exc.kind.value},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are invalid input."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid request: {details}", "kind": ErrorKind.INVALID_INPUT.value},
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

# Include routers
error_responses = {
    400: {"model": ErrorResponse, "description": "Invalid input or video not loaded"},
    500: {"model": ErrorResponse, "description": "Caption acquisition or LLM failure"},
}
app.include_router(transcript.router, prefix=f"{API_PREFIX}/transcript", tags=["transcript"], responses=error_responses)
app.include_router(chat.router, prefix=f"{API_PREFIX}/chat", tags=["chat"], responses=error_responses)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "YouTube Chat API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get(f"{API_PREFIX}/test")
async def test_route():
    """Smoke-test endpoint for the frontend."""
    return {"message": "Backend is working!"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
