"""
Configuration management for the video chat backend.
Loads configuration from environment variables and .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
# Look for .env file in the backend directory or project root
BACKEND_DIR = Path(__file__).parent.parent
PROJECT_ROOT = BACKEND_DIR.parent
ENV_FILE = PROJECT_ROOT / ".env"

# Load .env file if it exists
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
else:
    # Also try loading from backend directory
    backend_env = BACKEND_DIR / ".env"
    if backend_env.exists():
        load_dotenv(backend_env)

PROMPTS_DIR = BACKEND_DIR / "prompts"

# Ollama configuration
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_ANALYSIS_MODEL = os.getenv("OLLAMA_ANALYSIS_MODEL", "llama3.1:latest")
OLLAMA_CHAT_MODEL = os.getenv("OLLAMA_CHAT_MODEL", OLLAMA_ANALYSIS_MODEL)

# LLM settings (can be overridden via env vars)
ANALYSIS_TEMPERATURE = float(os.getenv("ANALYSIS_TEMPERATURE", "0.3"))
ANALYSIS_MAX_TOKENS = int(os.getenv("ANALYSIS_MAX_TOKENS", "4096"))
CHAT_TEMPERATURE = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
CHAT_MAX_TOKENS = int(os.getenv("CHAT_MAX_TOKENS", "1000"))

# Timeouts for external calls (seconds)
ANALYSIS_TIMEOUT_SEC = float(os.getenv("ANALYSIS_TIMEOUT_SEC", "300"))
CHAT_TIMEOUT_SEC = float(os.getenv("CHAT_TIMEOUT_SEC", "120"))
TRANSCRIPT_FETCH_TIMEOUT_SEC = float(os.getenv("TRANSCRIPT_FETCH_TIMEOUT_SEC", "30"))
METADATA_TIMEOUT_SEC = float(os.getenv("METADATA_TIMEOUT_SEC", "15"))

# Transcript acquisition
# Ordered list of strategies: caption_api, xml_scrape, community
TRANSCRIPT_SOURCES_STR = os.getenv("TRANSCRIPT_SOURCES", "community,xml_scrape")
TRANSCRIPT_SOURCES = [s.strip() for s in TRANSCRIPT_SOURCES_STR.split(",") if s.strip()]
TRANSCRIPT_LANGUAGES_STR = os.getenv("TRANSCRIPT_LANGUAGES", "en,ms")
TRANSCRIPT_LANGUAGES = [s.strip() for s in TRANSCRIPT_LANGUAGES_STR.split(",") if s.strip()]

# Service account credentials for the YouTube Data API (caption_api strategy)
GOOGLE_APPLICATION_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", None)
GOOGLE_APPLICATION_CREDENTIALS_JSON = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON", None)
YOUTUBE_SCOPES = [
    "https://www.googleapis.com/auth/youtube.readonly",
    "https://www.googleapis.com/auth/youtube.force-ssl",
]

# Video cache (0 = unbounded / never expires)
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "0"))
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "0"))

# Prompt language used when a caption language has no template
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")

# API configuration
API_PREFIX = os.getenv("API_PREFIX", "/api")
# CORS origins can be comma-separated list in env var
CORS_ORIGINS_STR = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
CORS_ORIGINS = [origin.strip() for origin in CORS_ORIGINS_STR.split(",")]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
