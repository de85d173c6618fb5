"""
Configuration validation for the video chat backend.
Validates Ollama, models, transcript sources and settings on startup.
"""
import requests
from typing import List, Dict, Any


class ConfigValidator:
    """Validates system configuration before serving requests."""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Dict[str, Any]:
        """
        Run all validation checks.

        Returns:
            {
                "valid": bool,
                "errors": List[str],
                "warnings": List[str]
            }
        """
        self.errors = []
        self.warnings = []

        # Run all checks
        self._validate_ollama_connection()
        self._validate_ollama_models()
        self._validate_transcript_sources()
        self._validate_config_values()

        return {
            "valid": len(self.errors) == 0,
            "errors": self.errors,
            "warnings": self.warnings
        }

    def _validate_ollama_connection(self):
        """Check that Ollama service is reachable."""
        from core.config import OLLAMA_BASE_URL

        try:
            response = requests.get(f"{OLLAMA_BASE_URL}/api/tags", timeout=5)
            response.raise_for_status()
        except requests.exceptions.ConnectionError:
            self.errors.append(
                f"Cannot connect to Ollama at {OLLAMA_BASE_URL}. "
                "Ensure Ollama is running: `ollama serve`"
            )
        except requests.exceptions.Timeout:
            self.errors.append(
                f"Ollama connection timeout at {OLLAMA_BASE_URL}. "
                "Check network or Ollama performance."
            )
        except requests.exceptions.RequestException as e:
            self.errors.append(f"Ollama connection error: {e}")

    def _validate_ollama_models(self):
        """Check that required models are pulled and available."""
        from core.config import (
            OLLAMA_BASE_URL,
            OLLAMA_ANALYSIS_MODEL,
            OLLAMA_CHAT_MODEL,
        )

        required_models = {
            "Analysis model": OLLAMA_ANALYSIS_MODEL,
            "Chat model": OLLAMA_CHAT_MODEL,
        }

        try:
            response = requests.get(f"{OLLAMA_BASE_URL}/api/tags", timeout=5)
            response.raise_for_status()
            available_models = [model["name"] for model in response.json().get("models", [])]
        except (requests.exceptions.RequestException, ValueError, KeyError):
            # Ollama connection already checked, skip if failed
            return

        for model_name, model_id in required_models.items():
            if model_id not in available_models:
                self.warnings.append(
                    f"Model not found: {model_name} ({model_id}). "
                    f"Pull it with: `ollama pull {model_id}`"
                )

    def _validate_transcript_sources(self):
        """Check the configured acquisition chain."""
        from core.config import (
            TRANSCRIPT_SOURCES,
            TRANSCRIPT_LANGUAGES,
            GOOGLE_APPLICATION_CREDENTIALS,
            GOOGLE_APPLICATION_CREDENTIALS_JSON,
        )
        from services.ingestion.transcript_sources import SOURCE_TYPES

        if not TRANSCRIPT_SOURCES:
            self.errors.append("TRANSCRIPT_SOURCES is empty. Configure at least one source.")

        for name in TRANSCRIPT_SOURCES:
            if name not in SOURCE_TYPES:
                self.errors.append(
                    f"Unknown transcript source: {name}. "
                    f"Expected one of: {', '.join(sorted(SOURCE_TYPES))}"
                )

        if "caption_api" in TRANSCRIPT_SOURCES and not (
            GOOGLE_APPLICATION_CREDENTIALS or GOOGLE_APPLICATION_CREDENTIALS_JSON
        ):
            self.errors.append(
                "caption_api transcript source requires GOOGLE_APPLICATION_CREDENTIALS "
                "or GOOGLE_APPLICATION_CREDENTIALS_JSON"
            )

        if not TRANSCRIPT_LANGUAGES:
            self.warnings.append("TRANSCRIPT_LANGUAGES is empty; first listed caption track will be used")

    def _validate_config_values(self):
        """Validate configuration value ranges and types."""
        from core.config import (
            ANALYSIS_TEMPERATURE,
            CHAT_TEMPERATURE,
            ANALYSIS_TIMEOUT_SEC,
            CHAT_TIMEOUT_SEC,
            TRANSCRIPT_FETCH_TIMEOUT_SEC,
            METADATA_TIMEOUT_SEC,
            CACHE_MAX_ENTRIES,
            CACHE_TTL_SECONDS,
        )

        # Temperature validation
        for name, value in (("ANALYSIS_TEMPERATURE", ANALYSIS_TEMPERATURE), ("CHAT_TEMPERATURE", CHAT_TEMPERATURE)):
            if not (0.0 <= value <= 1.0):
                self.warnings.append(f"{name} ({value}) outside normal range [0.0, 1.0]")

        # Timeout validation
        timeouts = {
            "ANALYSIS_TIMEOUT_SEC": ANALYSIS_TIMEOUT_SEC,
            "CHAT_TIMEOUT_SEC": CHAT_TIMEOUT_SEC,
            "TRANSCRIPT_FETCH_TIMEOUT_SEC": TRANSCRIPT_FETCH_TIMEOUT_SEC,
            "METADATA_TIMEOUT_SEC": METADATA_TIMEOUT_SEC,
        }
        for name, value in timeouts.items():
            if value <= 0:
                self.errors.append(f"{name} ({value}) must be > 0")

        # Cache bounds
        if CACHE_MAX_ENTRIES < 0:
            self.errors.append(f"CACHE_MAX_ENTRIES ({CACHE_MAX_ENTRIES}) must be >= 0")
        if CACHE_TTL_SECONDS < 0:
            self.errors.append(f"CACHE_TTL_SECONDS ({CACHE_TTL_SECONDS}) must be >= 0")

# Global validator instance
config_validator = ConfigValidator()
