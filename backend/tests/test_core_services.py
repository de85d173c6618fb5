"""
Unit tests for the Ollama client and startup configuration validation.
"""
from unittest.mock import Mock, patch

import httpx
import pytest
import requests

from core.config_validator import ConfigValidator
from core.ollama_client import OllamaClient, OllamaError


def make_ollama_response(payload):
    response = Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


class TestOllamaClient:
    """Test chat completion calls (with mocking)."""

    def test_chat_payload_and_content(self):
        client = OllamaClient(base_url="http://ollama:11434")
        client.client = Mock()
        client.client.post.return_value = make_ollama_response({"message": {"role": "assistant", "content": "Hi"}})

        result = client.chat(
            [{"role": "user", "content": "Hello"}],
            model="llama3.1:latest",
            temperature=0.3,
            max_tokens=50,
            format="json",
            timeout=10,
        )

        assert result == "Hi"
        args, kwargs = client.client.post.call_args
        assert args[0] == "http://ollama:11434/api/chat"
        assert kwargs["json"]["format"] == "json"
        assert kwargs["json"]["stream"] is False
        assert kwargs["json"]["options"] == {"temperature": 0.3, "num_predict": 50}
        assert kwargs["timeout"] == 10

    def test_format_omitted_by_default(self):
        client = OllamaClient()
        client.client = Mock()
        client.client.post.return_value = make_ollama_response({"message": {"content": "ok"}})

        client.chat([{"role": "user", "content": "Hello"}])

        assert "format" not in client.client.post.call_args[1]["json"]

    def test_transport_error(self):
        client = OllamaClient()
        client.client = Mock()
        client.client.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(OllamaError):
            client.chat([{"role": "user", "content": "Hello"}])

    def test_missing_content(self):
        client = OllamaClient()
        client.client = Mock()
        client.client.post.return_value = make_ollama_response({"error": "model not found"})

        with pytest.raises(OllamaError):
            client.chat([{"role": "user", "content": "Hello"}])


class TestConfigValidator:
    """Test startup validation (with mocking)."""

    @patch('core.config_validator.requests.get')
    def test_valid_configuration(self, mock_get):
        mock_get.return_value = make_ollama_response({"models": [{"name": "llama3.1:latest"}]})

        with patch('core.config.OLLAMA_ANALYSIS_MODEL', "llama3.1:latest"), \
                patch('core.config.OLLAMA_CHAT_MODEL', "llama3.1:latest"), \
                patch('core.config.TRANSCRIPT_SOURCES', ["community", "xml_scrape"]):
            result = ConfigValidator().validate_all()

        assert result["valid"] is True
        assert result["warnings"] == []

    @patch('core.config_validator.requests.get')
    def test_ollama_unreachable(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError()

        result = ConfigValidator().validate_all()

        assert result["valid"] is False
        assert any("Cannot connect to Ollama" in error for error in result["errors"])

    @patch('core.config_validator.requests.get')
    def test_missing_model_is_warning(self, mock_get):
        mock_get.return_value = make_ollama_response({"models": []})

        with patch('core.config.TRANSCRIPT_SOURCES', ["community"]):
            result = ConfigValidator().validate_all()

        assert result["valid"] is True
        assert any("Model not found" in warning for warning in result["warnings"])

    @patch('core.config_validator.requests.get')
    def test_bad_transcript_sources(self, mock_get):
        mock_get.return_value = make_ollama_response({"models": []})

        with patch('core.config.TRANSCRIPT_SOURCES', ["caption_api", "carrier_pigeon"]), \
                patch('core.config.GOOGLE_APPLICATION_CREDENTIALS', None), \
                patch('core.config.GOOGLE_APPLICATION_CREDENTIALS_JSON', None):
            result = ConfigValidator().validate_all()

        assert result["valid"] is False
        assert any("Unknown transcript source: carrier_pigeon" in error for error in result["errors"])
        assert any("requires GOOGLE_APPLICATION_CREDENTIALS" in error for error in result["errors"])
