"""
API client implementations for various AI services.

Each client translates the ordered batch of a scan into its provider's
multimodal message format, keeping every filename label directly in front of
its image. Gemini is the default provider.
"""

import os
from typing import Any, Dict, List, Optional

import anthropic
import google.generativeai as genai
from openai import OpenAI

from ..utils.log_utils import get_logger
from .base import APIClient

logger = get_logger(__name__)

MAX_OUTPUT_TOKENS = 8192


class GeminiClient(APIClient):
    """Client for Google's Gemini API."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-3-pro-preview"):
        """Initialize Gemini client.

        Args:
            api_key: Google API key. If None, uses GOOGLE_API_KEY or GEMINI_API_KEY env var.
            model: Model name to use (default: gemini-3-pro-preview)
        """
        self.model = model
        super().__init__(api_key)

    def _validate_api_key(self) -> None:
        """Validate Google API key."""
        key = self.api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        if not key:
            raise ValueError("GOOGLE_API_KEY environment variable not set")
        self.api_key = key
        genai.configure(api_key=key)

    def _get_model_name(self) -> str:
        """Return Gemini model name."""
        return self.model

    @staticmethod
    def build_contents(batch) -> List[Any]:
        contents: List[Any] = []
        for part in batch:
            if part.is_image:
                contents.append({"mime_type": part.image.mime_type, "data": part.image.data})
            else:
                contents.append(part.text)
        return contents

    def _call_api(self, batch) -> str:
        """Make a single generate_content call with the whole batch."""
        model = genai.GenerativeModel(
            self.model,
            generation_config={
                "candidate_count": 1,
                "max_output_tokens": MAX_OUTPUT_TOKENS,
            },
        )
        response = model.generate_content(self.build_contents(batch))
        return response.text


class OpenAIClient(APIClient):
    """Client for OpenAI's GPT API."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4.1-mini"):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key. If None, uses OPENAI_API_KEY env var.
            model: Model name to use (default: gpt-4.1-mini)
        """
        self.model = model
        super().__init__(api_key)

    def _validate_api_key(self) -> None:
        """Validate OpenAI API key."""
        key = self.api_key or os.getenv("OPENAI_API_KEY")
        if not key:
            raise ValueError("OPENAI_API_KEY environment variable not set")
        self.api_key = key
        self.client = OpenAI(api_key=key)

    def _get_model_name(self) -> str:
        """Return OpenAI model name."""
        return self.model

    @staticmethod
    def build_content(batch) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = []
        for part in batch:
            if part.is_image:
                content.append({
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{part.image.mime_type};base64,{part.image.to_b64()}",
                        "detail": "high",
                    },
                })
            else:
                content.append({"type": "text", "text": part.text})
        return content

    def _call_api(self, batch) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": self.build_content(batch)}],
            max_completion_tokens=MAX_OUTPUT_TOKENS,
        )
        return response.choices[0].message.content


class ClaudeClient(APIClient):
    """Client for Anthropic's Claude API."""

    def __init__(self, api_key: Optional[str] = None, model: str = "claude-sonnet-4-5"):
        """Initialize Claude client.

        Args:
            api_key: Anthropic API key. If None, uses ANTHROPIC_API_KEY env var.
            model: Model name to use (default: claude-sonnet-4-5)
        """
        self.model = model
        super().__init__(api_key)

    def _validate_api_key(self) -> None:
        """Validate Anthropic API key."""
        key = self.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")
        self.api_key = key
        self.client = anthropic.Anthropic(api_key=key)

    def _get_model_name(self) -> str:
        """Return Claude model name."""
        return self.model

    @staticmethod
    def build_content(batch) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = []
        for part in batch:
            if part.is_image:
                content.append({
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": part.image.mime_type,
                        "data": part.image.to_b64(),
                    },
                })
            else:
                content.append({"type": "text", "text": part.text})
        return content

    def _call_api(self, batch) -> str:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=MAX_OUTPUT_TOKENS,
            messages=[{"role": "user", "content": self.build_content(batch)}],
        )
        # Concatenate text blocks; Claude may split long answers
        return "".join(block.text for block in response.content if block.type == "text")


def get_client(api_name: str, **kwargs) -> APIClient:
    """Factory function to create API client instances.

    Args:
        api_name: Name of the API ('gemini', 'openai', 'claude')
        **kwargs: Additional arguments passed to the client constructor

    Returns:
        Configured API client instance
    """
    api_name = api_name.lower()
    if kwargs.get("model") is None:
        kwargs.pop("model", None)
    if api_name == "gemini":
        return GeminiClient(**kwargs)
    elif api_name == "openai":
        return OpenAIClient(**kwargs)
    elif api_name == "claude":
        return ClaudeClient(**kwargs)
    else:
        raise ValueError(f"Unsupported API: {api_name}")
