"""
Book detail enrichment.

Resolves a detected (title, author) pair into bibliographic details through
an OpenAI-compatible chat endpoint (Perplexity by default, since its models
search the web). This runs after a scan, once per distinct title, and a
failure for one title never affects the others.
"""

import json
import os
from typing import Any, Dict, Iterable, Optional

import openai
from openai import OpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.models import BookDetection
from ..core.reducer import strip_code_fences
from ..utils.log_utils import get_logger
from .prompt import ENRICHMENT_PROMPT_TEMPLATE

logger = get_logger(__name__)

PERPLEXITY_BASE_URL = "https://api.perplexity.ai"

ENRICHMENT_ERROR = {"error": True}


class BookDetails(BaseModel):
    """Best-effort bibliographic record for one title."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    authors: str = ""
    isbn: str = ""
    publisher: str = ""
    publication_date: str = Field("", alias="publicationDate")
    edition: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class EnrichmentClient:
    """Chat-completions client asking for one JSON record per book."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "sonar",
        base_url: str = PERPLEXITY_BASE_URL,
        client: Optional[Any] = None,
    ):
        self.model = model
        if client is not None:
            self.client = client
            return
        key = api_key or os.getenv("PERPLEXITY_API_KEY")
        if not key:
            raise ValueError("PERPLEXITY_API_KEY environment variable not set")
        self.client = OpenAI(api_key=key, base_url=base_url)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((openai.APIConnectionError, openai.RateLimitError)),
        reraise=True,
    )
    def _complete(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.choices[0].message.content

    def lookup(self, title: str, author: str = "") -> BookDetails:
        """
        Fetch details for one book.

        Raises:
            ValueError: the response is not a JSON object.
            openai.OpenAIError: transport or service failure after retries.
        """
        prompt = ENRICHMENT_PROMPT_TEMPLATE.format(title=title, author=author or "unknown")
        text = self._complete(prompt)
        try:
            data = json.loads(strip_code_fences(text or ""))
        except json.JSONDecodeError:
            logger.error("Failed to parse enrichment response for '%s': %s", title, text)
            raise ValueError(f"Invalid JSON response: {text}")
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got: {text}")
        try:
            return BookDetails.model_validate(data)
        except ValidationError as err:
            raise ValueError(f"Unexpected enrichment record: {err}") from err


def enrich_books(
    books: Iterable[BookDetection], client: EnrichmentClient
) -> Dict[str, Dict[str, Any]]:
    """
    Look up every distinct title once, in detection order.

    Returns:
        Mapping of title to its details dict, or to {"error": True} when the
        lookup for that title failed.
    """
    enriched: Dict[str, Dict[str, Any]] = {}
    for book in books:
        if book.title in enriched:
            continue
        try:
            enriched[book.title] = client.lookup(book.title, book.author).to_dict()
        except (ValueError, openai.OpenAIError) as err:
            logger.warning("Failed to enrich '%s': %s", book.title, err)
            enriched[book.title] = dict(ENRICHMENT_ERROR)
    return enriched
