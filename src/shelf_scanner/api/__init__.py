"""
API integrations for external services.

This module provides the model invoker clients used by a scan and the
enrichment client used after one.
"""

from .base import APIClient
from .clients import ClaudeClient, GeminiClient, OpenAIClient, get_client
from .enrichment import BookDetails, EnrichmentClient, enrich_books
from .prompt import ENRICHMENT_PROMPT_TEMPLATE, IMAGE_LABEL_TEMPLATE, SHELF_PROMPT_TEMPLATE

__all__ = [
    # Model invoker
    "APIClient",
    "GeminiClient",
    "OpenAIClient",
    "ClaudeClient",
    "get_client",

    # Enrichment
    "BookDetails",
    "EnrichmentClient",
    "enrich_books",

    # Prompts
    "SHELF_PROMPT_TEMPLATE",
    "IMAGE_LABEL_TEMPLATE",
    "ENRICHMENT_PROMPT_TEMPLATE",
]
