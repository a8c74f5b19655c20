"""
Base class for the model invoker.

An APIClient receives the ordered batch of a scan (text and image parts) and
returns the model's raw text. It is called at most once per scan and never
retried; any provider failure is reported as an InferenceError.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..core.errors import InferenceError
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class APIClient(ABC):
    """Abstract base class for API clients."""

    def __init__(self, api_key: Optional[str] = None):
        """Initialize the API client.

        Args:
            api_key: API key for the service. If None, will try to get from environment.
        """
        self.api_key = api_key
        self._validate_api_key()

    @abstractmethod
    def _validate_api_key(self) -> None:
        """Validate that the API key is available and properly configured."""
        pass

    @abstractmethod
    def _get_model_name(self) -> str:
        """Return the model name to use for this API."""
        pass

    @abstractmethod
    def _call_api(self, batch) -> str:
        """Send the batch and return the raw response text.

        Args:
            batch: BatchRequest whose parts are iterated in order; each part has
                either `.text` or `.image` (a NormalizedImage).
        """
        pass

    @property
    def model_name(self) -> str:
        return self._get_model_name()

    def generate(self, batch) -> str:
        """Run the batch through the model.

        Returns:
            Raw response text, unparsed.

        Raises:
            InferenceError: If the API call fails or yields no text.
        """
        logger.info("Sending %d part(s) to %s", len(batch), self.model_name)
        try:
            text = self._call_api(batch)
        except InferenceError:
            raise
        except Exception as err:
            logger.error("%s request failed: %s", self.__class__.__name__, err)
            raise InferenceError(f"{self.__class__.__name__} error: {err}") from err
        if text is None:
            raise InferenceError(f"{self.model_name} returned no text")
        logger.debug("Raw model response: %s", text)
        return text
