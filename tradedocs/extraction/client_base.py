from abc import ABC, abstractmethod
from typing import Any

from tradedocs.extraction.models import CompletionResult


class BaseExtractionClient(ABC):
    """Contract for provider-specific extraction AI clients."""

    @abstractmethod
    def probe(self) -> None:
        """Cheap reachability check issued before every extraction.

        Raises:
            ServiceUnavailableError: if the provider cannot be reached.
        """

    @abstractmethod
    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, Any],
        image_data_urls: list[str] | None = None,
    ) -> CompletionResult:
        """Return the provider response text with model and usage.

        Raises:
            ExtractionTimeoutError: if the bounded wait elapsed.
            ServiceUnavailableError: if the connection dropped.
            ExtractionError: for any other provider failure.
        """
