from typing import Any

import httpx
import openai

from tradedocs.extraction.client_base import BaseExtractionClient
from tradedocs.extraction.exceptions import (
    ExtractionError,
    ExtractionTimeoutError,
    ServiceUnavailableError,
)
from tradedocs.extraction.models import CompletionResult, ExtractionUsage


class OpenAIClientAdapter(BaseExtractionClient):
    """Extraction client built on the OpenAI-compatible chat API.

    The SDK's own retries are disabled; retry policy belongs to the caller.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        probe_timeout_seconds: float = 5.0,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key or "unused",
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )
        self._probe_timeout_seconds = probe_timeout_seconds

    def probe(self) -> None:
        try:
            self._client.with_options(timeout=self._probe_timeout_seconds).models.list()
        except (openai.APIConnectionError, httpx.TransportError) as exc:
            raise ServiceUnavailableError(
                f"Extraction service unreachable: {exc}"
            ) from exc
        except openai.APIStatusError as exc:
            if exc.status_code >= 500:
                raise ServiceUnavailableError(
                    f"Extraction service unhealthy ({exc.status_code}): {exc}"
                ) from exc
            raise ExtractionError(
                f"Extraction service rejected probe ({exc.status_code}): {exc}"
            ) from exc

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
        user_content: Any = user_prompt
        if image_data_urls:
            user_content = [{"type": "text", "text": user_prompt}] + [
                {"type": "image_url", "image_url": {"url": url}} for url in image_data_urls
            ]
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "bol_extraction",
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise ExtractionTimeoutError(f"Extraction service timed out: {exc}") from exc
        except (openai.APIConnectionError, httpx.TransportError) as exc:
            raise ServiceUnavailableError(
                f"Extraction service connection failed: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise ExtractionError(f"Extraction service error: {exc}") from exc

        if not response.choices:
            raise ExtractionError("Extraction service returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ExtractionError("Extraction service returned empty response")

        usage = ExtractionUsage()
        if response.usage is not None:
            usage = ExtractionUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
        return CompletionResult(content=content, model=response.model or model, usage=usage)
