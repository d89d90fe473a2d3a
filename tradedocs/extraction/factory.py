from typing import ClassVar

from tradedocs.config.settings import Settings
from tradedocs.extraction.client_base import BaseExtractionClient
from tradedocs.extraction.example_client_adapter import ExampleClientAdapter
from tradedocs.extraction.extractor import TextExtractionClient
from tradedocs.extraction.openai_client_adapter import OpenAIClientAdapter
from tradedocs.pdf.factory import PdfExtractorFactory


class ExtractionClientFactory:
    """Creates the configured text extraction client."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> TextExtractionClient:
        """Create a configured extraction client from application settings."""
        provider = settings.extraction_provider.strip().lower()
        return TextExtractionClient(
            client=cls.create_provider_client(provider, settings),
            pdf_extractor=PdfExtractorFactory.create(settings),
            model=settings.extraction_model_name or provider,
            temperature=settings.extraction_temperature,
        )

    @classmethod
    def create_provider_client(cls, provider: str, settings: Settings) -> BaseExtractionClient:
        if provider == "example":
            return ExampleClientAdapter()
        if not settings.extraction_model_name:
            raise ValueError(
                f"extraction_model_name is required for extraction_provider={provider}"
            )
        return OpenAIClientAdapter(
            api_key=settings.extraction_api_key,
            timeout_seconds=settings.extraction_timeout_seconds,
            probe_timeout_seconds=settings.extraction_probe_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        override = settings.extraction_base_url.strip()
        if provider == "openai":
            return override or None
        if provider == "openai_compatible":
            if not override:
                raise ValueError(
                    "extraction_base_url is required for "
                    "extraction_provider=openai_compatible"
                )
            return override
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return override or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {supported}"
        )
