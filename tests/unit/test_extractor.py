import json
from unittest.mock import MagicMock

import pytest

from tradedocs.extraction.exceptions import (
    DocumentReadError,
    ExtractionError,
    ServiceUnavailableError,
)
from tradedocs.extraction.extractor import TextExtractionClient
from tradedocs.extraction.models import (
    CompletionResult,
    DocumentSource,
    ExtractionUsage,
    InstructionProfile,
)
from tradedocs.pdf.exceptions import PdfNoTextLayerError


def _make_client(content: str = '{"shipmentDetails": {}}', temperature: float = 0.0) -> tuple[
    TextExtractionClient, MagicMock, MagicMock
]:
    provider = MagicMock()
    provider.create_completion.return_value = CompletionResult(
        content=content, model="gpt-4o-mini", usage=ExtractionUsage(3, 2, 5)
    )
    pdf_extractor = MagicMock()
    pdf_extractor.extract.return_value = "BILL OF LADING HLCUBSC250265371"
    client = TextExtractionClient(
        client=provider, pdf_extractor=pdf_extractor, model="gpt-4o-mini", temperature=temperature
    )
    return client, provider, pdf_extractor


class TestTextExtractionClient:
    def test_pdf_text_is_placed_in_prompt(self, profile: InstructionProfile) -> None:
        client, provider, pdf_extractor = _make_client()
        result = client.extract(DocumentSource(b"%PDF", "application/pdf"), profile)

        pdf_extractor.extract.assert_called_once_with(b"%PDF")
        kwargs = provider.create_completion.call_args.kwargs
        assert "HLCUBSC250265371" in kwargs["user_prompt"]
        assert json.dumps({"type": "object"}, indent=2) in kwargs["user_prompt"]
        assert kwargs["image_data_urls"] is None
        assert result.fields == {"shipmentDetails": {}}
        assert result.model == "gpt-4o-mini"
        assert result.usage.total_tokens == 5

    def test_probe_runs_before_completion(self, profile: InstructionProfile) -> None:
        client, provider, _ = _make_client()
        provider.probe.side_effect = ServiceUnavailableError("down")
        with pytest.raises(ServiceUnavailableError):
            client.extract(DocumentSource(b"%PDF", "application/pdf"), profile)
        provider.create_completion.assert_not_called()

    def test_image_is_sent_as_data_url(self, profile: InstructionProfile) -> None:
        client, provider, pdf_extractor = _make_client()
        client.extract(DocumentSource(b"\x89PNG", "image/png"), profile)
        pdf_extractor.extract.assert_not_called()
        urls = provider.create_completion.call_args.kwargs["image_data_urls"]
        assert urls == ["data:image/png;base64,iVBORw=="]

    def test_plain_text_is_decoded(self, profile: InstructionProfile) -> None:
        client, provider, _ = _make_client()
        client.extract(DocumentSource(b"BOL NO. ABC123", "text/plain; charset=utf-8"), profile)
        assert "BOL NO. ABC123" in provider.create_completion.call_args.kwargs["user_prompt"]

    def test_unsupported_content_type(self, profile: InstructionProfile) -> None:
        client, provider, _ = _make_client()
        with pytest.raises(DocumentReadError, match="Unsupported content type"):
            client.extract(DocumentSource(b"PK", "application/zip"), profile)
        provider.probe.assert_not_called()

    def test_unreadable_pdf_is_document_read_error(self, profile: InstructionProfile) -> None:
        client, _, pdf_extractor = _make_client()
        pdf_extractor.extract.side_effect = PdfNoTextLayerError("no text layer")
        with pytest.raises(DocumentReadError, match="no text layer"):
            client.extract(DocumentSource(b"%PDF", "application/pdf"), profile)

    def test_temperature_is_clamped(self, profile: InstructionProfile) -> None:
        client, provider, _ = _make_client(temperature=0.9)
        client.extract(DocumentSource(b"x", "text/plain"), profile)
        assert provider.create_completion.call_args.kwargs["temperature"] == 0.2


class TestParseJson:
    def test_strips_markdown_fences(self) -> None:
        raw = '```json\n{"a": 1}\n```'
        assert TextExtractionClient._parse_json(raw) == {"a": 1}

    def test_finds_object_inside_prose(self) -> None:
        raw = 'Here is the data: {"a": {"b": 2}} hope it helps'
        assert TextExtractionClient._parse_json(raw) == {"a": {"b": 2}}

    def test_no_json_object(self) -> None:
        with pytest.raises(ExtractionError, match="no JSON object"):
            TextExtractionClient._parse_json("sorry, I cannot read this")

    def test_non_object_json(self) -> None:
        with pytest.raises(ExtractionError, match="must be a JSON object"):
            TextExtractionClient._parse_json("[1, 2]")
