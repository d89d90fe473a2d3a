"""Turns an uploaded document into raw BOL fields via an AI provider."""

import base64
import json
import re
from typing import Any

from tradedocs.extraction.client_base import BaseExtractionClient
from tradedocs.extraction.exceptions import DocumentReadError, ExtractionError
from tradedocs.extraction.models import DocumentSource, ExtractionResult, InstructionProfile
from tradedocs.logging.logger import Log
from tradedocs.pdf.base import BasePdfExtractor
from tradedocs.pdf.exceptions import PdfExtractionError

IMAGE_CONTENT_TYPES = frozenset({"image/png", "image/jpeg"})
PDF_CONTENT_TYPE = "application/pdf"
TEXT_CONTENT_TYPE = "text/plain"
SUPPORTED_CONTENT_TYPES = IMAGE_CONTENT_TYPES | {PDF_CONTENT_TYPE, TEXT_CONTENT_TYPE}

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_IMAGE_PLACEHOLDER = "(the document is attached as an image)"


class TextExtractionClient:
    """Probe, then one bounded extraction call. Never retries on its own."""

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        pdf_extractor: BasePdfExtractor,
        model: str,
        temperature: float = 0.0,
    ) -> None:
        self._client = client
        self._pdf_extractor = pdf_extractor
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))

    def extract(self, source: DocumentSource, profile: InstructionProfile) -> ExtractionResult:
        """Extract raw fields from a document.

        Raises:
            ServiceUnavailableError: if the probe fails or the connection drops.
            ExtractionTimeoutError: if the completion exceeded the bounded wait.
            DocumentReadError: if the content type is unsupported or unreadable.
            ExtractionError: if the response is not a JSON object.
        """
        document_text, image_urls = self._prepare_input(source)
        self._client.probe()

        prompt = profile.user_prompt_template.format(
            document_text=document_text,
            json_schema=json.dumps(profile.json_schema, indent=2),
        )
        Log.debug(f"Extraction prompt:\n{prompt}")

        completion = self._client.create_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=profile.system_prompt,
            user_prompt=prompt,
            json_schema=profile.json_schema,
            image_data_urls=image_urls or None,
        )
        Log.debug(f"Extraction raw response:\n{completion.content}")

        fields = self._parse_json(completion.content)
        Log.info(
            f"Extraction complete with profile '{profile.name}'",
            model=completion.model,
            prompt_tokens=completion.usage.prompt_tokens,
            completion_tokens=completion.usage.completion_tokens,
        )
        return ExtractionResult(fields=fields, model=completion.model, usage=completion.usage)

    def _prepare_input(self, source: DocumentSource) -> tuple[str, list[str]]:
        content_type = source.content_type.split(";")[0].strip().lower()
        if content_type == PDF_CONTENT_TYPE:
            try:
                return self._pdf_extractor.extract(source.data), []
            except PdfExtractionError as exc:
                raise DocumentReadError(str(exc)) from exc
        if content_type in IMAGE_CONTENT_TYPES:
            encoded = base64.b64encode(source.data).decode("ascii")
            return _IMAGE_PLACEHOLDER, [f"data:{content_type};base64,{encoded}"]
        if content_type == TEXT_CONTENT_TYPE:
            try:
                return source.data.decode("utf-8"), []
            except UnicodeDecodeError as exc:
                raise DocumentReadError(f"Text document is not valid UTF-8: {exc}") from exc
        raise DocumentReadError(f"Unsupported content type '{source.content_type}'")

    @staticmethod
    def _parse_json(raw: str) -> dict[str, Any]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError:
            match = _JSON_OBJECT_RE.search(cleaned)
            if match is None:
                raise ExtractionError("Extraction response contains no JSON object") from None
            try:
                parsed = json.loads(match.group(0))
            except json.JSONDecodeError as exc:
                raise ExtractionError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ExtractionError("Extraction response must be a JSON object")
        return parsed
