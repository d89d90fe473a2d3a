from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DocumentSource:
    """Raw document content handed to the extraction client."""

    data: bytes
    content_type: str
    file_name: str | None = None


@dataclass(frozen=True)
class InstructionProfile:
    """Prompts and response schema for one kind of document."""

    name: str
    system_prompt: str
    user_prompt_template: str
    json_schema: dict[str, Any]


@dataclass(frozen=True)
class ExtractionUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class CompletionResult:
    """Raw completion text as returned by a provider adapter."""

    content: str
    model: str
    usage: ExtractionUsage = field(default_factory=ExtractionUsage)


@dataclass(frozen=True)
class ExtractionResult:
    """Raw fields plus provenance, used only for diagnostics."""

    fields: dict[str, Any]
    model: str
    usage: ExtractionUsage = field(default_factory=ExtractionUsage)
