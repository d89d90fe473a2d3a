from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from tradedocs.database.models import Document
from tradedocs.extraction.models import ExtractionResult
from tradedocs.logging.logger import Log
from tradedocs.normalization.models import BolData
from tradedocs.processor.models import UploadRequest
from tradedocs.resolution.models import Resolution


class UploadState(str, Enum):
    RECEIVED = "received"
    BLOB_STORED = "blob_stored"
    EXTRACTED = "extracted"
    NORMALIZED = "normalized"
    RESOLVED = "resolved"
    PERSISTED = "persisted"
    FAILED = "failed"


class FailureReason(str, Enum):
    BLOB_WRITE_FAILED = "blob_write_failed"
    EXTRACTION_FAILED = "extraction_failed"
    CONFLICT = "conflict"
    PERSISTENT_CONFLICT = "persistent_conflict"
    INTERNAL = "internal"


TERMINAL_STATES = frozenset({UploadState.PERSISTED, UploadState.FAILED})

# Non-BOL documents skip extraction and go straight from BLOB_STORED to PERSISTED.
# RESOLVED -> RESOLVED is the single re-resolution after a duplicate key race.
ALLOWED_TRANSITIONS: dict[UploadState, frozenset[UploadState]] = {
    UploadState.RECEIVED: frozenset({UploadState.BLOB_STORED}),
    UploadState.BLOB_STORED: frozenset({UploadState.EXTRACTED, UploadState.PERSISTED}),
    UploadState.EXTRACTED: frozenset({UploadState.NORMALIZED}),
    UploadState.NORMALIZED: frozenset({UploadState.RESOLVED}),
    UploadState.RESOLVED: frozenset({UploadState.RESOLVED, UploadState.PERSISTED}),
}


@dataclass(slots=True)
class UploadContext:
    request: UploadRequest
    state: UploadState = UploadState.RECEIVED
    file_id: str | None = None
    extraction: ExtractionResult | None = None
    bol_data: BolData | None = None
    resolution: Resolution | None = None
    document: Document | None = None
    resolve_attempts: int = 0
    failure_reason: FailureReason | None = None
    error_message: str = ""

    def advance(self, target: UploadState) -> None:
        """Move to the next state.

        Raises:
            ValueError: if the transition is not part of the upload state machine.
        """
        if target not in ALLOWED_TRANSITIONS.get(self.state, frozenset()):
            raise ValueError(f"Illegal upload transition {self.state.value} -> {target.value}")
        Log.info(
            f"Upload {self.state.value} -> {target.value}",
            file_id=self.file_id,
            client_id=self.request.client_id,
        )
        self.state = target

    def fail(self, reason: FailureReason, message: str) -> None:
        """Enter the terminal failure state from any non-terminal state."""
        if self.state in TERMINAL_STATES:
            raise ValueError(f"Upload already finished in state {self.state.value}")
        Log.error(
            f"Upload failed in state {self.state.value}: {message}",
            reason=reason.value,
            file_id=self.file_id,
            client_id=self.request.client_id,
        )
        self.state = UploadState.FAILED
        self.failure_reason = reason
        self.error_message = message


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: UploadContext) -> UploadContext:
        raise NotImplementedError
