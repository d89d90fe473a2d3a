class ProcessorError(Exception):
    """Base exception for all document processing errors."""


class NotFoundError(ProcessorError):
    """Raised when a referenced entity does not exist."""


class DocumentNotFoundError(NotFoundError):
    """Raised when a document cannot be found in the database."""


class ClientNotFoundError(NotFoundError):
    """Raised when a client cannot be found in the database."""


class UnauthorizedError(ProcessorError):
    """Raised when the caller lacks the admin capability."""


class InvalidInputError(ProcessorError):
    """Raised when a request is malformed."""


class ExtractionFailedError(ProcessorError):
    """Raised when the extraction service could not produce usable fields."""


class DuplicateKeyError(ProcessorError):
    """Raised when a write violates a storage-level uniqueness constraint."""


class ConflictError(ProcessorError):
    """Raised when a BOL number already belongs to a different client."""


class PersistentConflictError(ConflictError):
    """Raised when a write keeps colliding after one re-resolution."""


class NotBolError(ProcessorError):
    """Raised when a BOL-only operation targets another document type."""


class BlobWriteFailedError(ProcessorError):
    """Raised when the uploaded or rendered file could not be stored."""
