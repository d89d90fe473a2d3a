class ExtractionError(Exception):
    """Raised when the extraction service returned no usable fields."""


class ServiceUnavailableError(ExtractionError):
    """Raised when the extraction service cannot be reached at all."""


class ExtractionTimeoutError(ExtractionError):
    """Raised when the extraction service did not answer within the bounded wait."""


class DocumentReadError(ExtractionError):
    """Raised when the document content cannot be turned into model input."""
