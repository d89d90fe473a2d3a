class PdfExtractionError(Exception):
    """Raised when a PDF cannot be opened or read."""


class PdfNoTextLayerError(PdfExtractionError):
    """Raised when a PDF opens but carries no extractable text."""
