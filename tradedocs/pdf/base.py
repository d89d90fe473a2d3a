from abc import ABC, abstractmethod

from tradedocs.pdf.exceptions import PdfNoTextLayerError

PAGE_SEPARATOR = "\n\n--- page break ---\n\n"


class BasePdfExtractor(ABC):
    """Contract for PDF text-layer readers used before field extraction."""

    name: str = "base"

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Return the text layer of each page, in page order.

        Raises:
            PdfExtractionError: if the document cannot be parsed.
        """

    def extract(self, pdf_bytes: bytes) -> str:
        """Join all page texts into one string for the extraction prompt.

        Raises:
            PdfNoTextLayerError: if no page yields any text (scanned image PDF).
        """
        pages = [text.strip() for text in self.extract_pages(pdf_bytes)]
        if not any(pages):
            raise PdfNoTextLayerError(
                f"{self.name}: PDF has {len(pages)} page(s) but no text layer"
            )
        return PAGE_SEPARATOR.join(page for page in pages if page)
