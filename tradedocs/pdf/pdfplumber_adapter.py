import io

import pdfplumber

from tradedocs.pdf.base import BasePdfExtractor
from tradedocs.pdf.exceptions import PdfExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Reads the text layer with pdfplumber."""

    name = "pdfplumber"

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber could not read PDF: {exc}") from exc
