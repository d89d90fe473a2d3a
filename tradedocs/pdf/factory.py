from tradedocs.config.settings import Settings
from tradedocs.pdf.base import BasePdfExtractor
from tradedocs.pdf.pdfplumber_adapter import PdfPlumberAdapter
from tradedocs.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfExtractorFactory:
    """Builds the PDF text reader named by PDF_ENGINE."""

    ADAPTERS: dict[str, type[BasePdfExtractor]] = {
        PdfPlumberAdapter.name: PdfPlumberAdapter,
        PyMuPdfAdapter.name: PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.strip().lower()
        try:
            adapter_cls = cls.ADAPTERS[engine]
        except KeyError:
            raise ValueError(
                f"Unsupported PDF engine '{settings.pdf_engine}'. "
                f"Supported: {sorted(cls.ADAPTERS)}"
            ) from None
        return adapter_cls()
