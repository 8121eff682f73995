"""PDF extraction boundary."""

from .pdf_extractor import PDFExtractor, fallback_content

__all__ = ["PDFExtractor", "fallback_content"]
