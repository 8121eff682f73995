"""
PDF text extraction using LangChain PyPDFLoader.

Writes uploaded bytes to a private temp directory, loads one LangChain
Document per page, and joins the page texts. Parsing failures degrade to a
placeholder text so the upload still yields a chat-able document.

Dependencies: langchain_community.document_loaders, pypdf
System role: PDF extraction collaborator for document uploads
"""

import logging
import shutil
import tempfile
from pathlib import Path

from fastapi.concurrency import run_in_threadpool
from langchain_community.document_loaders import PyPDFLoader

from docchat.core.exceptions import ExtractionError
from docchat.models.document import ExtractedContent

logger = logging.getLogger(__name__)

TEMP_DIR_PREFIX = "docchat_"
BYTES_PER_ESTIMATED_PAGE = 50_000


def cleanup_temp_dir(temp_dir: Path) -> None:
    """
    Safely remove a docchat temp directory and everything in it.

    Args:
        temp_dir: Directory created by ``PDFExtractor``
    """
    try:
        if temp_dir.exists() and temp_dir.name.startswith(TEMP_DIR_PREFIX):
            shutil.rmtree(temp_dir, ignore_errors=True)
            logger.debug("Cleaned up temp directory", extra={"temp_dir": str(temp_dir)})
    except OSError as e:
        logger.warning(
            "Failed to cleanup temp directory",
            extra={"temp_dir": str(temp_dir), "error": str(e)},
        )


def fallback_content(size: int) -> ExtractedContent:
    """
    Build the placeholder used when text extraction fails.

    Args:
        size: File size in bytes

    Returns:
        ExtractedContent: Notice text and a page count estimated from size
    """
    text = (
        f"PDF Document ({round(size / 1024)}KB)\n"
        "This PDF has been uploaded and processed.\n"
        "You can chat with this document using AI assistance.\n\n"
        "Note: Full text extraction failed. Consider using a different PDF "
        "processing service for better results."
    )
    return ExtractedContent(
        text=text,
        page_count=max(1, size // BYTES_PER_ESTIMATED_PAGE),
        degraded=True,
    )


class PDFExtractor:
    """Extract text and page count from raw PDF bytes."""

    def parse(self, data: bytes, filename: str = "upload.pdf") -> ExtractedContent:
        """
        Parse PDF bytes into text.

        Args:
            data: Raw PDF bytes
            filename: Original filename, used in errors

        Returns:
            ExtractedContent: Joined page text and page count

        Raises:
            ExtractionError: When the PDF cannot be parsed
        """
        if not data:
            raise ExtractionError("PDF file is empty", filename)

        temp_dir = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX))
        try:
            temp_path = temp_dir / "upload.pdf"
            temp_path.write_bytes(data)

            pages = PyPDFLoader(str(temp_path)).load()
            if not pages:
                raise ExtractionError("PDF document contains no pages", filename)

            text = "\n\n".join(page.page_content.strip() for page in pages).strip()
            return ExtractedContent(text=text, page_count=len(pages))

        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"Failed to parse PDF: {e}", filename) from e
        finally:
            cleanup_temp_dir(temp_dir)

    async def extract(self, data: bytes, filename: str = "upload.pdf") -> ExtractedContent:
        """
        Extract content, degrading to placeholder text on parse failure.

        Parsing runs in the threadpool so other connections keep being served.

        Args:
            data: Raw PDF bytes
            filename: Original filename

        Returns:
            ExtractedContent: Real or degraded content, never raises for bad PDFs
        """
        try:
            return await run_in_threadpool(self.parse, data, filename)
        except ExtractionError as e:
            logger.warning(
                "PDF parsing failed, using fallback",
                extra={"file_name": filename, "size": len(data), "error_msg": e.message},
            )
            return fallback_content(len(data))
