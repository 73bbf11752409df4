import io
from dataclasses import dataclass
from typing import Dict, List, Optional

import pdfplumber
import structlog
from docx import Document

from ..application.models import ExtractedContact
from ..core.exceptions import ParseFailure, UnsupportedFormat
from .contact import extract_info

logger = structlog.get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_MIME_TYPES = (PDF_MIME_TYPE, DOCX_MIME_TYPE)


def _is_password_error(exc: BaseException) -> bool:
    """pdfplumber wraps pdfminer errors, so walk causes and args."""
    seen = set()
    pending: List[BaseException] = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        if "password" in type(current).__name__.lower() or "password" in str(current).lower():
            return True
        for linked in (current.__cause__, current.__context__, *current.args):
            if isinstance(linked, BaseException):
                pending.append(linked)
    return False


class PdfTextReader:
    """Reads the text layer of every page with pdfplumber."""

    def read(self, data: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as e:
            if _is_password_error(e):
                raise ParseFailure(
                    "This PDF is password protected. Please use an unprotected PDF file."
                ) from e
            raise ParseFailure(f"Failed to parse PDF: {str(e) or type(e).__name__}") from e

        logger.debug("pdf_parsed", pages=len(pages))
        return "\n".join(pages).strip()


class DocxTextReader:
    """Flattens a DOCX body to text, one paragraph per line."""

    def read(self, data: bytes) -> str:
        try:
            document = Document(io.BytesIO(data))
        except Exception as e:
            raise ParseFailure(f"Failed to parse DOCX: {str(e) or type(e).__name__}") from e

        paragraphs = [p.text for p in document.paragraphs]
        logger.debug("docx_parsed", paragraphs=len(paragraphs))
        return "\n".join(paragraphs).strip()


@dataclass
class ParsedResume:
    text: str
    contact: ExtractedContact


class ResumeTextExtractor:
    def __init__(self, max_bytes: Optional[int] = None):
        self.max_bytes = max_bytes
        self.readers: Dict[str, object] = {
            PDF_MIME_TYPE: PdfTextReader(),
            DOCX_MIME_TYPE: DocxTextReader(),
        }

    def extract(self, file_bytes: bytes, declared_mime_type: str) -> str:
        """
        Convert an uploaded resume to flat text.

        Only the MIME type is used to pick a reader; unsupported types and
        oversized uploads are rejected before any parsing happens.
        """
        reader = self.readers.get(declared_mime_type)
        if reader is None:
            raise UnsupportedFormat(
                f"Unsupported file type '{declared_mime_type}'. Please upload a PDF or DOCX file."
            )
        if self.max_bytes is not None and len(file_bytes) > self.max_bytes:
            raise UnsupportedFormat(
                f"File must be smaller than {self.max_bytes // (1024 * 1024)}MB"
            )

        logger.info("resume_extract", mime_type=declared_mime_type, size=len(file_bytes))
        return reader.read(file_bytes)

    def parse(self, file_bytes: bytes, declared_mime_type: str) -> ParsedResume:
        text = self.extract(file_bytes, declared_mime_type)
        return ParsedResume(text=text, contact=extract_info(text))
