"""
Utility to extract text content from uploaded CV files.

The format is sniffed from the file signature, not from the declared MIME
type or extension, which browsers and mail clients get wrong often enough:
- ZIP container (PK\\x03\\x04) or legacy OLE container -> Word (.docx)
- %PDF -> PDF (pdftotext, then PyPDF2, then a raw printable-strings scan)
- anything else -> UTF-8 text

`DocumentExtractor.extract` never raises. Any failure is logged and degrades
to an empty string, so a broken CV never blocks saving a candidate.
"""
import io
import logging
import os
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from config.settings import settings
from utils.worker_pool import run_with_timeout

logger = logging.getLogger(__name__)

ZIP_SIGNATURE = b"PK\x03\x04"
PDF_SIGNATURE = b"%PDF"
OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

FORMAT_WORD = "word"
FORMAT_PDF = "pdf"
FORMAT_TEXT = "text"

# Printable runs of at least 4 characters, like `strings`
_PRINTABLE_RUN = re.compile(r"[^\x00-\x08\x0b-\x1f\x7f\ufffd]{4,}")
_HEBREW_RUN = re.compile(r"[\u0590-\u05FF]+")
_MOBILE_LIKE = re.compile(r"05\d")


class DocumentExtractor:
    """Extract plain text from CV files."""

    @staticmethod
    def detect_format(file_content: bytes) -> str:
        if file_content.startswith(ZIP_SIGNATURE) or file_content.startswith(OLE_SIGNATURE):
            return FORMAT_WORD
        if file_content.startswith(PDF_SIGNATURE):
            return FORMAT_PDF
        return FORMAT_TEXT

    @staticmethod
    def extract(
        file_content: bytes,
        declared_mime_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> str:
        """
        Extract text from raw file bytes.

        Args:
            file_content: Raw bytes of the file
            declared_mime_type: MIME type reported by the client (logged only)
            filename: Original file name (logged only)

        Returns:
            Extracted text, or "" when nothing could be extracted
        """
        if not file_content:
            return ""

        file_format = DocumentExtractor.detect_format(file_content)
        logger.info(
            f"Extracting text from {filename or 'upload'} "
            f"(declared={declared_mime_type}, detected={file_format}, {len(file_content)} bytes)"
        )

        try:
            if file_format == FORMAT_WORD:
                return DocumentExtractor._extract_text_docx(file_content)
            if file_format == FORMAT_PDF:
                return DocumentExtractor._extract_text_pdf(file_content)
            return DocumentExtractor._extract_text_plain(file_content)
        except Exception as e:
            logger.warning(f"Text extraction failed for {filename or 'upload'} ({file_format}): {e}")
            return ""

    @staticmethod
    def extract_from_path(file_path: str) -> str:
        """Extract text from a stored CV file. Missing files yield ""."""
        path = Path(file_path)
        if not path.is_file():
            logger.info(f"CV file does not exist: {file_path}")
            return ""
        try:
            file_content = path.read_bytes()
        except OSError as e:
            logger.warning(f"Could not read CV file {file_path}: {e}")
            return ""
        return DocumentExtractor.extract(file_content, filename=path.name)

    @staticmethod
    def extract_bounded(
        file_content: bytes,
        declared_mime_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> str:
        """Run `extract` on the shared worker pool; a timeout yields ""."""
        return run_with_timeout(
            DocumentExtractor.extract,
            file_content,
            declared_mime_type,
            filename,
            timeout=settings.EXTRACTION_TIMEOUT_SECONDS + 5,
            default="",
        )

    @staticmethod
    def _extract_text_plain(file_content: bytes) -> str:
        """Decode plain text files as UTF-8."""
        return file_content.decode("utf-8", errors="replace")

    @staticmethod
    def _extract_text_docx(file_content: bytes) -> str:
        """Extract text from Word documents (.docx), including table cells."""
        try:
            from docx import Document
        except ImportError:
            raise ImportError(
                "python-docx is required for .docx files. "
                "Install with: pip install python-docx"
            )

        doc = Document(io.BytesIO(file_content))
        parts = [paragraph.text for paragraph in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                parts.append(" ".join(cell.text for cell in row.cells))
        return "\n".join(parts)

    @staticmethod
    def _extract_text_pdf(file_content: bytes) -> str:
        """Extract text from PDF files, falling back through three strategies."""
        try:
            text = DocumentExtractor._run_pdftotext(file_content)
            if text.strip():
                return text
        except FileNotFoundError:
            logger.info("pdftotext is not installed, trying PyPDF2")
        except subprocess.TimeoutExpired:
            logger.warning(f"pdftotext timed out after {settings.EXTRACTION_TIMEOUT_SECONDS}s")
        except subprocess.CalledProcessError as e:
            logger.warning(f"pdftotext failed with exit code {e.returncode}")

        try:
            text = DocumentExtractor._run_pypdf(file_content)
            if text.strip():
                return text
        except Exception as e:
            logger.info(f"PyPDF2 could not read the PDF: {e}")

        logger.info("Falling back to raw printable-strings scan of the PDF")
        return DocumentExtractor._scan_printable_strings(file_content)

    @staticmethod
    def _run_pdftotext(file_content: bytes) -> str:
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(suffix=".pdf", delete=False) as tmp:
                tmp.write(file_content)
                temp_path = tmp.name
            result = subprocess.run(
                [settings.PDFTOTEXT_BINARY, "-enc", "UTF-8", temp_path, "-"],
                capture_output=True,
                timeout=settings.EXTRACTION_TIMEOUT_SECONDS,
                check=True,
            )
            return result.stdout.decode("utf-8", errors="replace")
        finally:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)

    @staticmethod
    def _run_pypdf(file_content: bytes) -> str:
        try:
            import PyPDF2
        except ImportError:
            raise ImportError(
                "PyPDF2 is required for .pdf files. "
                "Install with: pip install PyPDF2"
            )

        pdf_reader = PyPDF2.PdfReader(io.BytesIO(file_content))
        return "\n".join(page.extract_text() or "" for page in pdf_reader.pages)

    @staticmethod
    def _scan_printable_strings(file_content: bytes) -> str:
        """
        Lossy fallback: keep printable runs that look like CV contact lines.

        Only lines containing Hebrew text, an '@' or a 05x mobile prefix
        survive, so this recovers plain-text-like PDFs and little else.
        """
        decoded = file_content.decode("utf-8", errors="replace")
        lines = []
        for run in _PRINTABLE_RUN.findall(decoded):
            for line in run.splitlines():
                line = line.strip()
                if len(line) <= 2:
                    continue
                if _HEBREW_RUN.search(line) or "@" in line or _MOBILE_LIKE.search(line):
                    lines.append(line)
        return " ".join(lines)
