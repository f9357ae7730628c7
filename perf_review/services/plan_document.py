import io
import re
import logging

import PyPDF2
from PyPDF2.errors import PdfReadError

from perf_review.core.exceptions import ValidationFailedError

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Normalize whitespace so line-based segmentation sees clean lines."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Extract and normalize the text layer of a PDF held in memory."""
    try:
        reader = PyPDF2.PdfReader(io.BytesIO(pdf_bytes))
        pages = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError as e:
        logger.warning(f"Unreadable PDF upload: {e}")
        raise ValidationFailedError(f"Could not read PDF: {e}")

    logger.info(f"Extracted text from {len(pages)} PDF page(s)")
    return normalize_text("\n".join(pages))
