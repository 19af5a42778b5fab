"""Reading curriculum uploads: plain text, PDF or an image for the vision model."""

import base64
import logging
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

MAX_CHARS = 70000
TEXT_EXTENSIONS = (".txt", ".md")
IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")


class UnsupportedUpload(ValueError):
    pass


@dataclass
class CurriculumUpload:
    kind: str  # "text" or "image"
    text: str = ""
    image_base64: Optional[str] = None
    mime_type: Optional[str] = None


def extract_pdf_text(data: bytes, max_chars: int = MAX_CHARS) -> str:
    reader = PdfReader(BytesIO(data))
    pages = []
    for page_num, page in enumerate(reader.pages):
        try:
            page_text = page.extract_text() or ""
        except (PdfReadError, ValueError, KeyError) as e:
            logger.warning("Error processing page %d: %s", page_num + 1, e)
            continue
        # Collapse horizontal whitespace but keep newlines
        page_text = re.sub(r"[^\S\r\n]+", " ", page_text).strip()
        if page_text:
            pages.append(page_text)
    return "\n\n".join(pages)[:max_chars]


def read_curriculum_upload(file_storage) -> CurriculumUpload:
    """Turn a werkzeug FileStorage into text or a base64 image."""
    filename = (file_storage.filename or "").lower()
    mimetype = (file_storage.mimetype or "").lower()
    data = file_storage.read()
    if not data:
        raise UnsupportedUpload("Empty file")

    if mimetype == "application/pdf" or filename.endswith(".pdf"):
        try:
            text = extract_pdf_text(data)
        except PdfReadError as e:
            raise UnsupportedUpload(f"Could not read PDF: {e}") from e
        if not text.strip():
            raise UnsupportedUpload("Could not extract text from PDF")
        return CurriculumUpload(kind="text", text=text)

    if mimetype in IMAGE_MIME_TYPES:
        return CurriculumUpload(
            kind="image",
            image_base64=base64.b64encode(data).decode("ascii"),
            mime_type=mimetype,
        )

    if mimetype.startswith("text/") or filename.endswith(TEXT_EXTENSIONS):
        return CurriculumUpload(kind="text", text=data.decode("utf-8", "ignore")[:MAX_CHARS])

    raise UnsupportedUpload("Only text, PDF or image files are accepted")
