"""
ingestor.py — Text extraction for uploaded documents.

Routes each file by its name suffix: ``.docx`` through python-docx,
``.pdf`` through PyMuPDF, anything else is decoded as UTF-8 text.
"""

import io
import logging

import docx
import fitz  # PyMuPDF

from autosolver.exceptions import ExtractionError
from autosolver.models import InputFile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DOCX = "docx"
PDF = "pdf"
TXT = "txt"

SOURCE_SEPARATOR = "\n--- SOURCE: {name} ---\n"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def file_kind(name: str) -> str:
    lowered = name.lower()
    if lowered.endswith(".docx"):
        return DOCX
    if lowered.endswith(".pdf"):
        return PDF
    return TXT


def extract_text_from_docx(data: bytes) -> str:
    """Paragraph text followed by table cell text, one block per line."""
    document = docx.Document(io.BytesIO(data))
    lines = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))
    return "\n".join(lines)


def extract_text_from_pdf(data: bytes) -> str:
    doc = fitz.open(stream=data, filetype="pdf")
    pages = []
    for page_num in range(len(doc)):
        text = doc[page_num].get_text()
        if text.strip():
            pages.append(text)
    doc.close()
    return "\n".join(pages)


def extract_text_from_txt(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


_EXTRACTORS = {
    DOCX: extract_text_from_docx,
    PDF: extract_text_from_pdf,
    TXT: extract_text_from_txt,
}

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_text(file: InputFile, kind=None) -> str:
    """
    Extract the plain text of an uploaded document.

    Parameters
    ----------
    file : InputFile
        The uploaded document.
    kind : str, optional
        ``"docx"``, ``"pdf"`` or ``"txt"``; derived from the file name
        when omitted.

    Returns
    -------
    str
        The document text.

    Raises
    ------
    ExtractionError
        The file could not be parsed as *kind*.
    """
    kind = kind or file_kind(file.name)
    extractor = _EXTRACTORS.get(kind)
    if extractor is None:
        raise ExtractionError(f"Unsupported document type {kind!r} for {file.name}")

    try:
        return extractor(file.data)
    except Exception as exc:
        logger.error("Could not extract text from %s: %s", file.name, exc)
        raise ExtractionError(f"Could not read {file.name}: {exc}") from exc


def build_context(named_texts) -> str:
    """Join ``(name, text)`` pairs into one blob, each behind a SOURCE separator."""
    return "".join(SOURCE_SEPARATOR.format(name=name) + text for name, text in named_texts)
