"""
exporter.py — Builds the solved question bank as a Word document.
"""

import io
import logging

from docx import Document
from docx.shared import Pt

logger = logging.getLogger(__name__)

DOCUMENT_FILENAME = "Solved_Question_Bank.docx"
DOCUMENT_TITLE = "Solved Question Bank"
MISSING_ANSWER = "No answer generated."


def compile_document(questions) -> bytes:
    """
    Render every question with its answer, in order, and return the .docx bytes.

    Parameters
    ----------
    questions : list[Question]
        Questions from a finished run; unanswered ones get a placeholder.

    Returns
    -------
    bytes
        The serialized document, ready for a download button.
    """
    doc = Document()
    doc.add_heading(DOCUMENT_TITLE, level=0)

    for i, question in enumerate(questions, start=1):
        doc.add_heading(f"Question {i}", level=2)

        q_para = doc.add_paragraph()
        q_run = q_para.add_run(question.text)
        q_run.bold = True

        answer = (question.answer or "").strip() or MISSING_ANSWER
        for block in answer.split("\n"):
            if not block.strip():
                continue
            para = doc.add_paragraph(block.strip())
            para.paragraph_format.space_after = Pt(4)

    buffer = io.BytesIO()
    doc.save(buffer)
    logger.info("Compiled document with %d question(s)", len(questions))
    return buffer.getvalue()
