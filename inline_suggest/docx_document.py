"""
Word Document Adapter
=====================
DocumentCollaborator over a python-docx Document.

Each body paragraph is a block (block id = paragraph index) and each run is
a segment with path ``(paragraph_index, run_index)``. Replacements rewrite
run text in place, so run formatting survives and paths stay stable; runs
emptied by a cross-run replacement are kept.
"""

from typing import List, Optional

from docx import Document

from .config_logging import get_logger
from .document import Coordinate, DocumentCollaborator, Segment, StructuredRange

__version__ = "1.0.0"

logger = get_logger('inline_suggest.docx')


class DocxDocument(DocumentCollaborator):
    """Word document whose paragraphs are analyzed block by block."""

    def __init__(self, document=None):
        self.document = document if document is not None else Document()

    @classmethod
    def open(cls, filepath: str) -> 'DocxDocument':
        return cls(Document(filepath))

    def save(self, filepath: str):
        self.document.save(filepath)
        logger.info("Saved document", filepath=filepath)

    @property
    def paragraphs(self):
        return self.document.paragraphs

    @property
    def block_ids(self) -> List[int]:
        return list(range(len(self.paragraphs)))

    def segments(self, block_id: int) -> List[Segment]:
        runs = self.paragraphs[block_id].runs
        return [Segment((block_id, i), run.text) for i, run in enumerate(runs)]

    def block_at(self, point: Coordinate) -> Optional[int]:
        if not point.path:
            return None
        block_id = point.path[0]
        if 0 <= block_id < len(self.paragraphs):
            return block_id
        return None

    def block_text(self, block_id: int) -> str:
        return "".join(run.text for run in self.paragraphs[block_id].runs)

    def replace_range(self, rng: StructuredRange, text: str) -> None:
        start, end = rng.start, rng.end
        if start.path[0] != end.path[0]:
            raise ValueError("Range spans more than one paragraph")
        runs = self.paragraphs[start.path[0]].runs
        first, last = start.path[1], end.path[1]
        if first == last:
            run = runs[first]
            run.text = run.text[:start.offset] + text + run.text[end.offset:]
            return
        # Inserted text takes the formatting of the first run
        runs[first].text = runs[first].text[:start.offset] + text
        for i in range(first + 1, last):
            runs[i].text = ""
        runs[last].text = runs[last].text[end.offset:]
