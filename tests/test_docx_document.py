"""
Tests for the Word Document Adapter
===================================
"""

import pytest
from docx import Document

from inline_suggest.docx_document import DocxDocument
from inline_suggest.document import Coordinate, StructuredRange
from inline_suggest.navigator import apply_edits
from tests.conftest import run


@pytest.fixture
def docx_doc():
    """Two paragraphs; the first splits a repeated word across bold/plain runs."""
    document = Document()
    p = document.add_paragraph()
    p.add_run("It fixes the th").bold = True
    p.add_run("e basics.")
    document.add_paragraph("Try typing a apple.")
    return DocxDocument(document)


class TestDocxDocument:
    """Tests for run-level segments and replacements."""

    def test_segments_are_runs(self, docx_doc):
        """Test that runs become segments."""
        segments = docx_doc.segments(0)
        assert [s.path for s in segments] == [(0, 0), (0, 1)]
        assert docx_doc.block_text(0) == "It fixes the the basics."

    def test_block_at(self, docx_doc):
        """Test block lookup."""
        assert docx_doc.block_at(Coordinate((1, 0), 3)) == 1
        assert docx_doc.block_at(Coordinate((7, 0), 0)) is None

    def test_replace_within_run(self, docx_doc):
        """Test replacement inside one run."""
        rng = StructuredRange(Coordinate((1, 0), 11), Coordinate((1, 0), 12))
        docx_doc.replace_range(rng, "an")
        assert docx_doc.block_text(1) == "Try typing an apple."

    def test_replace_across_runs_keeps_formatting(self, docx_doc):
        """Test replacement across runs."""
        rng = StructuredRange(Coordinate((0, 0), 12), Coordinate((0, 1), 1))
        docx_doc.replace_range(rng, "")
        runs = docx_doc.paragraphs[0].runs
        assert [r.text for r in runs] == ["It fixes the", " basics."]
        assert runs[0].bold

    def test_rejects_multi_paragraph_range(self, docx_doc):
        """Test that multi-paragraph ranges are rejected."""
        rng = StructuredRange(Coordinate((0, 0), 0), Coordinate((1, 0), 0))
        with pytest.raises(ValueError):
            docx_doc.replace_range(rng, "")


class TestDocxAnalysis:
    """A pass over a Word paragraph."""

    def test_fix_all(self, engine, docx_doc):
        """Test applying every suggestion to a document."""
        for block_id in docx_doc.block_ids:
            result = run(engine.analyze(docx_doc, block_id))
            apply_edits(docx_doc, result.visible)
        assert docx_doc.block_text(0) == "It fixes the basics."
        assert docx_doc.block_text(1) == "Try typing an apple."

    def test_save_and_reopen(self, docx_doc, tmp_path):
        """Test saving and reopening."""
        path = tmp_path / "out.docx"
        docx_doc.save(str(path))
        reopened = DocxDocument.open(str(path))
        assert reopened.block_text(0) == "It fixes the the basics."
