import asyncio

import pytest

fitz = pytest.importorskip("fitz")

from revdiff import Engine, EngineConfig
from revdiff.backend.fitz_mutator import FitzMutator
from revdiff.backend.fitz_renderer import FitzRenderer, RenderedPage
from revdiff.core.types import BoundingBox


def _pdf_with_lines(*lines) -> bytes:
    doc = fitz.open()
    page = doc.new_page(width=300, height=200)
    for i, line in enumerate(lines):
        page.insert_text((40, 50 + 20 * i), line, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def test_renderer_reports_spans_in_reading_order():
    renderer = FitzRenderer()
    handle = renderer.render(_pdf_with_lines("first line", "second line"), 1, 1.0)

    assert renderer.is_ready(handle)
    runs = renderer.get_text_runs(handle)
    assert [run.text for run in runs] == ["first line", "second line"]
    assert runs[0].y < runs[1].y
    assert all(run.width > 0 and run.height > 0 for run in runs)


def test_renderer_scales_geometry():
    renderer = FitzRenderer()
    data = _pdf_with_lines("scaled")
    (plain,) = renderer.get_text_runs(renderer.render(data, 1, 1.0))
    (double,) = renderer.get_text_runs(renderer.render(data, 1, 2.0))

    assert double.x == pytest.approx(plain.x * 2)
    assert double.width == pytest.approx(plain.width * 2)


def test_page_outside_document_is_blank():
    handle = FitzRenderer().render(_pdf_with_lines("only page"), 3, 1.0)
    assert isinstance(handle, RenderedPage)
    assert handle.runs == ()


def test_mutator_rejects_missing_page():
    mutator = FitzMutator()
    doc = mutator.load_document(_pdf_with_lines("text"))
    with pytest.raises(IndexError):
        mutator.draw_rectangle(doc, 2, BoundingBox(0, 0, 10, 10), (1, 0, 0), 0.5)


def test_compare_real_pdfs():
    config = EngineConfig(poll_interval=0.0, extraction_backoff=0.0)
    engine = Engine(FitzRenderer(), FitzMutator(), config)
    engine.load_document(_pdf_with_lines("Hello world"))
    engine.replace_document(_pdf_with_lines("Hello brave world"))
    engine.commit("insert adjective")

    result = asyncio.run(engine.compare(1, 2))

    assert result.ok
    (highlight,) = result.highlights
    assert highlight.kind == "added"
    assert highlight.text == "brave"
    assert 0 < highlight.x < 300 and 0 < highlight.y < 200


def test_textbox_annotation_becomes_page_text():
    config = EngineConfig(poll_interval=0.0, extraction_backoff=0.0)
    engine = Engine(FitzRenderer(), FitzMutator(), config)
    engine.load_document(_pdf_with_lines("Body"))
    engine.add_annotation("textbox", 1, 40, 120, 100, 20, text="Reviewed")
    revision = engine.commit("stamp")

    runs = FitzRenderer().get_text_runs(FitzRenderer().render(revision.document_bytes, 1, 1.0))

    assert "Reviewed" in [run.text for run in runs]
    result = asyncio.run(engine.compare(1, 2))
    found = {(h.kind, h.text, h.is_annotation_diff) for h in result.highlights}
    # once as new page text, once as a new annotation
    assert found == {("added", "Reviewed", False), ("added", "Reviewed", True)}
