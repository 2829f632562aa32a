import pytest

from revdiff.core.annotations import AnnotationKey, diff_annotations, is_modified, key_map
from revdiff.core.types import Annotation
from revdiff.errors import AmbiguousAnnotationError


def _ann(id="a1", kind="highlight", page=1, x=100.0, y=100.0, width=50.0, height=20.0, text=None):
    return Annotation(id=id, kind=kind, page=page, x=x, y=y, width=width, height=height, text=text)


def test_removed_annotation_is_reported_deleted():
    (highlight,) = diff_annotations([_ann()], [])

    assert highlight.kind == "deleted"
    assert highlight.is_annotation_diff
    assert highlight.page == 1
    assert highlight.text == "highlight annotation"
    assert (highlight.x, highlight.y, highlight.width, highlight.height) == (100.0, 100.0, 50.0, 20.0)


def test_changed_text_is_reported_modified_only():
    before = _ann(kind="note", text="note A")
    after = _ann(id="a2", kind="note", text="note B")

    (highlight,) = diff_annotations([before], [after])

    assert highlight.kind == "modified"
    assert highlight.text == "note B"


def test_identical_sets_produce_nothing():
    annotations = [_ann(), _ann(id="a2", kind="note", x=300, text="hi")]
    assert diff_annotations(annotations, list(annotations)) == []


def test_small_moves_stay_in_the_same_cell():
    before = _ann(x=101.0, y=99.0)
    after = _ann(x=104.9, y=96.0)
    assert diff_annotations([before], [after]) == []


def test_resize_counts_as_modified():
    (highlight,) = diff_annotations([_ann()], [_ann(width=80.0)])
    assert highlight.kind == "modified"


def test_colour_change_alone_is_not_a_modification():
    before = Annotation("a", "highlight", 1, 10, 10, 5, 5, color="#ff0")
    after = Annotation("a", "highlight", 1, 10, 10, 5, 5, color="#0f0")
    assert not is_modified(before, after)


def test_ordering_added_and_modified_then_deleted():
    set_a = [_ann(id="gone", x=500), _ann(id="kept", x=100, text="v1")]
    set_b = [_ann(id="new", x=300), _ann(id="kept", x=100, text="v2")]

    kinds = [(h.kind, h.x) for h in diff_annotations(set_a, set_b)]

    assert kinds == [("added", 300.0), ("modified", 100.0), ("deleted", 500.0)]


def test_diff_is_symmetric_between_added_and_deleted():
    set_a = [_ann(id="left", x=10)]
    set_b = [_ann(id="right", x=400)]

    forward = {(h.kind, h.x) for h in diff_annotations(set_a, set_b)}
    backward = {(h.kind, h.x) for h in diff_annotations(set_b, set_a)}

    assert forward == {("added", 400.0), ("deleted", 10.0)}
    assert backward == {("added", 10.0), ("deleted", 400.0)}


def test_kind_and_page_are_part_of_the_key():
    set_a = [_ann(kind="highlight")]
    set_b = [_ann(kind="note"), _ann(id="p2", page=2)]

    kinds = sorted(h.kind for h in diff_annotations(set_a, set_b))

    assert kinds == ["added", "added", "deleted"]


def test_quantization_rounds_half_up():
    assert AnnotationKey.of(_ann(x=105.0, y=94.9)) == AnnotationKey("highlight", 1, 110.0, 90.0)
    assert AnnotationKey.of(_ann(x=-5.0, y=0.0)).x == 0.0


def test_step_is_configurable():
    before = _ann(x=100.0)
    after = _ann(x=118.0)

    assert len(diff_annotations([before], [after], step=10.0)) == 2
    assert diff_annotations([before], [after], step=50.0) == []


def test_non_positive_step_is_rejected():
    with pytest.raises(ValueError):
        AnnotationKey.of(_ann(), step=0)


def test_colliding_annotations_fail_loudly():
    crowded = [_ann(id="one", x=100.0), _ann(id="two", x=102.0)]

    with pytest.raises(AmbiguousAnnotationError) as excinfo:
        key_map(crowded)
    assert "one" in str(excinfo.value) and "two" in str(excinfo.value)

    with pytest.raises(AmbiguousAnnotationError):
        diff_annotations([], crowded)


def test_annotation_from_dict_accepts_redact_alias():
    annotation = Annotation.from_dict(
        {"id": "r", "type": "redact", "page": 2, "x": 1, "y": 2, "width": 3, "height": 4}
    )
    assert annotation.kind == "redaction"
    assert Annotation.from_dict(annotation.to_dict()) == annotation

    with pytest.raises(ValueError):
        Annotation.from_dict({"id": "x", "type": "stamp", "page": 1, "x": 0, "y": 0, "width": 1, "height": 1})


def test_modified_reports_the_newer_side_payload():
    older = _ann(kind="note", text="note A")
    newer = _ann(id="a2", kind="note", width=70.0, text="note B")

    (forward,) = diff_annotations([older], [newer])
    (backward,) = diff_annotations([newer], [older])

    assert (forward.kind, forward.text, forward.width) == ("modified", "note B", 70.0)
    assert (backward.kind, backward.text, backward.width) == ("modified", "note A", 50.0)
