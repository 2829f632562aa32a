import threading

import pytest

from revdiff.core.store import RevisionStore
from revdiff.core.types import Annotation
from revdiff.errors import AmbiguousAnnotationError, EmptyDocumentError, EmptyStoreError, NotFoundError


def _note(text="note A"):
    return Annotation(id="a1", kind="note", page=1, x=100, y=100, width=50, height=20, text=text)


def test_commit_assigns_contiguous_sequence_numbers():
    store = RevisionStore()
    numbers = [store.commit(b"doc %d" % i).sequence_number for i in range(4)]
    assert numbers == [1, 2, 3, 4]
    assert [r.sequence_number for r in store.revisions()] == numbers
    assert len(store) == 4


def test_commit_then_get_round_trips_bytes_and_annotations():
    store = RevisionStore()
    note = _note()
    revision = store.commit(b"%PDF-1.7 body", "first draft", [note])

    fetched = store.get(revision.sequence_number)
    assert fetched.document_bytes == b"%PDF-1.7 body"
    assert fetched.annotations == (note,)
    assert fetched.message == "first draft"
    assert fetched.id.startswith("revision-")
    assert fetched.created_at.tzinfo is not None


def test_commit_copies_mutable_buffers():
    store = RevisionStore()
    buffer = bytearray(b"original")
    annotations = [_note()]
    revision = store.commit(buffer, annotations=annotations)

    buffer[:] = b"changed!"
    annotations.append(_note("later"))

    assert store.get(revision.sequence_number).document_bytes == b"original"
    assert len(store.get(revision.sequence_number).annotations) == 1


def test_blank_message_defaults_to_version_label():
    store = RevisionStore()
    store.commit(b"one")
    second = store.commit(b"two", "   ")
    assert second.message == "Version 2"


@pytest.mark.parametrize("payload", [None, b"", bytearray()])
def test_commit_rejects_missing_document(payload):
    store = RevisionStore()
    with pytest.raises(EmptyDocumentError):
        store.commit(payload)
    assert len(store) == 0


def test_get_unknown_sequence_raises():
    store = RevisionStore()
    store.commit(b"one")
    with pytest.raises(NotFoundError):
        store.get(7)
    assert 1 in store
    assert 7 not in store


def test_latest_on_empty_store_raises():
    with pytest.raises(EmptyStoreError):
        RevisionStore().latest()


def test_latest_is_highest_sequence_number():
    store = RevisionStore()
    for i in range(3):
        store.commit(b"rev %d" % i)
    assert store.latest().sequence_number == 3
    assert store.latest().document_bytes == b"rev 2"


def test_concurrent_commits_never_share_a_number():
    store = RevisionStore()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(10):
            store.commit(b"data")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    numbers = sorted(r.sequence_number for r in store)
    assert numbers == list(range(1, 81))


def test_commit_rejects_annotations_sharing_a_cell():
    store = RevisionStore()
    crowded = [
        Annotation(id="one", kind="highlight", page=1, x=100, y=100, width=40, height=12),
        Annotation(id="two", kind="highlight", page=1, x=103, y=102, width=60, height=12),
    ]
    with pytest.raises(AmbiguousAnnotationError):
        store.commit(b"doc", annotations=crowded)
    assert len(store) == 0


def test_collision_check_follows_the_store_step():
    nearby = [
        Annotation(id="one", kind="highlight", page=1, x=100, y=100, width=40, height=12),
        Annotation(id="two", kind="highlight", page=1, x=103, y=100, width=40, height=12),
    ]
    revision = RevisionStore(quantization_step=1.0).commit(b"doc", annotations=nearby)
    assert len(revision.annotations) == 2
