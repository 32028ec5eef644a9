from lexical_rag.index.schema import Chunk
from lexical_rag.sessions import SessionRegistry


def _add(index, text, source):
    index.add_chunks([Chunk(content=text, source=source, index=0)])


def test_sessions_are_isolated():
    reg = SessionRegistry()
    _add(reg.get_or_create("s1"), "recursion and stack frames", "lecture1.pdf")
    _add(reg.get_or_create("s2"), "sorting algorithms compared", "lecture2.pdf")

    assert reg.get_or_create("s1").search("sorting")[0].similarity == 0.0
    assert reg.get_or_create("s2").search("sorting")[0].chunk.source == "lecture2.pdf"
    assert len(reg) == 2
    assert sorted(reg.session_ids()) == ["s1", "s2"]


def test_get_or_create_is_lazy_and_stable():
    reg = SessionRegistry()
    assert reg.get("x") is None
    assert "x" not in reg
    first = reg.get_or_create("x")
    assert reg.get_or_create("x") is first
    assert "x" in reg


def test_clear_keeps_session_discard_drops_it():
    reg = SessionRegistry()
    index = reg.get_or_create("s")
    _add(index, "some material here", "m.txt")

    reg.clear("s")
    assert "s" in reg
    assert index.get_stats().total_chunks == 0

    _add(index, "more material", "m.txt")
    assert reg.discard("s") is True
    assert "s" not in reg
    assert index.get_stats().total_chunks == 0
    assert reg.discard("s") is False
    reg.clear("unknown")  # no-op


def test_clear_all():
    reg = SessionRegistry()
    a = reg.get_or_create("a")
    _add(a, "content words", "a.txt")
    reg.get_or_create("b")
    reg.clear_all()
    assert len(reg) == 0
    assert a.get_stats().total_chunks == 0
