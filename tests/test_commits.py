"""Tests for commit records and the commit graph."""

import json

import pytest

from kvlet import (
    Commit,
    CommitGraph,
    CommitNotFound,
    CorruptRecord,
    EmptyMessage,
    digest,
)
from kvlet.commits import COMMIT_KEY, decode_commit, encode_commit
from kvlet.kv.memory import Memory


@pytest.fixture
def graph():
    return CommitGraph(Memory())


def _chain(graph, n, start=None):
    """Build n linear commits on top of start (default: a fresh root)."""
    ids = [start or graph.create_root()]
    for i in range(n):
        ids.append(graph.create(f"c{i}", ids[-1], {"f": f"{i:040x}"}, timestamp=i))
    return ids


class TestEncoding:
    def test_round_trip(self):
        c = Commit("msg", 12, "a" * 40, "b" * 40, {"x": "c" * 40})
        assert decode_commit(encode_commit(c)) == c

    def test_canonical(self):
        a = Commit("m", 1, snapshot={"a": "1", "b": "2"})
        b = Commit("m", 1, snapshot={"b": "2", "a": "1"})
        assert encode_commit(a) == encode_commit(b)

    def test_rejects_unknown_version(self):
        raw = json.dumps({"v": 99}).encode()
        with pytest.raises(CorruptRecord):
            decode_commit(raw)

    def test_rejects_garbage(self):
        with pytest.raises(CorruptRecord):
            decode_commit(b"\xff\xfe")

    def test_rejects_missing_field(self):
        raw = json.dumps({"v": 1, "message": "x"}).encode()
        with pytest.raises(CorruptRecord, match="timestamp"):
            decode_commit(raw)

    def test_get_reports_incomplete_record(self, graph):
        cid = "a" * 40
        graph.store.set(COMMIT_KEY % cid, json.dumps({"v": 1, "message": "x"}).encode())
        with pytest.raises(CorruptRecord):
            graph.get(cid)


class TestCreate:
    def test_root(self, graph):
        root = graph.create_root()
        commit = graph.get(root)
        assert commit.message == "initial commit"
        assert commit.timestamp == 0
        assert commit.parent is None
        assert commit.snapshot == {}

    def test_id_is_digest_of_record(self, graph):
        root = graph.create_root()
        assert root == digest(graph.store.get(COMMIT_KEY % root))

    def test_create_with_parent(self, graph):
        root = graph.create_root()
        cid = graph.create("first", root, {"a.txt": "d" * 40})
        commit = graph.get(cid)
        assert commit.parent == root
        assert commit.merge_parent is None
        assert commit.parents == (root,)
        assert commit.snapshot == {"a.txt": "d" * 40}

    def test_merge_commit(self, graph):
        root = graph.create_root()
        a = graph.create("a", root, {}, timestamp=1)
        b = graph.create("b", root, {}, timestamp=2)
        m = graph.create("merge", a, {}, merge_parent=b)
        assert graph.get(m).parents == (a, b)
        assert graph.get(m).is_merge

    @pytest.mark.parametrize("message", ["", "   "])
    def test_blank_message(self, graph, message):
        root = graph.create_root()
        with pytest.raises(EmptyMessage):
            graph.create(message, root, {})

    def test_unknown_parent(self, graph):
        with pytest.raises(CommitNotFound):
            graph.create("m", "f" * 40, {})

    def test_snapshot_copied(self, graph):
        root = graph.create_root()
        snapshot = {"a": "1" * 40}
        cid = graph.create("m", root, snapshot)
        snapshot["b"] = "2" * 40
        assert graph.get(cid).snapshot == {"a": "1" * 40}

    def test_repeated_reads_identical(self, graph):
        root = graph.create_root()
        cid = graph.create("m", root, {"a": "1" * 40})
        first = graph.get(cid)
        first.snapshot["tamper"] = "x"
        expected = Commit("m", first.timestamp, root, None, {"a": "1" * 40})
        assert graph.get(cid) == expected


class TestLookup:
    def test_get_missing(self, graph):
        with pytest.raises(CommitNotFound):
            graph.get("0" * 40)

    def test_resolve_full_id(self, graph):
        root = graph.create_root()
        assert graph.resolve(root) == root

    def test_resolve_prefix(self, graph):
        root = graph.create_root()
        assert graph.resolve(root[:6]) == root
        assert graph.resolve(root[:10]) == root

    def test_resolve_too_short(self, graph):
        root = graph.create_root()
        with pytest.raises(CommitNotFound):
            graph.resolve(root[:5])

    def test_resolve_no_match(self, graph):
        graph.create_root()
        with pytest.raises(CommitNotFound):
            graph.resolve("zzzzzzzz")

    def test_resolve_first_match_wins(self):
        store = Memory()
        store.set(COMMIT_KEY % ("abcdef" + "1" * 34), b"")
        store.set(COMMIT_KEY % ("abcdef" + "0" * 34), b"")
        assert CommitGraph(store).resolve("abcdef") == "abcdef" + "0" * 34

    def test_find(self, graph):
        ids = _chain(graph, 3)
        graph.create("c1", ids[-1], {}, timestamp=99)
        assert len(graph.find("c1")) == 2
        assert graph.find("initial commit") == [ids[0]]
        assert graph.find("nope") == []

    def test_ids(self, graph):
        ids = _chain(graph, 2)
        assert graph.ids() == sorted(ids)


class TestTraversal:
    def test_history_first_parent(self, graph):
        ids = _chain(graph, 3)
        assert list(graph.history(ids[-1])) == list(reversed(ids))

    def test_root_ancestors(self, graph):
        root = graph.create_root()
        assert graph.ancestors(root) == [root]

    def test_parent_in_ancestors(self, graph):
        ids = _chain(graph, 2)
        assert ids[1] in graph.ancestors(ids[2])
        assert graph.ancestors(ids[2]) == [ids[2], ids[1], ids[0]]

    def test_ancestors_follow_merge_parent_once(self, graph):
        root = graph.create_root()
        a = graph.create("a", root, {}, timestamp=1)
        b = graph.create("b", root, {}, timestamp=2)
        m = graph.create("m", a, {}, merge_parent=b, timestamp=3)
        order = graph.ancestors(m)
        assert order == [m, a, b, root]

    def test_merge_base_linear(self, graph):
        ids = _chain(graph, 3)
        assert graph.merge_base(ids[3], ids[1]) == ids[1]
        assert graph.merge_base(ids[1], ids[3]) == ids[1]

    def test_merge_base_diverged(self, graph):
        ids = _chain(graph, 1)
        a = graph.create("a", ids[1], {}, timestamp=10)
        b = graph.create("b", ids[1], {}, timestamp=11)
        assert graph.merge_base(a, b) == ids[1]

    def test_merge_base_after_merge(self, graph):
        root = graph.create_root()
        a = graph.create("a", root, {}, timestamp=1)
        b = graph.create("b", root, {}, timestamp=2)
        m = graph.create("m", a, {}, merge_parent=b, timestamp=3)
        b2 = graph.create("b2", b, {}, timestamp=4)
        assert graph.merge_base(m, b2) == b

    def test_merge_base_same(self, graph):
        root = graph.create_root()
        assert graph.merge_base(root, root) == root

    def test_merge_base_unrelated(self):
        graph = CommitGraph(Memory())
        a = graph.create_root()
        b = graph.create("x", a, {}, timestamp=1)
        orphan = graph._write(Commit("orphan", 5))
        assert graph.merge_base(b, orphan) is None
