"""Tests for checkout and reset."""

import pytest

from kvlet import (
    AlreadyOnBranch,
    BranchNotFound,
    CommitNotFound,
    FileNotInCommit,
    UntrackedFileConflict,
    digest,
)

from tests.helpers import commit_files


class TestCheckoutBranch:
    def test_switches_files_and_head(self, repo):
        commit_files(repo, "base", {"a.txt": "a", "shared.txt": "v1"})
        repo.branch("dev")
        repo.checkout("dev")
        commit_files(repo, "dev work", {"b.txt": "b", "shared.txt": "v2"})
        repo.remove("a.txt")
        repo.commit("drop a")

        repo.checkout("master")
        assert repo.current_branch == "master"
        assert repo.worktree.files == {"a.txt": b"a", "shared.txt": b"v1"}

        repo.checkout("dev")
        assert repo.worktree.files == {"b.txt": b"b", "shared.txt": b"v2"}

    def test_pointers_unchanged(self, repo):
        commit_files(repo, "base", {"a.txt": "a"})
        repo.branch("dev")
        before = {name: repo.branches.get(name) for name in repo.branches.names()}
        repo.checkout("dev")
        after = {name: repo.branches.get(name) for name in repo.branches.names()}
        assert before == after

    def test_clears_index(self, repo):
        repo.branch("dev")
        repo.worktree.write("a.txt", b"x")
        repo.add("a.txt")
        repo.checkout("dev")
        assert not repo.index.has_changes

    def test_untracked_files_survive(self, repo):
        repo.branch("dev")
        repo.worktree.write("scratch.txt", b"mine")
        repo.checkout("dev")
        assert repo.worktree.read("scratch.txt") == b"mine"

    def test_unknown_branch(self, repo):
        with pytest.raises(BranchNotFound):
            repo.checkout("nope")

    def test_current_branch(self, repo):
        with pytest.raises(AlreadyOnBranch):
            repo.checkout("master")

    def test_untracked_conflict_leaves_tree_untouched(self, repo):
        commit_files(repo, "base", {"keep.txt": "k", "old.txt": "o"})
        repo.branch("dev")
        repo.checkout("dev")
        repo.remove("old.txt")
        commit_files(repo, "dev", {"a.txt": "tracked on dev", "z.txt": "z"})
        repo.checkout("master")

        repo.worktree.write("z.txt", b"untracked")
        repo.worktree.write("keep.txt", b"edited")
        before = dict(repo.worktree.files)
        with pytest.raises(UntrackedFileConflict) as exc:
            repo.checkout("dev")
        assert exc.value.paths == ["z.txt"]
        assert repo.worktree.files == before
        assert repo.current_branch == "master"


class TestCheckoutFile:
    def test_from_head(self, repo):
        commit_files(repo, "base", {"a.txt": "committed"})
        repo.worktree.write("a.txt", b"scribbled")
        repo.checkout_file("a.txt")
        assert repo.worktree.read("a.txt") == b"committed"

    def test_from_commit_prefix(self, repo):
        c1 = commit_files(repo, "v1", {"a.txt": "one"})
        commit_files(repo, "v2", {"a.txt": "two"})
        repo.checkout_file("a.txt", c1[:8])
        assert repo.worktree.read("a.txt") == b"one"
        assert repo.head_commit().snapshot["a.txt"] == digest(b"two")

    def test_leaves_index_and_other_files(self, repo):
        c1 = commit_files(repo, "v1", {"a.txt": "one"})
        repo.worktree.write("b.txt", b"untracked")
        repo.worktree.write("c.txt", b"c")
        repo.add("c.txt")
        repo.checkout_file("a.txt", c1)
        assert repo.worktree.read("b.txt") == b"untracked"
        assert repo.index.added_paths() == ["c.txt"]

    def test_overwrites_untracked(self, repo):
        c1 = commit_files(repo, "v1", {"a.txt": "one"})
        repo.remove("a.txt")
        repo.commit("gone")
        repo.worktree.write("a.txt", b"untracked")
        repo.checkout_file("a.txt", c1)
        assert repo.worktree.read("a.txt") == b"one"

    def test_missing_path(self, repo):
        with pytest.raises(FileNotInCommit):
            repo.checkout_file("nope.txt")

    def test_unknown_commit(self, repo):
        with pytest.raises(CommitNotFound):
            repo.checkout_file("a.txt", "0123456789")

    def test_short_prefix(self, repo):
        c1 = commit_files(repo, "v1", {"a.txt": "one"})
        with pytest.raises(CommitNotFound):
            repo.checkout_file("a.txt", c1[:5])


class TestReset:
    def test_reset_to_initial(self, repo):
        root = repo.head_id()
        commit_files(repo, "first", {"a.txt": "hello"})
        assert repo.reset(root) == root
        assert not repo.worktree.exists("a.txt")
        assert not repo.index.has_changes
        assert repo.head_id() == root
        assert repo.current_branch == "master"

    def test_reset_by_prefix(self, repo):
        c1 = commit_files(repo, "first", {"a.txt": "1"})
        commit_files(repo, "second", {"a.txt": "2", "b.txt": "b"})
        repo.reset(c1[:6])
        assert repo.worktree.files == {"a.txt": b"1"}
        assert repo.head_id() == c1

    def test_reset_to_other_branch_commit(self, repo):
        repo.branch("dev")
        repo.checkout("dev")
        dev_tip = commit_files(repo, "dev", {"d.txt": "d"})
        repo.checkout("master")
        repo.reset(dev_tip)
        assert repo.current_branch == "master"
        assert repo.branches.get("master") == dev_tip
        assert repo.worktree.read("d.txt") == b"d"

    def test_snapshot_round_trip(self, repo):
        c1 = commit_files(repo, "first", {"a.txt": "1", "b.txt": "2"})
        commit_files(repo, "second", {"a.txt": "changed"})
        repo.reset(c1)
        for path, blob in repo.commits.get(c1).snapshot.items():
            assert digest(repo.worktree.read(path)) == blob

    def test_clears_index(self, repo):
        root = repo.head_id()
        commit_files(repo, "first", {"a.txt": "1"})
        repo.worktree.write("b.txt", b"b")
        repo.add("b.txt")
        repo.reset(root)
        assert not repo.index.has_changes

    def test_unknown_commit(self, repo):
        with pytest.raises(CommitNotFound):
            repo.reset("abcdefabcdef")

    def test_untracked_conflict(self, repo):
        root = repo.head_id()
        c1 = commit_files(repo, "first", {"a.txt": "1"})
        repo.reset(root)
        repo.worktree.write("a.txt", b"untracked")
        before = dict(repo.worktree.files)
        with pytest.raises(UntrackedFileConflict):
            repo.reset(c1)
        assert repo.worktree.files == before
        assert repo.head_id() == root
