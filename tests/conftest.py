from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pytest
from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import BaseRepo, MemoryRepo, Repo
from hypothesis import settings

from buildmeta_core.vcs import GitAdapter

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("buildmeta-tests", database=None)
settings.load_profile("buildmeta-tests")

_IDENTITY = b"Build Meta <buildmeta@example.com>"
_EPOCH = 1_700_000_000


class RepoBuilder:
    """Write commits, branches and tags straight into a dulwich repository."""

    def __init__(self, repo: BaseRepo) -> None:
        self.repo = repo
        self._tick = 0
        self.tree = Tree()
        self.repo.object_store.add_object(self.tree)
        self.repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/master")

    def _next_time(self) -> int:
        self._tick += 1
        return _EPOCH + self._tick

    def commit(self, *parents: str, message: Optional[str] = None) -> str:
        commit = Commit()
        commit.tree = self.tree.id
        commit.parents = [p.encode("ascii") for p in parents]
        commit.author = commit.committer = _IDENTITY
        commit.author_time = commit.commit_time = self._next_time()
        commit.author_timezone = commit.commit_timezone = 0
        commit.encoding = b"UTF-8"
        commit.message = (message or f"commit {self._tick}").encode("utf-8")
        self.repo.object_store.add_object(commit)
        return commit.id.decode("ascii")

    def chain(self, length: int, parent: Optional[str] = None) -> List[str]:
        """Linear history, oldest first."""
        commits: List[str] = []
        for _ in range(length):
            parent = self.commit(*([parent] if parent else []))
            commits.append(parent)
        return commits

    def branch(self, name: str, commit_id: str, checkout: bool = True) -> None:
        self.repo.refs[f"refs/heads/{name}".encode("utf-8")] = commit_id.encode("ascii")
        if checkout:
            self.repo.refs.set_symbolic_ref(b"HEAD", f"refs/heads/{name}".encode("utf-8"))

    def detach(self, commit_id: str) -> None:
        self.repo.refs.remove_if_equals(b"HEAD", None)
        self.repo.refs.add_if_new(b"HEAD", commit_id.encode("ascii"))

    def annotated(self, name: str, target: str, target_type=Commit) -> str:
        tag = Tag()
        tag.tagger = _IDENTITY
        tag.message = f"release {name}".encode("utf-8")
        tag.name = name.encode("utf-8")
        tag.object = (target_type, target.encode("ascii"))
        tag.tag_time = self._next_time()
        tag.tag_timezone = 0
        self.repo.object_store.add_object(tag)
        return tag.id.decode("ascii")

    def tag(self, name: str, target: str, annotated: bool = False, target_type=Commit) -> str:
        object_id = self.annotated(name, target, target_type) if annotated else target
        self.repo.refs[f"refs/tags/{name}".encode("utf-8")] = object_id.encode("ascii")
        return object_id

    def blob(self, data: bytes) -> str:
        blob = Blob.from_string(data)
        self.repo.object_store.add_object(blob)
        return blob.id.decode("ascii")

    def adapter(self) -> GitAdapter:
        return GitAdapter(self.repo)


@pytest.fixture
def builder() -> RepoBuilder:
    return RepoBuilder(MemoryRepo())


@pytest.fixture
def disk_builder(tmp_path: Path):
    repo = Repo.init(str(tmp_path))
    try:
        yield RepoBuilder(repo)
    finally:
        repo.close()
