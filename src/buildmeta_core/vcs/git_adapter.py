"""Git repository access backed by dulwich."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from dulwich.errors import ChecksumMismatch, FileFormatException, NotGitRepository
from dulwich.objects import Commit, ShaFile, Tag
from dulwich.objectspec import parse_ref
from dulwich.repo import BaseRepo, Repo

from ..errors import (
    AmbiguousRefError,
    RepositoryAccessError,
    RepositoryNotFoundError,
    TagPeelError,
    UnresolvableRefError,
)

logger = logging.getLogger(__name__)

_SYMREF = b"ref: "
_BRANCH_PREFIX = "refs/heads/"
_HEX_PREFIX = re.compile(r"^[0-9a-f]{4,40}$")


def open_repository(path: Union[str, Path, None]) -> "GitAdapter":
    """Open the repository containing ``path``, searching parent directories."""
    if path is None:
        raise RepositoryNotFoundError("Git directory is not set")
    path = Path(path)
    if not path.exists():
        raise RepositoryNotFoundError(f"{path} does not exist")
    try:
        repo = Repo.discover(str(path))
    except NotGitRepository as exc:
        raise RepositoryNotFoundError(f"{path} is not inside a Git repository") from exc
    except Exception as exc:
        raise RepositoryAccessError(f"Unable to open repository at {path}: {exc}") from exc
    logger.debug(f"Opened repository {repo.path} for {path}")
    return GitAdapter(repo)


class GitAdapter:
    """Git repository access over a dulwich repository (on disk or in memory)."""

    def __init__(self, repo: BaseRepo) -> None:
        self._repo = repo

    def __enter__(self) -> "GitAdapter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        close = getattr(self._repo, "close", None)
        if close is not None:
            close()

    # -- object access -----------------------------------------------------

    def _load(self, object_id: str) -> ShaFile:
        """Load an object; ``KeyError`` when it is not in the store."""
        try:
            return self._repo.object_store[object_id.encode("ascii")]
        except (OSError, FileFormatException, ChecksumMismatch) as exc:
            raise RepositoryAccessError(f"Unable to read object {object_id}: {exc}") from exc

    def _object_ids(self) -> Iterator[str]:
        try:
            for sha in self._repo.object_store:
                yield sha.decode("ascii")
        except OSError as exc:
            raise RepositoryAccessError(f"Unable to list objects: {exc}") from exc

    # -- RepositoryAccess --------------------------------------------------

    def resolve_base(self, name: str) -> str:
        object_id = self._lookup_ref(name)
        if object_id is None:
            object_id = self._lookup_object_prefix(name)
        if object_id is None:
            raise UnresolvableRefError(name, "unknown revision")
        try:
            commit_id = self.peel(object_id)
        except TagPeelError as exc:
            raise UnresolvableRefError(name, str(exc)) from exc
        if commit_id is None:
            raise UnresolvableRefError(name, "does not point to a commit")
        return commit_id

    def _lookup_ref(self, name: str) -> Optional[str]:
        # parse_ref tries name, refs/, refs/tags/, refs/heads/ and refs/remotes/ in git's order.
        try:
            refname = parse_ref(self._repo.refs, name.encode("utf-8"))
            sha = self._repo.refs[refname]
        except KeyError:
            return None
        except OSError as exc:
            raise RepositoryAccessError(f"Unable to read ref {name}: {exc}") from exc
        return sha.decode("ascii")

    def _lookup_object_prefix(self, name: str) -> Optional[str]:
        prefix = name.lower()
        if not _HEX_PREFIX.match(prefix):
            return None
        matches = [oid for oid in self._object_ids() if oid.startswith(prefix)]
        if len(matches) > 1:
            raise AmbiguousRefError(name, f"object id prefix matches {len(matches)} objects")
        return matches[0] if matches else None

    def parents(self, commit_id: str) -> List[str]:
        try:
            obj = self._load(commit_id)
        except KeyError as exc:
            raise RepositoryAccessError(f"Missing commit {commit_id}") from exc
        if not isinstance(obj, Commit):
            raise RepositoryAccessError(f"Object {commit_id} is a {obj.type_name.decode()}, not a commit")
        return [parent.decode("ascii") for parent in obj.parents]

    def tag_references(self) -> List[Tuple[str, str]]:
        try:
            refs = self._repo.refs.as_dict(b"refs/tags")
        except OSError as exc:
            raise RepositoryAccessError(f"Unable to read tags: {exc}") from exc
        return [(name.decode("utf-8"), sha.decode("ascii")) for name, sha in refs.items()]

    def peel(self, object_id: str) -> Optional[str]:
        current = object_id
        while True:
            try:
                obj = self._load(current)
            except KeyError as exc:
                raise TagPeelError(object_id, f"object {current} is missing") from exc
            if not isinstance(obj, Tag):
                break
            _, target = obj.object
            current = target.decode("ascii")
        if isinstance(obj, Commit):
            return current
        return None

    def abbreviate(self, commit_id: str, min_length: int = 7) -> str:
        needed = min_length
        for other in self._object_ids():
            if other == commit_id:
                continue
            shared = len(os.path.commonprefix([commit_id, other]))
            if shared >= needed:
                needed = shared + 1
        return commit_id[: min(needed, len(commit_id))]

    def current_branch(self) -> str:
        try:
            head = self._repo.refs.read_ref(b"HEAD")
        except OSError as exc:
            raise RepositoryAccessError(f"Unable to read HEAD: {exc}") from exc
        if head is None:
            raise RepositoryAccessError("HEAD is not set")
        if not head.startswith(_SYMREF):
            # Detached HEAD: report the commit id itself.
            return head.decode("ascii").strip()
        target = head[len(_SYMREF):].strip().decode("utf-8")
        if target.startswith(_BRANCH_PREFIX):
            return target[len(_BRANCH_PREFIX):]
        return target
