"""VCS abstraction base types."""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple


@dataclass
class VcsMeta:
    """VCS metadata for reproducible builds."""
    provider: str  # git
    revision: str  # full commit id of the resolved head
    ref: str  # branch name, or the commit id when detached
    tag_name: str = ""  # nearest tag, empty when none is reachable
    distance: Optional[int] = None
    label: str = ""  # describe string


class CommitLookup(Protocol):
    """The part of a repository the ref expression resolver needs."""

    def resolve_base(self, name: str) -> str:
        """Resolve a bare name (``HEAD``, branch, tag, id prefix) to a commit id."""
        ...

    def parents(self, commit_id: str) -> List[str]:
        """Return the ordered parent ids of a commit."""
        ...


class RepositoryAccess(CommitLookup, Protocol):
    """Repository access protocol."""

    def tag_references(self) -> List[Tuple[str, str]]:
        """Return ``(tag name, target object id)`` for every tag ref."""
        ...

    def peel(self, object_id: str) -> Optional[str]:
        """Peel an object to a commit id; ``None`` if it ends at a non-commit."""
        ...

    def abbreviate(self, commit_id: str, min_length: int = 7) -> str:
        """Return the shortest unique prefix of a commit id."""
        ...

    def current_branch(self) -> str:
        """Return the checked out branch name."""
        ...
