from .base import CommitLookup, RepositoryAccess, VcsMeta
from .git_adapter import GitAdapter, open_repository

__all__ = [
    "CommitLookup",
    "GitAdapter",
    "RepositoryAccess",
    "VcsMeta",
    "open_repository",
]
