"""Nearest-tag search and ``git describe``-style descriptors.

The search walks parent edges breadth first from the start commit, one level
at a time, following every parent of merge commits. ``distance`` is a running
count of commits taken off the frontier (already-visited ones included), not
the length of the shortest path. On linear history the two agree; across merge
diamonds the count runs ahead of the true hop count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set

from .errors import ExtractionError, RefResolutionError, RepositoryAccessError, TagPeelError
from .refexpr import resolve_ref
from .vcs.base import CommitLookup, RepositoryAccess

logger = logging.getLogger(__name__)

DEFAULT_ABBREV = 7


@dataclass(frozen=True)
class NearestTag:
    """Search outcome; both fields are ``None`` when no tag is reachable."""

    distance: Optional[int] = None
    tag_name: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.tag_name is not None


@dataclass(frozen=True)
class Description:
    commit: str
    abbrev: str
    nearest: NearestTag
    describe: str

    @property
    def tag_name(self) -> str:
        return self.nearest.tag_name or ""


@dataclass
class _SearchState:
    frontier: List[str]
    visited: Set[str] = field(default_factory=set)
    distance: int = -1
    match: Optional[NearestTag] = None


def build_tag_map(repo: RepositoryAccess) -> Dict[str, str]:
    """Map commit id -> tag name for every tag that peels to a commit.

    Tags are visited in name order and the first name claiming a commit keeps
    it, so of several tags on one commit the lexicographically smallest wins.
    """
    tag_map: Dict[str, str] = {}
    for name, target in sorted(repo.tag_references()):
        try:
            commit = repo.peel(target)
        except TagPeelError as exc:
            logger.debug(f"Skipping tag {name}: {exc}")
            continue
        if commit is None:
            logger.debug(f"Skipping tag {name}: does not point to a commit")
            continue
        tag_map.setdefault(commit, name)
    return tag_map


def find_nearest_tag(repo: CommitLookup, start: str, tag_map: Mapping[str, str]) -> NearestTag:
    """Breadth-first search from ``start`` for the closest tagged level.

    Every tagged commit in the matching level overwrites the match, so the
    last one processed wins, with the counter value at that point.
    """
    if not tag_map:
        return NearestTag()

    state = _SearchState(frontier=[start])
    while state.frontier:
        next_level: List[str] = []
        for commit in state.frontier:
            state.distance += 1
            if commit in state.visited:
                continue
            state.visited.add(commit)
            tag = tag_map.get(commit)
            if tag is not None:
                state.match = NearestTag(distance=state.distance, tag_name=tag)
                continue
            if state.match is not None:
                # Finish the level without growing the next one.
                continue
            next_level.extend(repo.parents(commit))
        state.frontier = [] if state.match is not None else next_level

    if state.match is None:
        logger.debug(f"No tag reachable from {start} ({len(state.visited)} commits visited)")
        return NearestTag()
    logger.debug(f"Nearest tag {state.match.tag_name} at distance {state.match.distance}")
    return state.match


def format_describe(nearest: NearestTag, abbrev: str) -> str:
    if not nearest.found:
        return abbrev
    if nearest.distance == 0:
        return nearest.tag_name
    return f"{nearest.tag_name}-{nearest.distance}-g{abbrev}"


def describe(repo: RepositoryAccess, head: str = "HEAD", abbrev_length: int = DEFAULT_ABBREV) -> Description:
    """Resolve ``head``, find its nearest tag and format the descriptor.

    Any failure is raised as :class:`ExtractionError` naming the stage that
    failed: ``ref resolution``, ``search`` or ``abbreviation``.
    """
    try:
        commit = resolve_ref(head, repo)
    except (RefResolutionError, RepositoryAccessError) as exc:
        raise ExtractionError("ref resolution", exc) from exc

    try:
        nearest = find_nearest_tag(repo, commit, build_tag_map(repo))
    except RepositoryAccessError as exc:
        raise ExtractionError("search", exc) from exc

    try:
        abbrev = repo.abbreviate(commit, abbrev_length)
    except RepositoryAccessError as exc:
        raise ExtractionError("abbreviation", exc) from exc

    return Description(
        commit=commit,
        abbrev=abbrev,
        nearest=nearest,
        describe=format_describe(nearest, abbrev),
    )
