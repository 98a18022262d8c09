"""Build goals publishing VCS metadata as properties.

Each goal reads from a :class:`RepositoryAccess` and writes to a
:class:`PropertySink`:

- ``branch``: ``branch``
- ``describe``: ``tag.name`` and ``tag.describe``

:func:`extract` runs several goals and publishes nothing unless all of them
succeed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from buildmeta_core.describe import DEFAULT_ABBREV, Description, describe
from buildmeta_core.errors import ExtractionError, RepositoryAccessError
from buildmeta_core.vcs import RepositoryAccess, VcsMeta, open_repository

from .properties import PrefixedPropertySink, PropertySink, StagingSink

logger = logging.getLogger(__name__)

BRANCH = "branch"
DESCRIBE = "describe"
GOALS = (BRANCH, DESCRIBE)


def resolve_branch(repo: RepositoryAccess, sink: PropertySink) -> str:
    try:
        branch = repo.current_branch()
    except RepositoryAccessError as exc:
        raise ExtractionError("branch", exc) from exc
    sink.set_property("branch", branch)
    return branch


def resolve_describe(
    repo: RepositoryAccess,
    sink: PropertySink,
    head: str = "HEAD",
    abbrev_length: int = DEFAULT_ABBREV,
) -> Description:
    description = describe(repo, head=head, abbrev_length=abbrev_length)
    sink.set_property("tag.name", description.tag_name)
    sink.set_property("tag.describe", description.describe)
    return description


def extract(
    repo: RepositoryAccess,
    sink: PropertySink,
    goals: Sequence[str] = GOALS,
    head: str = "HEAD",
    abbrev_length: int = DEFAULT_ABBREV,
) -> VcsMeta:
    unknown = [goal for goal in goals if goal not in GOALS]
    if unknown:
        raise ValueError(f"Unknown goal(s): {', '.join(unknown)}")

    staged = StagingSink()
    branch = resolve_branch(repo, staged) if BRANCH in goals else ""
    description: Optional[Description] = None
    if DESCRIBE in goals:
        description = resolve_describe(repo, staged, head=head, abbrev_length=abbrev_length)
    staged.flush(sink)

    meta = VcsMeta(provider="git", revision="", ref=branch)
    if description is not None:
        meta.revision = description.commit
        meta.tag_name = description.tag_name
        meta.distance = description.nearest.distance
        meta.label = description.describe
    logger.debug(f"Published {len(staged.values)} properties for {', '.join(goals)}")
    return meta


def collect_properties(
    path: Path,
    prefixes: Sequence[str],
    goals: Sequence[str] = GOALS,
    head: str = "HEAD",
    abbrev_length: int = DEFAULT_ABBREV,
) -> Tuple[Dict[str, str], VcsMeta]:
    """Open the repository at ``path`` and return the prefixed properties."""
    properties: Dict[str, str] = {}
    sink = PrefixedPropertySink(properties, prefixes)
    with open_repository(path) as repo:
        meta = extract(repo, sink, goals=goals, head=head, abbrev_length=abbrev_length)
    return properties, meta
