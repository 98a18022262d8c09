"""Ref expressions: a base name followed by ``^`` and ``~`` parent walks.

Supported forms::

    HEAD        the commit HEAD points to
    HEAD^       its only parent
    HEAD^2      its second parent (1-based, ``^0`` is the commit itself)
    HEAD~3      three first-parent hops, each one behaving like a bare ``^``
    HEAD^~2^    modifiers compose left to right (four hops here)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .errors import AmbiguousRefError, InvalidRefError, UnresolvableRefError
from .vcs.base import CommitLookup

logger = logging.getLogger(__name__)

_MODIFIER = re.compile(r"([~^])(\d*)")


@dataclass(frozen=True)
class ParentStep:
    """``^`` or ``^N``. ``index`` is ``None`` for the bare form."""

    index: Optional[int] = None


@dataclass(frozen=True)
class AncestorStep:
    """``~N``: ``count`` bare ``^`` hops."""

    count: int = 1


Modifier = Union[ParentStep, AncestorStep]


@dataclass(frozen=True)
class RefExpression:
    base: str
    modifiers: Tuple[Modifier, ...] = ()


def parse_ref_expression(text: str) -> RefExpression:
    """Split ``text`` into its base name and modifiers."""
    text = text.strip()
    cut = len(text)
    for offset, char in enumerate(text):
        if char in "^~":
            cut = offset
            break
    base = text[:cut]
    if not base:
        raise InvalidRefError(text, "missing base name")

    modifiers: list[Modifier] = []
    pos = cut
    while pos < len(text):
        match = _MODIFIER.match(text, pos)
        if match is None:
            raise InvalidRefError(text, f"unexpected {text[pos]!r} at offset {pos}")
        op, digits = match.groups()
        if op == "^":
            modifiers.append(ParentStep(int(digits) if digits else None))
        else:
            modifiers.append(AncestorStep(int(digits) if digits else 1))
        pos = match.end()
    return RefExpression(base=base, modifiers=tuple(modifiers))


def _select_parent(text: str, repo: CommitLookup, commit: str, index: Optional[int]) -> str:
    if index == 0:
        return commit
    parents = repo.parents(commit)
    if not parents:
        raise UnresolvableRefError(text, f"commit {commit} has no parent")
    if index is None:
        if len(parents) > 1:
            raise AmbiguousRefError(
                text, f"commit {commit} has {len(parents)} parents, select one with ^N"
            )
        return parents[0]
    if index > len(parents):
        raise InvalidRefError(text, f"commit {commit} has no parent #{index} ({len(parents)} parents)")
    return parents[index - 1]


def resolve_ref(text: str, repo: CommitLookup) -> str:
    """Resolve a ref expression to a commit id."""
    expression = parse_ref_expression(text)
    commit = repo.resolve_base(expression.base)
    for modifier in expression.modifiers:
        if isinstance(modifier, AncestorStep):
            for _ in range(modifier.count):
                commit = _select_parent(text, repo, commit, None)
        else:
            commit = _select_parent(text, repo, commit, modifier.index)
    logger.debug(f"Resolved {text} to {commit}")
    return commit
