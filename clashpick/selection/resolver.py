"""
Group and node token resolution.

Tokens are names or zero-based indices. A name match always wins over an
index reading of the same token, so a group literally called "1" is picked
by name rather than as the second group.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Sequence

from clashpick.common.errors import NoMatchingGroupsError, NoSelectionError
from clashpick.common.types import Catalog, ProxyOrGroup

__all__ = ["LineReader", "groups_resolve", "node_resolve", "index_parse"]

logger = logging.getLogger(__name__)

LineReader = Callable[[str], str]
"""Blocking prompt-and-read, e.g. the builtin input()"""

INDEX_PATTERN = re.compile(r"[+-]?[0-9]+")
"""Optionally signed ASCII digits; no whitespace, underscores or other numerals"""


def index_parse(token: str, length: int) -> Optional[int]:
    """Interpret token as an index into a sequence of the given length"""
    if not INDEX_PATTERN.fullmatch(token):
        return None
    index = int(token)
    if 0 <= index < length:
        return index
    return None


def line_read(read: LineReader, prompt: str) -> str:
    """
    Prompt for one trimmed line.

    Raises:
        NoSelectionError:
            Raised when input is closed.
    """
    try:
        return read(prompt).strip()
    except EOFError:
        print()
        raise NoSelectionError("input closed before a selection was made") from None


def groupToken_resolve(token: str, catalog: Catalog) -> Optional[str]:
    """Resolve one group token to a group name, or None"""
    entry: ProxyOrGroup | None = catalog.by_name.get(token)
    if entry is not None and entry.isGroup():
        return token
    index = index_parse(token, len(catalog.selectable_groups))
    if index is not None:
        return catalog.selectable_groups[index].name
    return None


def groups_resolve(
    tokens: Sequence[str],
    catalog: Catalog,
    read: LineReader = input,
) -> list[str]:
    """
    Resolve user-supplied group tokens against the catalog.

    Unmatched tokens are dropped. Repeated tokens produce repeated names.
    With no tokens at all, the selectable groups are listed and the user is
    asked for one until a valid answer is given.

    Args:
        tokens:
            Group names or indices, in the order given by the user.
        catalog:
            Current controller snapshot.
        read:
            Line reader for the interactive fallback.

    Returns:
        Non-empty list of group names.

    Raises:
        NoMatchingGroupsError:
            Raised when tokens were supplied but none matched.
        NoSelectionError:
            Raised when input closes during the interactive fallback.
    """
    resolved: list[str] = []
    for token in tokens:
        name = groupToken_resolve(token, catalog)
        if name is None:
            logger.info(f"Ignoring unknown group {token!r}")
            continue
        resolved.append(name)

    if resolved:
        return resolved
    if tokens:
        raise NoMatchingGroupsError("no input group names match those from Clash controller")

    for i, group in enumerate(catalog.selectable_groups):
        print(f"{i}.\t{group.name} Now: [{group.current}]")
    while True:
        line: str = line_read(read, "\nSelect group: [Group name/Index] ")
        if not line:
            print("You must specify a group.")
            continue
        name = groupToken_resolve(line, catalog)
        if name is None:
            print("Bad input.")
            continue
        return [name]


def node_resolve(
    prompt: str,
    group: ProxyOrGroup,
    catalog: Catalog,
    optional: bool,
    read: LineReader = input,
) -> str:
    """
    Ask the user for one node of group.

    Any catalog entry may be named directly, even one outside the group;
    indices refer to the group's members.

    Args:
        prompt:
            Prompt prefix.
        group:
            Group whose members indices refer to.
        catalog:
            Current controller snapshot.
        optional:
            When true an empty line returns "" to mean skip.
        read:
            Line reader.

    Returns:
        Node name, or "" when skipped.

    Raises:
        NoSelectionError:
            Raised when input closes before an answer.
    """
    while True:
        line: str = line_read(read, f"{prompt}: [Node name/Index] ")
        if not line:
            if optional:
                return ""
            print("You must specify a node.")
            continue
        if line in catalog.by_name:
            return line
        index = index_parse(line, len(group.members))
        if index is not None:
            return group.members[index]
        print("Bad input.")
