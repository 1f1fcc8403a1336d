"""Group and node token resolution."""

from clashpick.selection.resolver import groups_resolve, node_resolve

__all__ = ["groups_resolve", "node_resolve"]
