"""Common types and data structures for clashpick"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

SELECTOR_KIND = "Selector"


class FeatureMode(Enum):
    """Action to run once configuration is resolved"""
    SELECT = "select"
    DELAY_TEST = "delay_test"


@dataclass(frozen=True)
class ProxyOrGroup:
    """A proxy or proxy group as reported by GET /proxies"""
    name: str
    members: tuple[str, ...] = ()
    current: str = ""
    kind: str = ""

    def isGroup(self) -> bool:
        """Selector groups are the only entries whose node can be chosen"""
        return self.kind == SELECTOR_KIND

    def currentIndex_get(self) -> int:
        """Index of the current selection in members, or -1"""
        try:
            return self.members.index(self.current)
        except ValueError:
            return -1

    @classmethod
    def payload_parse(cls, key: str, payload: dict[str, Any]) -> "ProxyOrGroup":
        """
        Build an entry from one value of the controller's proxies mapping

        Args:
            key: Mapping key the entry was listed under; it is the entry name
            payload: Raw entry object

        Returns:
            Parsed entry

        Raises:
            TypeError: If a field has the wrong JSON type
        """
        members = payload.get("all") or []
        if not isinstance(members, list):
            raise TypeError(f"'all' of {key} must be a list")
        return cls(
            name=key,
            members=tuple(str(m) for m in members),
            current=str(payload.get("now") or ""),
            kind=str(payload.get("type") or ""),
        )


@dataclass
class Catalog:
    """Snapshot of the controller's proxies and the groups a user may pick from

    selectable_groups keeps the order derived from the root grouping when it
    exists; otherwise it follows the controller's mapping order, which is not
    guaranteed to be stable.
    """
    selectable_groups: list[ProxyOrGroup] = field(default_factory=list)
    by_name: dict[str, ProxyOrGroup] = field(default_factory=dict)


@dataclass(frozen=True)
class RunConfig:
    """Resolved settings for one invocation"""
    port: Optional[int]
    addr: str
    scheme: str
    groups: tuple[str, ...]
    test_url: str
    feature: FeatureMode = FeatureMode.SELECT

    def baseUrl_build(self, port: int) -> str:
        """Controller base URL for a decided port"""
        return f"{self.scheme}://{self.addr}:{port}"

    def portDisplay_get(self) -> str:
        """Port as shown in the startup banner"""
        return str(self.port) if self.port is not None else "<Not decided>"
