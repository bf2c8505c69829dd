"""
Resource identifiers for the cluster object model.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GroupResource:
    """A (group, resource) pair, e.g. ``apps/deployments``.

    The core group is the empty string.  Identifiers handed out by the
    naming engine are always normalized (canonical group, plural resource).
    """

    group: str = ""
    resource: str = ""

    def __str__(self) -> str:
        if not self.group:
            return self.resource
        return f"{self.resource}.{self.group}"

    def to_dict(self) -> dict[str, str]:
        return {"group": self.group, "resource": self.resource}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> GroupResource:
        return cls(group=data.get("group", "") or "", resource=data.get("resource", "") or "")


NAMESPACES = GroupResource(resource="namespaces")


def sanitize_group_name(group: str) -> str:
    """Make a group name usable inside a Prometheus label name."""
    return group.replace(".", "_").replace("-", "_")
