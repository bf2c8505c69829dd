"""
Resource mappers translate loosely spelled resources into canonical ones.

The naming engine never decides on its own what a resource is called; it
asks a ``ResourceMapper``.  Real deployments back this with the cluster's
discovery API.  ``StaticResourceMapper`` serves a fixed table, which is
what the CLI and the tests use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol

from promadapter.core.errors import ResourceMappingError
from promadapter.resources.models import GroupResource, sanitize_group_name


class ResourceMapper(Protocol):
    """Contract for resource name canonicalization. Must be thread-safe."""

    def normalize(self, resource: GroupResource) -> GroupResource:
        ...

    def singularize(self, resource: str) -> str:
        ...


@dataclass(frozen=True)
class ResourceKind:
    """One entry of a static resource table."""

    group: str
    plural: str
    singular: str
    kind: str
    short_names: tuple[str, ...] = field(default_factory=tuple)

    def names(self) -> set[str]:
        return {
            self.plural.lower(),
            self.singular.lower(),
            self.kind.lower(),
            *(name.lower() for name in self.short_names),
        }

    def group_resource(self) -> GroupResource:
        return GroupResource(group=self.group, resource=self.plural)


DEFAULT_KINDS = [
    ResourceKind("", "namespaces", "namespace", "Namespace", ("ns",)),
    ResourceKind("", "pods", "pod", "Pod", ("po",)),
    ResourceKind("", "services", "service", "Service", ("svc",)),
    ResourceKind("", "nodes", "node", "Node", ("no",)),
    ResourceKind("", "persistentvolumeclaims", "persistentvolumeclaim", "PersistentVolumeClaim", ("pvc",)),
    ResourceKind("", "persistentvolumes", "persistentvolume", "PersistentVolume", ("pv",)),
    ResourceKind("", "replicationcontrollers", "replicationcontroller", "ReplicationController", ("rc",)),
    ResourceKind("apps", "deployments", "deployment", "Deployment", ("deploy",)),
    ResourceKind("apps", "statefulsets", "statefulset", "StatefulSet", ("sts",)),
    ResourceKind("apps", "daemonsets", "daemonset", "DaemonSet", ("ds",)),
    ResourceKind("apps", "replicasets", "replicaset", "ReplicaSet", ("rs",)),
    ResourceKind("batch", "jobs", "job", "Job"),
    ResourceKind("batch", "cronjobs", "cronjob", "CronJob", ("cj",)),
    ResourceKind("autoscaling", "horizontalpodautoscalers", "horizontalpodautoscaler", "HorizontalPodAutoscaler", ("hpa",)),
    ResourceKind("networking.k8s.io", "ingresses", "ingress", "Ingress", ("ing",)),
]


class StaticResourceMapper:
    """
    Resource mapper backed by a fixed table of kinds.

    Lookups are case-insensitive and accept the plural, singular, kind or
    any short name.  When a request names no group, the first registered
    kind wins, so table order is priority order.  The table is never
    mutated after construction, which makes the mapper safe to share
    between threads.
    """

    def __init__(self, kinds: Iterable[ResourceKind] | None = None) -> None:
        self._kinds: tuple[ResourceKind, ...] = tuple(DEFAULT_KINDS if kinds is None else kinds)
        index: dict[str, list[ResourceKind]] = {}
        for kind in self._kinds:
            for name in kind.names():
                index.setdefault(name, []).append(kind)
        self._by_name: dict[str, tuple[ResourceKind, ...]] = {
            name: tuple(kinds) for name, kinds in index.items()
        }

    @property
    def kinds(self) -> tuple[ResourceKind, ...]:
        return self._kinds

    def _lookup(self, resource: str, group: str | None = None) -> ResourceKind:
        candidates = self._by_name.get(resource.lower(), ())
        if group:
            # label templates carry sanitized groups ("networking_k8s_io")
            wanted = sanitize_group_name(group)
            candidates = tuple(
                kind for kind in candidates if sanitize_group_name(kind.group) == wanted
            )
        if not candidates:
            target = f"{resource}.{group}" if group else resource
            raise ResourceMappingError(
                f"no matches for resource {target!r}",
                details={"resource": resource, "group": group or ""},
            )
        return candidates[0]

    def normalize(self, resource: GroupResource) -> GroupResource:
        """Return the canonical (group, plural) form of the given resource."""
        return self._lookup(resource.resource, resource.group).group_resource()

    def singularize(self, resource: str) -> str:
        """Return the singular form of a resource name."""
        return self._lookup(resource).singular


def default_resource_mapper() -> StaticResourceMapper:
    """Mapper covering the core, apps, batch, autoscaling and networking kinds."""
    return StaticResourceMapper(DEFAULT_KINDS)
