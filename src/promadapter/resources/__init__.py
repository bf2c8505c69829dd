"""
Resource identifiers and the mappers that canonicalize them.
"""

from promadapter.resources.mapper import (
    DEFAULT_KINDS,
    ResourceKind,
    ResourceMapper,
    StaticResourceMapper,
    default_resource_mapper,
)
from promadapter.resources.models import NAMESPACES, GroupResource, sanitize_group_name

__all__ = [
    "GroupResource",
    "NAMESPACES",
    "sanitize_group_name",
    "ResourceMapper",
    "ResourceKind",
    "StaticResourceMapper",
    "DEFAULT_KINDS",
    "default_resource_mapper",
]
