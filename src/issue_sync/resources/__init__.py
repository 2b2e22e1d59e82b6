"""Local resource tree: contracts, filesystem implementation, walker."""

from .filesystem import LocalResource, Workspace
from .model import ProjectKey, Resource, ResourceKind, ResourceTree
from .walker import walk

__all__ = [
    "LocalResource",
    "ProjectKey",
    "Resource",
    "ResourceKind",
    "ResourceTree",
    "Workspace",
    "walk",
]
