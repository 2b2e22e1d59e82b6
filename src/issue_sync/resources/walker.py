"""Cancellable depth-first enumeration of accessible files.

``walk()`` is pure enumeration: it never fetches or reconciles anything.
A container root contributes descendants only when ``recursive`` is set;
below an excluded container no file is ever visited.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator

from .model import Resource, ResourceKind, ResourceTree

if TYPE_CHECKING:
    from ..core.progress import ProgressMonitor

logger = logging.getLogger(__name__)


def walk(
    root: Resource,
    tree: ResourceTree,
    recursive: bool,
    monitor: ProgressMonitor,
) -> Iterator[Resource]:
    """Yield the accessible files reachable from *root*.

    Resources that cannot be adapted to a project, no longer exist, or are
    inaccessible are skipped without error.  Traversal stops as soon as
    ``monitor.is_cancelled()`` returns ``True``.

    Args:
        root: Resource to start from (visited itself).
        tree: Resource tree used to resolve project membership.
        recursive: Whether containers are expanded.
        monitor: Progress monitor polled for cancellation.

    Yields:
        File resources, depth-first in child order.
    """
    stack: list[Resource] = [root]
    while stack:
        if monitor.is_cancelled():
            return
        resource = stack.pop()
        if not _visitable(resource, tree):
            continue

        if resource.kind == ResourceKind.FILE:
            yield resource
            continue

        if not recursive:
            continue
        # Reverse so the first child is popped first.
        stack.extend(reversed(list(resource.children())))


def _visitable(resource: Resource, tree: ResourceTree) -> bool:
    if tree.adapt(resource) is None:
        logger.debug("Skipping %s: not part of a project", resource.name)
        return False
    if not resource.exists() or not resource.is_accessible():
        logger.debug("Skipping %s: not accessible", resource.name)
        return False
    return True
