"""Structural validation of an access control schema.

Rejects empty schemas and cyclic group inheritance before the index is
built. Duplicate ids are detected while indexing (see ``index.py``).
"""

from __future__ import annotations

import logging
from typing import Iterator

from .exceptions import CyclicInheritanceError, EmptySchemaError
from .schema import AccessControlSchema, Group

logger = logging.getLogger(__name__)


def validate(schema: AccessControlSchema) -> None:
    """Validate ``schema``, raising on the first problem found.

    Raises:
        EmptySchemaError: The schema has no top-level group.
        CyclicInheritanceError: A group is reachable from itself.
    """
    if not schema.groups:
        raise EmptySchemaError()

    logger.debug("Validating %d top-level access control groups", len(schema.groups))
    explored: set[Group] = set()
    for group in schema.groups:
        check_for_cyclic_dependencies(group, explored)


def check_for_cyclic_dependencies(root: Group, explored: set[Group]) -> None:
    """Depth-first cycle check of the inheritance graph below ``root``.

    ``on_path`` holds the groups of the branch currently being walked and is
    what detects cycles. ``explored`` holds groups whose whole sub-graph was
    already checked (from this or an earlier root); they are skipped, so a
    group shared by several parents is never mistaken for a cycle.

    Args:
        root: Group to start from.
        explored: Groups already known to be acyclic; updated in place.

    Raises:
        CyclicInheritanceError: Naming the group that closes the cycle.
    """
    if root in explored:
        return

    on_path: set[Group] = {root}
    stack: list[tuple[Group, Iterator[Group]]] = [(root, iter(root.inherits))]

    while stack:
        group, inherited = stack[-1]
        child = next(inherited, None)
        if child is None:
            stack.pop()
            on_path.discard(group)
            explored.add(group)
            continue
        if child in on_path:
            raise CyclicInheritanceError(child.id, path=[g.id for g, _ in stack])
        if child in explored:
            continue
        on_path.add(child)
        stack.append((child, iter(child.inherits)))


__all__ = ["check_for_cyclic_dependencies", "validate"]
