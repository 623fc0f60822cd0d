"""Prerequisite graph resolution and chain validation.

Prerequisites are stored as free-form course codes, so the data can contain
dangling references, cycles and arbitrarily long chains. Both walks here keep
their own explicit frame stack: each code is expanded at most once and the
depth bound is a counter, never the interpreter's recursion limit.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from catalog.core.config import get_settings
from catalog.core.exceptions import ResourceNotFoundError
from catalog.db.accessor import EntityAccessor
from catalog.models.course import Course
from catalog.schemas.prerequisite import PrerequisiteValidation

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50


def prerequisite_codes(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


@dataclass
class GraphTraversal:
    """State of one prerequisite resolution, starting from a single code."""

    max_depth: int
    adjacency: dict[str, list[str]] = field(default_factory=dict)
    visited: set[str] = field(default_factory=set)
    on_stack: set[str] = field(default_factory=set)
    # Codes recorded as leaves because of the depth bound or a back edge.
    truncated: set[str] = field(default_factory=set)
    cycle_nodes: set[str] = field(default_factory=set)

    def resolve(self, store: EntityAccessor, start_code: str) -> dict[str, list[str]]:
        frames: list[tuple[str, int, Iterator[str]]] = []
        self._enter(store, start_code, 0, frames)
        while frames:
            code, depth, pending = frames[-1]
            next_code = next(pending, None)
            if next_code is None:
                frames.pop()
                self.on_stack.discard(code)
                self.visited.add(code)
                continue
            self._enter(store, next_code, depth + 1, frames)
        return self.adjacency

    def _enter(
        self,
        store: EntityAccessor,
        code: str,
        depth: int,
        frames: list[tuple[str, int, Iterator[str]]],
    ) -> None:
        if code in self.visited:
            return
        if depth > self.max_depth:
            self.truncated.add(code)
            self._close_as_leaf(code)
            return
        if code in self.on_stack:
            self.cycle_nodes.add(code)
            self._close_as_leaf(code)
            return

        self.on_stack.add(code)
        prerequisites = _lookup_prerequisites(store, code)
        self.adjacency[code] = prerequisites
        frames.append((code, depth, iter(prerequisites)))

    def _close_as_leaf(self, code: str) -> None:
        # A code already on the stack keeps the list read for it.
        self.adjacency.setdefault(code, [])
        self.visited.add(code)


def _lookup_prerequisites(store: EntityAccessor, code: str) -> list[str]:
    course = store.get_by_index(Course, Course.code == code)
    if course is None:
        return []
    return prerequisite_codes(course.prerequisites)


def _require_course(store: EntityAccessor, course_id: str) -> Course:
    course = store.get_by_id(Course, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    return course


def resolve_prerequisite_graph(store: EntityAccessor, start_code: str, max_depth: int) -> GraphTraversal:
    traversal = GraphTraversal(max_depth=max_depth)
    traversal.resolve(store, start_code)
    if traversal.truncated:
        logger.debug(
            "Prerequisite graph from %s truncated at %d code(s): %s",
            start_code,
            len(traversal.truncated),
            sorted(traversal.truncated),
        )
    return traversal


def build_prerequisite_graph(
    store: EntityAccessor,
    course_id: str,
    max_depth: int | None = None,
) -> dict[str, list[str]]:
    """Map every code reachable from the course to its immediate prerequisites.

    Unknown codes, codes past the depth bound and codes closing a cycle all
    appear as keys with an empty list; the result is always closed.
    """
    course = _require_course(store, course_id)
    if max_depth is None:
        max_depth = get_settings().prerequisite_max_depth
    traversal = resolve_prerequisite_graph(store, course.code, max_depth)
    return dict(traversal.adjacency)


def canonical_cycle(nodes: list[str]) -> list[str]:
    """Rotate a cycle to begin at its smallest code and close it."""
    pivot = nodes.index(min(nodes))
    rotated = nodes[pivot:] + nodes[:pivot]
    return rotated + [rotated[0]]


@dataclass
class ChainSearch:
    adjacency: dict[str, list[str]]
    start_code: str
    max_depth: int
    visited: set[str] = field(default_factory=set)
    on_stack: set[str] = field(default_factory=set)
    path: list[str] = field(default_factory=list)

    def run(self) -> PrerequisiteValidation:
        frames: list[tuple[str, int, Iterator[str]]] = []
        outcome = self._enter(self.start_code, 0, frames)
        while outcome is None and frames:
            node, depth, pending = frames[-1]
            next_node = next(pending, None)
            if next_node is None:
                frames.pop()
                self.on_stack.discard(node)
                self.path.pop()
                continue
            outcome = self._enter(next_node, depth + 1, frames)
        return outcome or PrerequisiteValidation.ok()

    def _enter(
        self,
        node: str,
        depth: int,
        frames: list[tuple[str, int, Iterator[str]]],
    ) -> PrerequisiteValidation | None:
        if depth > self.max_depth:
            return PrerequisiteValidation.depth_exceeded(self.max_depth, self.start_code)
        if node in self.on_stack:
            first = self.path.index(node)
            return PrerequisiteValidation.cycle_found(canonical_cycle(self.path[first:]))
        if node in self.visited:
            return None

        self.visited.add(node)
        self.on_stack.add(node)
        self.path.append(node)
        frames.append((node, depth, iter(self.adjacency.get(node, []))))
        return None


def validate_adjacency(
    adjacency: dict[str, list[str]],
    start_code: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> PrerequisiteValidation:
    return ChainSearch(adjacency=adjacency, start_code=start_code, max_depth=max_depth).run()


def validate_prerequisite_chain(
    store: EntityAccessor,
    course_id: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> PrerequisiteValidation:
    """Certify that a course's prerequisite chain is acyclic and within ``max_depth``.

    Cycles and depth overruns come back as an invalid result naming the cycle
    or the limit; only an unknown ``course_id`` raises.
    """
    course = _require_course(store, course_id)
    # Build at least as deep as the caller validates so truncation cannot hide a violation.
    graph_depth = max(max_depth, get_settings().prerequisite_max_depth)
    adjacency = resolve_prerequisite_graph(store, course.code, graph_depth).adjacency
    result = validate_adjacency(adjacency, course.code, max_depth)
    if not result.valid:
        logger.info(
            "Prerequisite chain of %s is invalid: %s",
            course.code,
            result.cycle if result.cycle else result.reason,
        )
    return result
