"""Depth-first topological sort over arbitrary nodes.

Based on https://en.wikipedia.org/wiki/Topological_sorting#Depth-first_search
"""

from collections.abc import Callable, Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from schemadump.errors import CycleError, SortError, UnknownNodeError

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class Mark(Enum):
    NONE = 0
    TEMPORARY = 1
    PERMANENT = 2


@dataclass
class Marked(Generic[T]):
    node: T
    mark: Mark = Mark.NONE


@dataclass
class SortResult(Generic[T]):
    """Sorted nodes plus the structural errors found on the way"""

    sorted: list[T] = field(default_factory=list)
    errors: list[SortError] = field(default_factory=list)


class TopoSort(Generic[K, T]):
    """Single-use sorter; nodes are registered in input order.

    Registering two nodes under the same key keeps the first key's position
    and the last node.
    """

    def __init__(
        self,
        nodes: Iterable[T],
        key: Callable[[T], K],
        dependencies: Callable[[T], Iterable[K]],
    ) -> None:
        self.dependencies = dependencies
        self.nodes: dict[K, Marked[T]] = {}
        self.result: SortResult[T] = SortResult()

        for node in nodes:
            self.nodes[key(node)] = Marked(node)

    def sort(self) -> SortResult[T]:
        for marked in self.nodes.values():
            if marked.mark is Mark.NONE:
                self._visit(marked)
        return self.result

    def _visit(self, root: Marked[T]) -> None:
        # explicit stack instead of recursion; long FK chains would hit the recursion limit
        root.mark = Mark.TEMPORARY
        stack: list[tuple[Marked[T], Iterator[K]]] = [(root, iter(self.dependencies(root.node)))]

        while stack:
            current, pending = stack[-1]
            for dependency in pending:
                marked = self.nodes.get(dependency)
                if marked is None:
                    self.result.errors.append(UnknownNodeError(dependency))
                    continue
                if marked.mark is Mark.TEMPORARY:
                    self.result.errors.append(CycleError(dependency))
                    continue
                if marked.mark is Mark.PERMANENT:
                    continue

                marked.mark = Mark.TEMPORARY
                stack.append((marked, iter(self.dependencies(marked.node))))
                break
            else:
                # all dependencies handled: post-order emit
                current.mark = Mark.PERMANENT
                self.result.sorted.append(current.node)
                stack.pop()


def toposort(
    nodes: Iterable[T],
    key: Callable[[T], K],
    dependencies: Callable[[T], Iterable[K]],
) -> SortResult[T]:
    """Sort nodes so that every node comes after the nodes it depends on.

    Args:
        nodes: Nodes to sort, in the order they should be visited
        key: Returns the lookup key of a node
        dependencies: Returns the keys a node depends on, in visiting order

    Returns:
        SortResult with every node exactly once, plus UnknownNodeError for
        dependencies that name no node and CycleError for dependencies that
        close a cycle. Errors never abort the sort.
    """
    return TopoSort(nodes, key, dependencies).sort()
