"""
Symmetric adjacency structure for one session's participant connections.

Edges are undirected: every mutation touches both endpoints, so
``b in graph.neighbours(a)`` holds exactly when ``a in graph.neighbours(b)``.
Neighbour lists keep insertion order, which is also the order clients see.
"""

from __future__ import annotations

from collections.abc import Iterator


class ConnectionGraph:
    """Undirected graph keyed by connection identifier."""

    def __init__(self) -> None:
        self._adjacency: dict[str, list[str]] = {}

    def __contains__(self, node: object) -> bool:
        return node in self._adjacency

    def __iter__(self) -> Iterator[str]:
        return iter(self._adjacency)

    def __len__(self) -> int:
        return len(self._adjacency)

    def ensure(self, node: str) -> None:
        """Materialize an empty entry for ``node`` if it has none."""
        self._adjacency.setdefault(node, [])

    def neighbours(self, node: str) -> list[str]:
        return list(self._adjacency.get(node, ()))

    def connected(self, a: str, b: str) -> bool:
        return b in self._adjacency.get(a, ())

    def degree(self, node: str) -> int:
        return len(self._adjacency.get(node, ()))

    def toggle(self, a: str, b: str) -> bool:
        """
        Flip the edge between ``a`` and ``b``.

        Missing endpoints are materialized first. Returns True when the edge
        exists after the call.
        """
        self.ensure(a)
        self.ensure(b)

        if b in self._adjacency[a]:
            self._adjacency[a].remove(b)
            if a in self._adjacency[b]:
                self._adjacency[b].remove(a)
            return False

        self._adjacency[a].append(b)
        if a not in self._adjacency[b]:
            self._adjacency[b].append(a)
        return True

    def remove(self, node: str) -> bool:
        """
        Drop ``node`` as a key and from every other neighbour list.

        Returns True if anything was removed. Safe to call repeatedly.
        """
        removed = self._adjacency.pop(node, None) is not None
        for neighbours in self._adjacency.values():
            if node in neighbours:
                neighbours.remove(node)
                removed = True
        return removed

    def clear(self) -> None:
        self._adjacency.clear()

    def edge_count(self) -> int:
        return sum(len(neighbours) for neighbours in self._adjacency.values()) // 2

    def is_symmetric(self) -> bool:
        return all(a in self._adjacency.get(b, ()) for a, neighbours in self._adjacency.items() for b in neighbours)

    def to_dict(self) -> dict[str, list[str]]:
        """JSON-ready copy of the adjacency lists."""
        return {node: list(neighbours) for node, neighbours in self._adjacency.items()}
