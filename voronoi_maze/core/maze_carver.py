"""
Randomized Kruskal maze carving.

Every adjacency edge gets a random weight; a minimum spanning tree over those
weights is a uniformly shuffled perfect maze: exactly one route between any
two cells of a connected graph.
"""

from dataclasses import dataclass
from typing import FrozenSet, Hashable, Iterable, List, Sequence, Tuple

import structlog

from .lcg_prng import SeededLCG
from .tessellation import Cell

logger = structlog.get_logger()

Passage = Tuple[int, int]  # (lower id, higher id)


def passage_key(cell_a: int, cell_b: int) -> Passage:
    """Canonical unordered pair for two cell ids."""
    return (cell_a, cell_b) if cell_a < cell_b else (cell_b, cell_a)


class DisjointSet:
    """Union-find over hashable items with path compression."""

    def __init__(self, items: Iterable[Hashable]):
        self._parent = {item: item for item in items}
        self.component_count = len(self._parent)

    def find(self, item: Hashable) -> Hashable:
        """Return the root of ``item``'s set, compressing the path to it."""
        root = item
        while self._parent[root] != root:
            root = self._parent[root]

        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]

        return root

    def union(self, item_a: Hashable, item_b: Hashable) -> bool:
        """
        Merge the sets of two items.

        Returns:
            False if they were already in the same set
        """
        root_a = self.find(item_a)
        root_b = self.find(item_b)
        if root_a == root_b:
            return False
        self._parent[root_a] = root_b
        self.component_count -= 1
        return True


@dataclass
class WeightedEdge:
    """Candidate passage between two adjacent cells."""
    cell1: int
    cell2: int
    weight: float


def candidate_edges(cells: Sequence[Cell], rng: SeededLCG) -> List[WeightedEdge]:
    """
    Enumerate each adjacency edge once with a random weight.

    Cells are visited in the given order and neighbors by ascending id; only
    pairs with ``cell1 < cell2`` are emitted. One RNG draw per edge.
    """
    edges = []
    for cell in cells:
        for neighbor_id in sorted(cell.neighbors):
            if cell.id < neighbor_id:
                edges.append(WeightedEdge(cell.id, neighbor_id, rng.random()))
    return edges


def carve_maze(cells: Sequence[Cell], rng: SeededLCG) -> FrozenSet[Passage]:
    """
    Carve a perfect maze over the cell adjacency graph.

    Args:
        cells: Cells with populated neighbor maps
        rng: Random stream for edge weights

    Returns:
        Set of open passages as (lower id, higher id) pairs; a spanning tree
        of each connected component
    """
    edges = candidate_edges(cells, rng)
    edges.sort(key=lambda edge: edge.weight)

    components = DisjointSet(cell.id for cell in cells)
    passages = set()

    for edge in edges:
        if components.union(edge.cell1, edge.cell2):
            passages.add(passage_key(edge.cell1, edge.cell2))

    if components.component_count > 1:
        logger.warning("Adjacency graph is disconnected",
                       components=components.component_count)

    logger.info("Maze carved", candidates=len(edges), passages=len(passages),
                components=components.component_count)

    return frozenset(passages)
