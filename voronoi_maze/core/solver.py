"""
Maze solving and renderer-facing solution geometry.
"""

from collections import deque
from typing import AbstractSet, Dict, List, Optional, Sequence

import structlog

from .maze_carver import Passage, passage_key
from .tessellation import Cell, Point

logger = structlog.get_logger()


def find_path(start: Cell, end: Cell, cells: Sequence[Cell],
              passages: AbstractSet[Passage]) -> List[Cell]:
    """
    Breadth-first search from start to end through open passages.

    Args:
        start: Start cell
        end: End cell
        cells: All cells of the maze
        passages: Open passages as (lower id, higher id) pairs

    Returns:
        Cells from start to end inclusive, or an empty list if end is not
        reachable
    """
    cell_map = {cell.id: cell for cell in cells}
    came_from: Dict[int, Optional[int]] = {start.id: None}
    queue = deque([start.id])

    while queue:
        current = queue.popleft()

        if current == end.id:
            path = []
            node: Optional[int] = current
            while node is not None:
                path.append(cell_map[node])
                node = came_from[node]
            path.reverse()
            return path

        for neighbor_id in sorted(cell_map[current].neighbors):
            if neighbor_id in came_from:
                continue
            if passage_key(current, neighbor_id) not in passages:
                continue
            came_from[neighbor_id] = current
            queue.append(neighbor_id)

    logger.warning("No solution found", start=start.id, end=end.id,
                   visited=len(came_from))
    return []


def edge_midpoint(cell_a: Cell, cell_b: Cell) -> Optional[Point]:
    """Midpoint of the wall between two adjacent cells, if they are adjacent."""
    edge = cell_a.neighbors.get(cell_b.id)
    if edge is None:
        return None
    (x1, y1), (x2, y2) = edge
    return ((x1 + x2) / 2, (y1 + y2) / 2)


def build_solution_polyline(path: Sequence[Cell]) -> List[Point]:
    """
    Polyline through a solution path for drawing.

    Alternates each cell's site with the midpoint of the passage to the next
    cell, so the line crosses walls through their openings.
    """
    if not path:
        return []

    points = [path[0].site]
    for prev, curr in zip(path, path[1:]):
        midpoint = edge_midpoint(prev, curr)
        if midpoint is not None:
            points.append(midpoint)
        points.append(curr.site)
    return points


def polyline_progress(polyline: Sequence[Point], step: int) -> List[Point]:
    """
    Prefix of a solution polyline after ``step`` animation steps.

    Each step advances one cell, i.e. two polyline points (a wall midpoint and
    the next site). Step 0 is the start site alone.
    """
    if step < 0 or not polyline:
        return []
    last = min(step * 2, len(polyline) - 1)
    return list(polyline[:last + 1])
