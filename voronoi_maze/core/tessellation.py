"""
Tessellation builder for Voronoi mazes.

Turns random sites into relaxed Voronoi cells and a planar adjacency graph:
1. Draws sites uniformly over a square domain
2. Applies Lloyd's relaxation (sites move to their cell centroids)
3. Builds one cell per site with a valid clipped polygon
4. Links cells that share a boundary segment
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
import structlog

from .exceptions import InvalidParameterError
from .geometry import (
    Bounds,
    BoundedVoronoi,
    compute_polygon_centroid,
    square_bounds,
    triangulate,
)
from .lcg_prng import SeededLCG

logger = structlog.get_logger()

# Decimal places used to match polygon vertices between neighboring cells
EDGE_PRECISION = 3

Point = Tuple[float, float]
Edge = Tuple[Point, Point]


@dataclass(eq=False)
class Cell:
    """A maze cell: one relaxed site and its clipped Voronoi polygon."""
    id: int
    site: Point
    polygon: np.ndarray  # (k, 2) counter-clockwise vertex loop
    neighbors: Mapping[int, Edge] = field(default_factory=dict)  # neighbor id -> shared edge


@dataclass
class Tessellation:
    """Result of the tessellation stage."""
    sites: np.ndarray  # relaxed sites, one row per requested cell
    cells: List[Cell]  # cells in id order; degenerate sites are absent
    bounds: Bounds
    dropped: List[int] = field(default_factory=list)  # site ids without a cell

    def cell_map(self) -> Dict[int, Cell]:
        return {cell.id: cell for cell in self.cells}


def random_sites(n: int, size: float, rng: SeededLCG) -> np.ndarray:
    """
    Draw ``n`` sites uniformly in ``[0, size) x [0, size)``.

    Two draws per site, x then y, so the site list depends only on the RNG
    stream.
    """
    sites = []
    for _ in range(n):
        x = rng.uniform(size)
        y = rng.uniform(size)
        sites.append([x, y])
    return np.array(sites, dtype=float).reshape(-1, 2)


def relax_sites(sites: np.ndarray, size: float, n_iterations: int) -> np.ndarray:
    """Apply Lloyd's relaxation to improve site distribution.

    Moves each site to the centroid of its clipped Voronoi cell. A site the
    diagram gives no polygon stays where it is for that iteration.

    Args:
        sites: Sites to relax
        size: Side length of the square domain
        n_iterations: Number of relaxation iterations

    Returns:
        Relaxed site coordinates
    """
    bounds = square_bounds(size)
    sites = sites.copy()  # Don't modify original

    for iteration in range(n_iterations):
        diagram = triangulate(sites, bounds)
        moved = 0

        relaxed = sites.copy()
        for i in range(len(sites)):
            polygon = diagram.clipped_polygon(i, bounds)
            if polygon is None:
                continue
            relaxed[i] = compute_polygon_centroid(polygon)
            moved += 1

        sites = relaxed
        logger.debug("Relaxation iteration complete",
                     iteration=iteration + 1, moved=moved, total=len(sites))

    return sites


def build_cells(sites: np.ndarray, diagram: BoundedVoronoi,
                bounds: Bounds) -> Tuple[List[Cell], List[int]]:
    """
    Build one cell per site that has a clipped polygon.

    Cell ids are site indices. A site without a polygon is dropped and its id
    is simply absent; remaining ids are not renumbered.

    Returns:
        Tuple of (cells in id order, dropped site ids)
    """
    cells = []
    dropped = []

    for i, site in enumerate(sites):
        polygon = diagram.clipped_polygon(i, bounds)
        if polygon is None:
            dropped.append(i)
            continue
        cells.append(Cell(id=i, site=(float(site[0]), float(site[1])), polygon=polygon))

    if dropped:
        logger.warning("Dropped degenerate sites", dropped=dropped,
                       remaining=len(cells))

    return cells, dropped


def quantize_point(point) -> Tuple[float, float]:
    """Round a vertex to ``EDGE_PRECISION`` decimals for cross-polygon matching."""
    return (round(float(point[0]), EDGE_PRECISION),
            round(float(point[1]), EDGE_PRECISION))


def get_shared_edge(cell1: Cell, cell2: Cell) -> Optional[Edge]:
    """
    Find the boundary segment shared by two cells.

    Vertices of both polygons are quantized to absorb noise from clipping
    each polygon independently. The vertices of ``cell1`` whose quantized key
    also occurs in ``cell2`` are the common boundary; sorted by (x, y), the
    first and last of them are the segment endpoints.

    Args:
        cell1: First cell
        cell2: Second cell

    Returns:
        ((x1, y1), (x2, y2)) with the lexicographically smaller endpoint
        first, or None if fewer than two distinct vertices are shared
    """
    keys2 = {quantize_point(point) for point in cell2.polygon}

    shared = []
    seen = set()
    for point in cell1.polygon:
        key = quantize_point(point)
        if key in keys2 and key not in seen:
            seen.add(key)
            shared.append((float(point[0]), float(point[1])))

    if len(shared) < 2:
        return None

    shared.sort()
    return (shared[0], shared[-1])


def build_neighbor_graph(cells: List[Cell], diagram: BoundedVoronoi) -> int:
    """
    Link cells that share a boundary segment.

    Candidates come from the diagram's triangulation neighbors and are
    visited in ascending id order. Each edge is stored on both cells.

    Returns:
        Number of undirected edges recorded
    """
    cell_map = {cell.id: cell for cell in cells}
    neighbor_maps: Dict[int, Dict[int, Edge]] = {cell.id: {} for cell in cells}
    edge_count = 0
    rejected = 0

    for cell in cells:
        for neighbor_id in sorted(diagram.neighbors(cell.id)):
            neighbor = cell_map.get(neighbor_id)
            if neighbor is None or neighbor_id in neighbor_maps[cell.id]:
                continue

            edge = get_shared_edge(cell, neighbor)
            if edge is None:
                rejected += 1
                continue

            neighbor_maps[cell.id][neighbor_id] = edge
            neighbor_maps[neighbor_id][cell.id] = edge
            edge_count += 1

    # Neighbor maps are read-only once the graph is complete
    for cell in cells:
        cell.neighbors = MappingProxyType(neighbor_maps[cell.id])

    logger.debug("Neighbor graph built", edges=edge_count, rejected=rejected)
    return edge_count


def build_tessellation(cell_count: int, size: float, relaxation: int,
                       rng: SeededLCG) -> Tessellation:
    """
    Generate relaxed cells and their adjacency graph.

    Args:
        cell_count: Number of sites to draw (at least 1; callers that need
            distinct start and end cells enforce 2, see MazeConfig)
        size: Side length of the square domain
        relaxation: Number of Lloyd iterations (0 disables smoothing)
        rng: Random stream the sites are drawn from

    Returns:
        Tessellation with sites, cells and dropped site ids

    Raises:
        InvalidParameterError: If any parameter is out of range
    """
    if cell_count < 1:
        raise InvalidParameterError(f"cell_count must be at least 1, got {cell_count}")
    if size <= 0:
        raise InvalidParameterError(f"size must be positive, got {size}")
    if relaxation < 0:
        raise InvalidParameterError(f"relaxation must be non-negative, got {relaxation}")

    logger.info("Building tessellation", cell_count=cell_count, size=size,
                relaxation=relaxation)

    bounds = square_bounds(size)
    sites = random_sites(cell_count, size, rng)
    sites = relax_sites(sites, size, relaxation)

    diagram = triangulate(sites, bounds)
    cells, dropped = build_cells(sites, diagram, bounds)
    edge_count = build_neighbor_graph(cells, diagram)

    logger.info("Tessellation built", cells=len(cells), edges=edge_count,
                dropped=len(dropped))

    return Tessellation(sites=sites, cells=cells, bounds=bounds, dropped=dropped)
