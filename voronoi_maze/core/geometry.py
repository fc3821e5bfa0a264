"""
Bounded Voronoi geometry for maze tessellation.

Wraps scipy's qhull Voronoi and shapely clipping behind three operations:
triangulate a site set, list a site's Delaunay neighbors, and return a site's
cell polygon clipped to the maze domain.
"""

from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
import structlog
from scipy.spatial import QhullError, Voronoi
from shapely.geometry import MultiPoint, Polygon, box
from shapely.geometry.polygon import orient

from .exceptions import GeometryError

logger = structlog.get_logger()

Bounds = Tuple[float, float, float, float]  # (min_x, min_y, max_x, max_y)

# Clipped polygons with less area than this are treated as missing
MIN_CELL_AREA = 1e-9


def square_bounds(size: float) -> Bounds:
    """Bounding box of a square domain ``[0, size] x [0, size]``."""
    return (0.0, 0.0, float(size), float(size))


def mirror_sites(sites: np.ndarray, bounds: Bounds) -> np.ndarray:
    """
    Reflect sites across the four sides of the bounding box.

    With the reflections added, the bisector between a site and its mirror
    image lies on the box edge, so every original site's Voronoi region is
    finite and contained in the box.

    Args:
        sites: Array of [x, y] site coordinates, shape (n, 2)
        bounds: (min_x, min_y, max_x, max_y)

    Returns:
        Array of shape (5n, 2): the sites followed by their reflections
        across the left, right, bottom and top edges
    """
    min_x, min_y, max_x, max_y = bounds

    left = sites.copy()
    left[:, 0] = 2 * min_x - sites[:, 0]
    right = sites.copy()
    right[:, 0] = 2 * max_x - sites[:, 0]
    bottom = sites.copy()
    bottom[:, 1] = 2 * min_y - sites[:, 1]
    top = sites.copy()
    top[:, 1] = 2 * max_y - sites[:, 1]

    return np.vstack([sites, left, right, bottom, top])


class BoundedVoronoi:
    """
    Handle on a Voronoi diagram of sites confined to a bounding box.

    Built by :func:`triangulate`; read-only afterwards.
    """

    def __init__(self, sites: np.ndarray, bounds: Bounds, vor: Voronoi):
        self.sites = sites
        self.bounds = bounds
        self.n_sites = len(sites)
        self._vor = vor
        self._neighbors = self._build_neighbors()
        self._regions = self._assign_regions()

    def _build_neighbors(self) -> List[Set[int]]:
        """Delaunay neighbors among original sites, from the ridge list."""
        neighbors: List[Set[int]] = [set() for _ in range(self.n_sites)]

        for p1, p2 in self._vor.ridge_points:
            # Ridges against mirrored points are box edges, not cell contacts
            if p1 < self.n_sites and p2 < self.n_sites:
                neighbors[p1].add(int(p2))
                neighbors[p2].add(int(p1))

        return neighbors

    def _assign_regions(self) -> List[Optional[int]]:
        """
        Map each original site to its qhull region index.

        Coincident sites share a region in qhull's output; only the first such
        site keeps it, the others get no region.
        """
        regions: List[Optional[int]] = []
        claimed: Dict[int, int] = {}

        for i in range(self.n_sites):
            region_idx = int(self._vor.point_region[i])
            region = self._vor.regions[region_idx] if region_idx >= 0 else []

            if not region or -1 in region or len(region) < 3:
                regions.append(None)
            elif region_idx in claimed:
                logger.debug("Coincident site has no region",
                             site=i, owner=claimed[region_idx])
                regions.append(None)
            else:
                claimed[region_idx] = i
                regions.append(region_idx)

        return regions

    def neighbors(self, site_id: int) -> Set[int]:
        """Candidate neighbor ids of a site from the underlying triangulation."""
        return set(self._neighbors[site_id])

    def clipped_polygon(self, site_id: int,
                        bounds: Optional[Bounds] = None) -> Optional[np.ndarray]:
        """
        Cell polygon of a site clipped to a bounding box.

        Args:
            site_id: Index of the site
            bounds: Clip box, defaults to the diagram's bounds

        Returns:
            Counter-clockwise vertex loop of shape (k, 2), k >= 3, without a
            repeated closing vertex; None if the site has no usable cell
        """
        region_idx = self._regions[site_id]
        if region_idx is None:
            return None

        vertices = self._vor.vertices[self._vor.regions[region_idx]]

        # Voronoi cells are convex, so the hull orders the region's vertices
        hull = MultiPoint([tuple(v) for v in vertices]).convex_hull
        clipped = hull.intersection(box(*(bounds or self.bounds)))

        if not isinstance(clipped, Polygon) or clipped.is_empty:
            return None
        if clipped.area < MIN_CELL_AREA:
            return None

        coords = np.asarray(orient(clipped, sign=1.0).exterior.coords)
        return coords[:-1]


def triangulate(sites: Sequence[Sequence[float]], bounds: Bounds) -> BoundedVoronoi:
    """
    Compute the bounded Voronoi diagram of a site set.

    Args:
        sites: Sequence of [x, y] site coordinates (at least one)
        bounds: (min_x, min_y, max_x, max_y) domain box

    Returns:
        BoundedVoronoi handle

    Raises:
        GeometryError: If qhull rejects the input
    """
    points = np.asarray(sites, dtype=float).reshape(-1, 2)
    if len(points) == 0:
        raise GeometryError("Cannot triangulate an empty site set")

    try:
        vor = Voronoi(mirror_sites(points, bounds))
    except QhullError as exc:
        raise GeometryError(f"Voronoi computation failed: {exc}") from exc

    return BoundedVoronoi(points, bounds, vor)


def compute_polygon_centroid(vertices: np.ndarray) -> np.ndarray:
    """Compute the centroid of a polygon.

    Args:
        vertices: Array of [x, y] vertex coordinates

    Returns:
        [x, y] centroid coordinates
    """
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) < 3:
        return np.mean(vertices, axis=0)

    # Shoelace formula over each edge (i, i + 1)
    x, y = vertices[:, 0], vertices[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    cross = x * y_next - x_next * y
    area = cross.sum() * 0.5

    if abs(area) < 1e-10:
        return np.mean(vertices, axis=0)

    cx = ((x + x_next) * cross).sum() / (6.0 * area)
    cy = ((y + y_next) * cross).sum() / (6.0 * area)
    return np.array([cx, cy])
