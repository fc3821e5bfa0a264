"""Tests for tessellation building and shared-edge detection."""

import pytest
import numpy as np
from shapely.geometry import Polygon

from voronoi_maze.core import tessellation as tessellation_module
from voronoi_maze.core.exceptions import InvalidParameterError
from voronoi_maze.core.geometry import square_bounds, triangulate
from voronoi_maze.core.lcg_prng import SeededLCG
from voronoi_maze.core.maze_carver import carve_maze
from voronoi_maze.core.tessellation import (
    Cell, build_cells, build_neighbor_graph, build_tessellation, get_shared_edge,
    quantize_point, random_sites, relax_sites
)


def square_cell(cell_id, x0, y0, side=1.0):
    polygon = np.array([[x0, y0], [x0 + side, y0], [x0 + side, y0 + side], [x0, y0 + side]])
    return Cell(id=cell_id, site=(x0 + side / 2, y0 + side / 2), polygon=polygon)


def cells_for_sites(sites, size):
    bounds = square_bounds(size)
    cells, _ = build_cells(sites, triangulate(sites, bounds), bounds)
    return cells


class StubDiagram:
    """Geometry stand-in that reports fixed triangulation neighbors."""

    def __init__(self, neighbors):
        self._neighbors = neighbors

    def neighbors(self, site_id):
        return set(self._neighbors.get(site_id, ()))


class TestRandomSites:
    """Test site sampling."""

    def test_count_and_bounds(self):
        sites = random_sites(50, 100.0, SeededLCG("sites"))
        assert sites.shape == (50, 2)
        assert np.all(sites >= 0)
        assert np.all(sites < 100.0)

    def test_two_draws_per_site_x_then_y(self):
        rng = SeededLCG("order")
        reference = SeededLCG("order")
        sites = random_sites(3, 10.0, rng)

        expected = [[reference.random() * 10.0, reference.random() * 10.0] for _ in range(3)]
        np.testing.assert_array_equal(sites, expected)
        assert rng.call_count == 6

    def test_reproducibility(self):
        sites1 = random_sites(20, 50.0, SeededLCG("test_seed"))
        sites2 = random_sites(20, 50.0, SeededLCG("test_seed"))
        np.testing.assert_array_equal(sites1, sites2)


class TestRelaxation:
    """Test Lloyd's relaxation."""

    def test_zero_iterations_is_identity(self):
        sites = random_sites(20, 100.0, SeededLCG("relax"))
        np.testing.assert_array_equal(relax_sites(sites, 100.0, 0), sites)

    def test_input_not_modified(self):
        sites = random_sites(20, 100.0, SeededLCG("relax"))
        original = sites.copy()
        relax_sites(sites, 100.0, 2)
        np.testing.assert_array_equal(sites, original)

    def test_sites_stay_in_domain(self):
        sites = random_sites(40, 100.0, SeededLCG("relax"))
        relaxed = relax_sites(sites, 100.0, 3)
        assert np.all(relaxed >= 0)
        assert np.all(relaxed <= 100.0)

    def test_single_site_moves_to_center(self):
        relaxed = relax_sites(np.array([[10.0, 80.0]]), 100.0, 1)
        np.testing.assert_allclose(relaxed, [[50.0, 50.0]])

    def test_site_without_polygon_stays_put(self):
        """The second of two coincident sites has no cell and is not moved."""
        sites = np.array([[30.0, 30.0], [30.0, 30.0], [70.0, 70.0]])
        relaxed = relax_sites(sites, 100.0, 1)

        np.testing.assert_array_equal(relaxed[1], [30.0, 30.0])
        assert not np.allclose(relaxed[0], [30.0, 30.0])
        assert not np.allclose(relaxed[2], [70.0, 70.0])

    def test_relaxation_evens_out_cell_areas(self):
        size = 100.0
        sites = random_sites(60, size, SeededLCG("uniformity"))

        def area_spread(points):
            areas = [Polygon(cell.polygon).area for cell in cells_for_sites(points, size)]
            return np.std(areas)

        assert area_spread(relax_sites(sites, size, 5)) < area_spread(sites)


class TestSharedEdge:
    """Test shared-edge detection."""

    def test_adjacent_squares(self):
        edge = get_shared_edge(square_cell(0, 0, 0), square_cell(1, 1, 0))
        assert edge == ((1.0, 0.0), (1.0, 1.0))

    def test_swapped_arguments(self):
        a, b = square_cell(0, 0, 0), square_cell(1, 1, 0)
        assert get_shared_edge(a, b) == get_shared_edge(b, a)

    def test_single_shared_vertex_is_not_an_edge(self):
        """Diagonal squares touch at (1, 1) only."""
        assert get_shared_edge(square_cell(0, 0, 0), square_cell(1, 1, 1)) is None

    def test_repeated_closing_vertex_is_not_an_edge(self):
        a = square_cell(0, 0, 0)
        a.polygon = np.vstack([a.polygon, a.polygon[:1]])
        b = Cell(id=1, site=(-0.5, -0.5),
                 polygon=np.array([[0, 0], [-1, 0], [-1, -1], [0, -1]], dtype=float))
        assert get_shared_edge(a, b) is None

    def test_disjoint_cells(self):
        assert get_shared_edge(square_cell(0, 0, 0), square_cell(1, 5, 5)) is None

    def test_quantization_absorbs_noise(self):
        a = square_cell(0, 0, 0)
        b = square_cell(1, 1, 0)
        b.polygon = b.polygon + 1e-5
        edge = get_shared_edge(a, b)
        assert edge == ((1.0, 0.0), (1.0, 1.0))

    def test_collinear_shared_points_collapse_to_extremes(self):
        a = Cell(id=0, site=(0.5, 1.0),
                 polygon=np.array([[0, 0], [1, 0], [1, 1], [1, 2], [0, 2]], dtype=float))
        b = Cell(id=1, site=(1.5, 1.0),
                 polygon=np.array([[1, 0], [2, 0], [2, 2], [1, 2], [1, 1]], dtype=float))
        assert get_shared_edge(a, b) == ((1.0, 0.0), (1.0, 2.0))

    def test_quantize_point(self):
        assert quantize_point((1.23456, -0.00001)) == (1.235, 0.0)


class TestNeighborGraph:
    """Test adjacency graph construction."""

    def test_records_edges_symmetrically(self):
        cells = [square_cell(0, 0, 0), square_cell(1, 1, 0), square_cell(2, 0, 1)]
        diagram = StubDiagram({0: [1, 2], 1: [0, 2], 2: [0, 1]})

        edge_count = build_neighbor_graph(cells, diagram)

        assert edge_count == 2
        assert set(cells[0].neighbors) == {1, 2}
        assert cells[0].neighbors[1] is cells[1].neighbors[0]
        assert cells[0].neighbors[2] is cells[2].neighbors[0]
        # 1 and 2 only touch at (1, 1)
        assert 2 not in cells[1].neighbors

    def test_single_vertex_contact_never_carved(self):
        cells = [square_cell(0, 0, 0), square_cell(1, 1, 1)]
        diagram = StubDiagram({0: [1], 1: [0]})

        assert build_neighbor_graph(cells, diagram) == 0
        assert carve_maze(cells, SeededLCG("no-edge")) == frozenset()

    def test_missing_candidate_cells_are_skipped(self):
        """Candidates that were dropped as degenerate have no cell."""
        cells = [square_cell(0, 0, 0)]
        diagram = StubDiagram({0: [5]})
        assert build_neighbor_graph(cells, diagram) == 0
        assert dict(cells[0].neighbors) == {}

    def test_neighbor_maps_are_read_only(self):
        cells = [square_cell(0, 0, 0), square_cell(1, 1, 0)]
        build_neighbor_graph(cells, StubDiagram({0: [1], 1: [0]}))
        with pytest.raises(TypeError):
            cells[0].neighbors[7] = ((0, 0), (1, 1))


class TestBuildTessellation:
    """Test the full tessellation stage."""

    @pytest.fixture
    def tessellation(self):
        return build_tessellation(60, 100.0, 2, SeededLCG("tessellation_test"))

    def test_one_cell_per_site(self, tessellation):
        assert len(tessellation.sites) == 60
        assert len(tessellation.cells) == 60
        assert tessellation.dropped == []
        assert [cell.id for cell in tessellation.cells] == list(range(60))

    def test_cell_sites_match_relaxed_sites(self, tessellation):
        for cell in tessellation.cells:
            assert cell.site == tuple(tessellation.sites[cell.id])

    def test_polygons(self, tessellation):
        for cell in tessellation.cells:
            assert len(cell.polygon) >= 3
            assert np.all(cell.polygon >= -1e-9)
            assert np.all(cell.polygon <= 100.0 + 1e-9)
            assert Polygon(cell.polygon).area > 0

    def test_symmetry_invariant(self, tessellation):
        cell_map = tessellation.cell_map()
        for cell in tessellation.cells:
            for neighbor_id, edge in cell.neighbors.items():
                other_edge = cell_map[neighbor_id].neighbors[cell.id]
                assert sorted(edge) == sorted(other_edge)

    def test_edge_detection_symmetry(self, tessellation):
        cell_map = tessellation.cell_map()
        for cell in tessellation.cells:
            for neighbor_id in cell.neighbors:
                forward = np.array(get_shared_edge(cell, cell_map[neighbor_id]))
                backward = np.array(get_shared_edge(cell_map[neighbor_id], cell))
                np.testing.assert_allclose(forward, backward, atol=1e-6)

    def test_edges_have_distinct_endpoints(self, tessellation):
        for cell in tessellation.cells:
            for (x1, y1), (x2, y2) in cell.neighbors.values():
                assert (x1 - x2) ** 2 + (y1 - y2) ** 2 > 1e-6

    def test_graph_is_connected(self, tessellation):
        cell_map = tessellation.cell_map()
        seen = {0}
        stack = [0]
        while stack:
            for neighbor_id in cell_map[stack.pop()].neighbors:
                if neighbor_id not in seen:
                    seen.add(neighbor_id)
                    stack.append(neighbor_id)
        assert len(seen) == len(tessellation.cells)

    def test_reproducibility(self):
        tess1 = build_tessellation(30, 80.0, 1, SeededLCG("repeat"))
        tess2 = build_tessellation(30, 80.0, 1, SeededLCG("repeat"))

        np.testing.assert_array_equal(tess1.sites, tess2.sites)
        for c1, c2 in zip(tess1.cells, tess2.cells):
            assert dict(c1.neighbors) == dict(c2.neighbors)

    def test_degenerate_site_dropped_without_renumbering(self):
        sites = np.array([[30.0, 30.0], [30.0, 30.0], [70.0, 70.0]])
        bounds = square_bounds(100.0)
        diagram = triangulate(sites, bounds)

        cells, dropped = build_cells(sites, diagram, bounds)

        assert [cell.id for cell in cells] == [0, 2]
        assert dropped == [1]
        assert build_neighbor_graph(cells, diagram) == 1
        assert set(cells[0].neighbors) == {2}
        assert set(cells[1].neighbors) == {0}

    def test_single_cell(self):
        tess = build_tessellation(1, 100.0, 0, SeededLCG("one"))
        assert len(tess.cells) == 1
        assert dict(tess.cells[0].neighbors) == {}
        assert Polygon(tess.cells[0].polygon).area == pytest.approx(10000.0)

    @pytest.mark.parametrize("cell_count,size,relaxation", [
        (0, 100.0, 0),
        (-3, 100.0, 0),
        (10, 0.0, 0),
        (10, -5.0, 0),
        (10, 100.0, -1),
    ])
    def test_invalid_parameters(self, monkeypatch, cell_count, size, relaxation):
        """Rejected before the geometry provider is touched."""
        def fail(*args, **kwargs):
            raise AssertionError("triangulate must not be called")

        monkeypatch.setattr(tessellation_module, "triangulate", fail)
        rng = SeededLCG("invalid")
        with pytest.raises(InvalidParameterError):
            build_tessellation(cell_count, size, relaxation, rng)
        assert rng.call_count == 0
