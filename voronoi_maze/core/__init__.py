"""
Core maze generation functionality.
"""

from .exceptions import (
    MazeError, InvalidParameterError, DegenerateTessellationError, GeometryError
)
from .lcg_prng import SeededLCG
from .geometry import BoundedVoronoi, triangulate, compute_polygon_centroid
from .tessellation import Cell, Tessellation, build_tessellation, get_shared_edge
from .maze_carver import DisjointSet, carve_maze, passage_key
from .endpoints import select_endpoints
from .solver import find_path, build_solution_polyline, polyline_progress
from .maze_state import (
    MazeConfig, MazeState, MazeSolution, MazeSession,
    generate_maze, solve_maze, validate_generation_params
)

__all__ = ['MazeError', 'InvalidParameterError', 'DegenerateTessellationError', 'GeometryError',
           'SeededLCG', 'BoundedVoronoi', 'triangulate', 'compute_polygon_centroid',
           'Cell', 'Tessellation', 'build_tessellation', 'get_shared_edge',
           'DisjointSet', 'carve_maze', 'passage_key', 'select_endpoints',
           'find_path', 'build_solution_polyline', 'polyline_progress',
           'MazeConfig', 'MazeState', 'MazeSolution', 'MazeSession',
           'generate_maze', 'solve_maze', 'validate_generation_params']
