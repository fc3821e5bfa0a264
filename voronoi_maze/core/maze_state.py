"""
Maze generation pipeline and session state.

A generation runs RNG -> tessellation -> carving -> endpoint selection and
produces one immutable MazeState. Sessions swap states wholesale: a new
state replaces the old one only once it is completely built, and a solution
is only ever reported against the state it was computed from.
"""

import time
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..config import Settings, settings
from .endpoints import select_endpoints
from .exceptions import DegenerateTessellationError, InvalidParameterError
from .lcg_prng import SeededLCG
from .maze_carver import DisjointSet, Passage, carve_maze, passage_key
from .solver import build_solution_polyline, find_path, polyline_progress
from .tessellation import Cell, Edge, Point, build_tessellation

logger = structlog.get_logger()


class MazeConfig(BaseModel):
    """Maze generation parameters."""

    cell_count: int = Field(default=200, ge=2, description="Number of sites to draw")
    size: float = Field(default=600.0, gt=0, description="Side length of the square domain")
    relaxation: int = Field(default=2, ge=0, description="Lloyd relaxation iterations")
    seed: Optional[str] = Field(default=None, description="Seed string; empty for a random maze")

    @field_validator("seed")
    @classmethod
    def _blank_seed_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "MazeConfig":
        """Build the default configuration from application settings."""
        return validate_generation_params(
            cell_count=app_settings.default_cell_count,
            size=app_settings.default_size,
            relaxation=app_settings.default_relaxation,
            seed=app_settings.default_seed,
        )


def validate_generation_params(**params: Any) -> MazeConfig:
    """
    Validate raw generation parameters.

    Raises:
        InvalidParameterError: If any parameter violates its constraints
    """
    try:
        return MazeConfig(**params)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidParameterError(f"Invalid generation parameters: {problems}") from exc


@dataclass(frozen=True, eq=False)
class MazeState:
    """One fully built maze. Treat every field as a read-only snapshot."""
    config: MazeConfig
    sites: np.ndarray
    cells: Tuple[Cell, ...]
    passages: FrozenSet[Passage]
    start: Cell
    end: Cell
    dropped: Tuple[int, ...] = ()

    @cached_property
    def cell_map(self) -> Dict[int, Cell]:
        return {cell.id: cell for cell in self.cells}

    def cell(self, cell_id: int) -> Cell:
        """Look up a cell by id; raises KeyError for dropped or unknown ids."""
        return self.cell_map[cell_id]

    def has_passage(self, cell_a: int, cell_b: int) -> bool:
        return passage_key(cell_a, cell_b) in self.passages

    def edge_count(self) -> int:
        """Number of undirected adjacency edges."""
        return sum(len(cell.neighbors) for cell in self.cells) // 2

    def walls(self) -> List[Tuple[Passage, Edge]]:
        """Shared edges that stay closed, keyed by cell pair, in id order."""
        walls = []
        for cell in self.cells:
            for neighbor_id in sorted(cell.neighbors):
                if cell.id < neighbor_id and not self.has_passage(cell.id, neighbor_id):
                    walls.append(((cell.id, neighbor_id), cell.neighbors[neighbor_id]))
        return walls

    def is_perfect(self) -> bool:
        """True if the passages form a single spanning tree over all cells."""
        components = DisjointSet(cell.id for cell in self.cells)
        for cell_a, cell_b in self.passages:
            if not components.union(cell_a, cell_b):
                return False  # cycle
        return components.component_count == 1


@dataclass(frozen=True)
class MazeSolution:
    """Route from start to end, plus the polyline a renderer draws for it."""
    path: Tuple[Cell, ...]
    polyline: Tuple[Point, ...]

    @property
    def solved(self) -> bool:
        """False when the end was unreachable."""
        return bool(self.path)

    def cell_ids(self) -> List[int]:
        return [cell.id for cell in self.path]

    def progress(self, step: int) -> List[Point]:
        """Polyline drawn so far after ``step`` animation steps."""
        return polyline_progress(self.polyline, step)


def generate_maze(config: MazeConfig) -> MazeState:
    """
    Generate a complete maze.

    Args:
        config: Validated generation parameters

    Returns:
        New MazeState

    Raises:
        DegenerateTessellationError: If fewer than 2 cells survive
    """
    started = time.perf_counter()
    rng = SeededLCG(config.seed)

    logger.info("Generating maze", cell_count=config.cell_count, size=config.size,
                relaxation=config.relaxation, seed=config.seed,
                deterministic=rng.is_deterministic)

    tessellation = build_tessellation(config.cell_count, config.size,
                                      config.relaxation, rng)
    if len(tessellation.cells) < 2:
        raise DegenerateTessellationError(len(tessellation.cells),
                                          len(tessellation.dropped))

    passages = carve_maze(tessellation.cells, rng)
    start, end = select_endpoints(tessellation.cells)

    state = MazeState(
        config=config,
        sites=tessellation.sites,
        cells=tuple(tessellation.cells),
        passages=passages,
        start=start,
        end=end,
        dropped=tuple(tessellation.dropped),
    )

    logger.info("Maze generated", cells=len(state.cells), passages=len(passages),
                start=start.id, end=end.id, rng_draws=rng.call_count,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 1))
    return state


def solve_maze(state: MazeState) -> MazeSolution:
    """Solve a maze from its start cell to its end cell."""
    path = find_path(state.start, state.end, state.cells, state.passages)
    solution = MazeSolution(path=tuple(path),
                            polyline=tuple(build_solution_polyline(path)))
    logger.info("Maze solved", solved=solution.solved, length=len(path))
    return solution


class MazeSession:
    """
    Holds the current maze and its solution.

    ``regenerate`` builds a complete new state before swapping it in, so the
    previous maze stays queryable until then (and remains in place if the new
    generation fails). Any solution of the previous maze is discarded.
    """

    def __init__(self, config: Optional[MazeConfig] = None):
        self.config = config or MazeConfig.from_settings(settings)
        self.generation = 0
        self._state: Optional[MazeState] = None
        self._solution: Optional[MazeSolution] = None
        self._solution_generation: Optional[int] = None

    @property
    def state(self) -> Optional[MazeState]:
        return self._state

    @property
    def solution(self) -> Optional[MazeSolution]:
        """Solution of the current maze, or None if not solved since the last swap."""
        if self._solution_generation != self.generation:
            return None
        return self._solution

    def regenerate(self, config: Optional[MazeConfig] = None) -> MazeState:
        """Generate a new maze and make it current."""
        config = config or self.config
        state = generate_maze(config)

        self.config = config
        self._state = state
        self.generation += 1
        self.clear_solution()
        return state

    def solve(self) -> MazeSolution:
        """
        Solve the current maze.

        Raises:
            RuntimeError: If no maze has been generated yet
        """
        if self._state is None:
            raise RuntimeError("No maze generated; call regenerate() first")

        self._solution = solve_maze(self._state)
        self._solution_generation = self.generation
        return self._solution

    def clear_solution(self) -> None:
        self._solution = None
        self._solution_generation = None
