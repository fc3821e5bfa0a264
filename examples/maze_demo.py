#!/usr/bin/env python3
"""
Demonstration of maze generation and solving.

Generates a maze, solves it, and shows how a session swaps mazes:
1. Generation builds a perfect maze with farthest-apart endpoints
2. The solution crosses walls through passage midpoints
3. Seeded generation is reproducible
4. Regeneration discards the previous solution
"""

import argparse

from voronoi_maze.config import settings
from voronoi_maze.core import MazeConfig, MazeSession, generate_maze, validate_generation_params
from voronoi_maze.logging_config import configure_logging


def main():
    parser = argparse.ArgumentParser(description="Generate and solve a Voronoi maze")
    parser.add_argument("--cells", type=int, default=settings.default_cell_count)
    parser.add_argument("--size", type=float, default=settings.default_size)
    parser.add_argument("--relaxation", type=int, default=settings.default_relaxation)
    parser.add_argument("--seed", default=settings.default_seed or "demo_seed")
    args = parser.parse_args()

    configure_logging(settings.log_level, settings.log_format)

    config = validate_generation_params(cell_count=args.cells, size=args.size,
                                        relaxation=args.relaxation, seed=args.seed)

    print("=== Voronoi Maze Demo ===\n")

    # 1. Generate
    session = MazeSession(config)
    state = session.regenerate()
    print("1. Generated maze")
    print(f"   - Cells: {len(state.cells)} (dropped: {len(state.dropped)})")
    print(f"   - Adjacency edges: {state.edge_count()}")
    print(f"   - Passages: {len(state.passages)}, walls: {len(state.walls())}")
    print(f"   - Perfect maze: {state.is_perfect()}")
    print(f"   - Start cell {state.start.id} at {state.start.site}")
    print(f"   - End cell {state.end.id} at {state.end.site}")

    # 2. Solve
    solution = session.solve()
    print("\n2. Solution")
    print(f"   - Path length: {len(solution.path)} cells")
    print(f"   - Route: {solution.cell_ids()[:10]}{' ...' if len(solution.path) > 10 else ''}")
    print(f"   - Polyline points: {len(solution.polyline)}")
    print(f"   - Drawn after 3 steps: {len(solution.progress(3))} points")

    # 3. Reproducibility
    again = generate_maze(config)
    print("\n3. Reproducibility")
    print(f"   - Same passages for seed '{config.seed}': {again.passages == state.passages}")

    # 4. Regeneration replaces the maze and its solution
    session.regenerate(MazeConfig(cell_count=config.cell_count, size=config.size,
                                  relaxation=config.relaxation, seed=f"{config.seed}-next"))
    print("\n4. Regeneration")
    print(f"   - Generation: {session.generation}")
    print(f"   - Previous solution discarded: {session.solution is None}")


if __name__ == "__main__":
    main()
