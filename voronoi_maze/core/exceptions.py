"""Errors raised by maze generation."""


class MazeError(Exception):
    """Base class for maze generation errors."""


class InvalidParameterError(MazeError, ValueError):
    """Generation parameters are out of range; nothing was built."""


class DegenerateTessellationError(InvalidParameterError):
    """Too few cells survived tessellation to place a start and an end."""

    def __init__(self, cell_count: int, dropped: int):
        super().__init__(
            f"Tessellation produced {cell_count} usable cell(s) "
            f"({dropped} degenerate site(s) dropped); at least 2 are required"
        )
        self.cell_count = cell_count
        self.dropped = dropped


class GeometryError(MazeError):
    """The Voronoi backend could not process the site set."""
