"""Start and end cell selection."""

from typing import Sequence, Tuple

import numpy as np
import structlog
from scipy.spatial.distance import pdist

from .exceptions import InvalidParameterError
from .tessellation import Cell

logger = structlog.get_logger()


def condensed_to_pair(index: int, n: int) -> Tuple[int, int]:
    """
    Decode a condensed distance-matrix index into its (i, j) pair, i < j.

    Row i holds n - 1 - i entries; only the n - 1 row end offsets are built.
    """
    row_ends = np.cumsum(np.arange(n - 1, 0, -1))
    i = int(np.searchsorted(row_ends, index, side="right"))
    row_start = int(row_ends[i]) - (n - 1 - i)
    return i, i + 1 + (index - row_start)


def select_endpoints(cells: Sequence[Cell]) -> Tuple[Cell, Cell]:
    """
    Pick the two cells whose sites are farthest apart.

    Squared distances are compared; on ties the first pair in (i, j), i < j
    enumeration order wins. A single cell is both start and end.

    Args:
        cells: Cells in enumeration order

    Returns:
        (start, end)

    Raises:
        InvalidParameterError: If there are no cells
    """
    if not cells:
        raise InvalidParameterError("Cannot select endpoints from an empty cell set")
    if len(cells) == 1:
        return cells[0], cells[0]

    sites = np.array([cell.site for cell in cells], dtype=float)

    # Condensed distances are ordered (0,1), (0,2), ..., (1,2), ... and
    # argmax returns the first maximum
    distances = pdist(sites, "sqeuclidean")
    best = int(np.argmax(distances))
    i, j = condensed_to_pair(best, len(cells))

    start, end = cells[i], cells[j]
    logger.debug("Endpoints selected", start=start.id, end=end.id,
                 distance_sq=float(distances[best]))
    return start, end
