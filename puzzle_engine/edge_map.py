"""Connector map generation for a puzzle grid.

Every interior boundary between two cells is decided once by a single random
draw and both cells read their edge type from that same draw, so adjacent
pieces always get one TAB and one BLANK on the shared edge. Border edges are
always flat.
"""

import random
from dataclasses import dataclass
from typing import List, Optional

from .models import ConnectorType, PieceEdges

EdgeMap = List[List[PieceEdges]]


@dataclass
class EdgeOrientation:
    """The random draws that decide every interior edge of a grid.

    Attributes:
        rows: Number of piece rows.
        cols: Number of piece columns.
        column_boundaries: rows x (cols-1). ``column_boundaries[r][c]`` is the
            boundary between cells (r, c) and (r, c+1); True means the tab
            faces right (cell (r, c) has a TAB on its right edge).
        row_boundaries: (rows-1) x cols. ``row_boundaries[r][c]`` is the
            boundary between cells (r, c) and (r+1, c); True means the tab
            faces down (cell (r, c) has a TAB on its bottom edge).
    """

    rows: int
    cols: int
    column_boundaries: List[List[bool]]
    row_boundaries: List[List[bool]]


def _validate_grid(rows: int, cols: int) -> None:
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Grid must have at least one row and one column, got {rows}x{cols}")


def draw_edge_orientation(rows: int, cols: int, rng: Optional[random.Random] = None) -> EdgeOrientation:
    """Draw one boolean per interior boundary.

    Args:
        rows: Number of piece rows.
        cols: Number of piece columns.
        rng: Random source. A fresh unseeded generator is used if None.

    Returns:
        The drawn EdgeOrientation.

    Raises:
        ValueError: If rows or cols is not positive.
    """
    _validate_grid(rows, cols)
    if rng is None:
        rng = random.Random()

    column_boundaries = [[rng.random() > 0.5 for _c in range(cols - 1)] for _r in range(rows)]
    row_boundaries = [[rng.random() > 0.5 for _c in range(cols)] for _r in range(rows - 1)]

    return EdgeOrientation(
        rows=rows,
        cols=cols,
        column_boundaries=column_boundaries,
        row_boundaries=row_boundaries,
    )


def edges_from_orientation(orientation: EdgeOrientation) -> EdgeMap:
    """Derive the connector types of every cell from the boundary draws.

    Args:
        orientation: The boundary draws.

    Returns:
        Grid of PieceEdges indexed by [row][col].
    """
    rows, cols = orientation.rows, orientation.cols
    _validate_grid(rows, cols)
    h = orientation.column_boundaries
    v = orientation.row_boundaries

    edge_map: EdgeMap = []
    for row in range(rows):
        row_edges: List[PieceEdges] = []
        for col in range(cols):
            if row == 0:
                top = ConnectorType.FLAT
            else:
                top = ConnectorType.BLANK if v[row - 1][col] else ConnectorType.TAB

            if col == cols - 1:
                right = ConnectorType.FLAT
            else:
                right = ConnectorType.TAB if h[row][col] else ConnectorType.BLANK

            if row == rows - 1:
                bottom = ConnectorType.FLAT
            else:
                bottom = ConnectorType.TAB if v[row][col] else ConnectorType.BLANK

            if col == 0:
                left = ConnectorType.FLAT
            else:
                left = ConnectorType.BLANK if h[row][col - 1] else ConnectorType.TAB

            row_edges.append(PieceEdges(top=top, right=right, bottom=bottom, left=left))
        edge_map.append(row_edges)

    return edge_map


def generate_edge_map(rows: int, cols: int, rng: Optional[random.Random] = None) -> EdgeMap:
    """Generate a consistent connector assignment for every piece of a grid.

    Args:
        rows: Number of piece rows.
        cols: Number of piece columns.
        rng: Random source. Pass a seeded ``random.Random`` for reproducible maps.

    Returns:
        Grid of PieceEdges indexed by [row][col].
    """
    return edges_from_orientation(draw_edge_orientation(rows, cols, rng))
