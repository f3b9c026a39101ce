"""Data models for puzzle pieces and their edges."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np
from PIL import Image

Point = Tuple[float, float]


@dataclass
class BezierCurve:
    """A cubic Bezier curve defined by 4 control points."""

    p0: Point  # Start point
    p1: Point  # Control point 1
    p2: Point  # Control point 2
    p3: Point  # End point

    def evaluate(self, t: float) -> Point:
        """Evaluate the curve at parameter t (0 to 1)."""
        t2 = t * t
        t3 = t2 * t
        mt = 1 - t
        mt2 = mt * mt
        mt3 = mt2 * mt

        x = mt3 * self.p0[0] + 3 * mt2 * t * self.p1[0] + 3 * mt * t2 * self.p2[0] + t3 * self.p3[0]
        y = mt3 * self.p0[1] + 3 * mt2 * t * self.p1[1] + 3 * mt * t2 * self.p2[1] + t3 * self.p3[1]
        return (x, y)

    def get_points(self, num_points: int = 50) -> np.ndarray:
        """Generate points along the curve."""
        t_values = np.linspace(0, 1, num_points)
        points = [self.evaluate(t) for t in t_values]
        return np.array(points)

    def reversed(self) -> "BezierCurve":
        """Return the same curve traversed from p3 to p0."""
        return BezierCurve(p0=self.p3, p1=self.p2, p2=self.p1, p3=self.p0)


class ConnectorType(Enum):
    """Shape of one piece edge."""

    TAB = "tab"
    BLANK = "blank"
    FLAT = "flat"

    def opposite(self) -> "ConnectorType":
        """Get the connector the neighbouring piece needs to interlock."""
        if self is ConnectorType.TAB:
            return ConnectorType.BLANK
        if self is ConnectorType.BLANK:
            return ConnectorType.TAB
        return ConnectorType.FLAT


@dataclass(frozen=True)
class PieceEdges:
    """Connector types of the four edges of one grid cell."""

    top: ConnectorType
    right: ConnectorType
    bottom: ConnectorType
    left: ConnectorType

    def as_tuple(self) -> Tuple[ConnectorType, ConnectorType, ConnectorType, ConnectorType]:
        """Edges in contour order (top, right, bottom, left)."""
        return (self.top, self.right, self.bottom, self.left)


@dataclass
class Piece:
    """A single puzzle piece.

    ``correct_position`` and ``current_position`` are the board coordinates of
    the top-left corner of the piece bounding box, which includes the tab
    margin on every side.
    """

    id: int
    row: int
    col: int
    width: float
    height: float
    correct_position: Point
    current_position: Point
    image: Optional[Image.Image] = field(default=None, repr=False, compare=False)
    is_locked: bool = False

    def distance_to_correct(self) -> float:
        """Euclidean distance between the current and correct positions."""
        dx = self.current_position[0] - self.correct_position[0]
        dy = self.current_position[1] - self.correct_position[1]
        return math.hypot(dx, dy)

    def is_at_correct_position(self, threshold: float) -> bool:
        """Check whether the piece lies strictly within threshold of where it belongs."""
        return self.distance_to_correct() < threshold

    def contains(self, point: Point) -> bool:
        """Check whether a point lies inside the piece bounding box (edges inclusive)."""
        dx = point[0] - self.current_position[0]
        dy = point[1] - self.current_position[1]
        return 0.0 <= dx <= self.width and 0.0 <= dy <= self.height


@dataclass(frozen=True)
class PuzzleSize:
    """An allowed puzzle size: piece count and its fixed grid."""

    piece_count: int
    columns: int
    rows: int

    @classmethod
    def for_piece_count(cls, count: int) -> "PuzzleSize":
        """Look up the grid for a piece count.

        Args:
            count: One of the supported piece counts.

        Returns:
            The matching PuzzleSize.

        Raises:
            ValueError: If the piece count is not supported.
        """
        for size in PUZZLE_SIZES:
            if size.piece_count == count:
                return size
        supported = ", ".join(str(s.piece_count) for s in PUZZLE_SIZES)
        raise ValueError(f"Unsupported piece count {count}; expected one of {supported}")


PUZZLE_SIZES: Tuple[PuzzleSize, ...] = (
    PuzzleSize(12, 4, 3),
    PuzzleSize(24, 6, 4),
    PuzzleSize(36, 6, 6),
    PuzzleSize(48, 8, 6),
    PuzzleSize(60, 10, 6),
    PuzzleSize(80, 10, 8),
    PuzzleSize(100, 10, 10),
)
