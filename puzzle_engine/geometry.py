"""Geometric logic for generating puzzle piece outlines."""

from typing import List, Sequence, Tuple

import numpy as np

from .models import BezierCurve, ConnectorType, PieceEdges, Point

# Magic number for quarter-circle approximation with a cubic Bezier
KAPPA = 0.5522847498

# Tab profile, all values relative to tab_size.
# Half-width of the neck where it leaves the straight edge
NECK_BASE_HALF_WIDTH = 0.5
# Lateral position of the first neck control point; pulls the waist in
NECK_PINCH = 0.1
# Height of the first neck control point
NECK_CONTROL_HEIGHT = 0.15
# How far below the head equator the second neck control point sits
NECK_RISE = 0.3
# Radius of the round head; must exceed the narrowest neck half-width
HEAD_RADIUS = 0.4
# Distance from the straight edge to the head apex
TAB_HEIGHT = 1.0


def connector_edge_curves(
    start: Point,
    end: Point,
    tab_size: float,
    connector: ConnectorType,
) -> List[BezierCurve]:
    """Generate the curves of one piece edge.

    The outline is traversed clockwise on screen (y grows downwards), so the
    piece's outward normal is the edge direction rotated by -90 degrees. A TAB
    bulges along the outward normal, a BLANK is recessed along the inward one.
    The profile is symmetric about the edge midpoint, which makes a TAB and
    the BLANK of the neighbouring piece (traversed in the opposite direction)
    trace exactly the same curve.

    Args:
        start: Start corner of the edge.
        end: End corner of the edge.
        tab_size: Height of the tab/blank feature.
        connector: Edge type.

    Returns:
        List of BezierCurve objects from start to end.

    Raises:
        ValueError: If the edge is too short for a tab of this size.
    """
    if connector is ConnectorType.FLAT:
        # Straight line as a single Bezier curve (control points on the line)
        return [BezierCurve(start, start, end, end)]

    p_start = np.array(start, dtype=float)
    p_end = np.array(end, dtype=float)
    edge_vec = p_end - p_start
    edge_length = float(np.linalg.norm(edge_vec))
    if edge_length < 2 * NECK_BASE_HALF_WIDTH * tab_size:
        raise ValueError(f"Edge of length {edge_length:.2f} is too short for tab size {tab_size:.2f}")

    edge_unit = edge_vec / edge_length
    outward = np.array([edge_unit[1], -edge_unit[0]])
    normal = outward if connector is ConnectorType.TAB else -outward
    center = (p_start + p_end) * 0.5

    def at(along: float, height: float) -> Point:
        p = center + edge_unit * along * tab_size + normal * height * tab_size
        return (float(p[0]), float(p[1]))

    neck_base = NECK_BASE_HALF_WIDTH
    r = HEAD_RADIUS
    head_center = TAB_HEIGHT - HEAD_RADIUS
    equator_control = head_center - NECK_RISE

    return [
        # Flat shoulder up to the neck
        BezierCurve(start, start, at(-neck_base, 0.0), at(-neck_base, 0.0)),
        # Neck narrows, then opens out to the head equator
        BezierCurve(
            at(-neck_base, 0.0),
            at(-NECK_PINCH, NECK_CONTROL_HEIGHT),
            at(-r, equator_control),
            at(-r, head_center),
        ),
        # Head: equator -> apex -> equator as two quarter arcs
        BezierCurve(
            at(-r, head_center),
            at(-r, head_center + r * KAPPA),
            at(-r * KAPPA, TAB_HEIGHT),
            at(0.0, TAB_HEIGHT),
        ),
        BezierCurve(
            at(0.0, TAB_HEIGHT),
            at(r * KAPPA, TAB_HEIGHT),
            at(r, head_center + r * KAPPA),
            at(r, head_center),
        ),
        BezierCurve(
            at(r, head_center),
            at(r, equator_control),
            at(NECK_PINCH, NECK_CONTROL_HEIGHT),
            at(neck_base, 0.0),
        ),
        BezierCurve(at(neck_base, 0.0), at(neck_base, 0.0), end, end),
    ]


def synthesize_outline(
    piece_width: float,
    piece_height: float,
    tab_size: float,
    edges: PieceEdges,
) -> List[BezierCurve]:
    """Build the closed outline of a piece.

    The nominal cell rectangle is offset by ``tab_size`` on both axes so that
    the bounding box ``(piece_width + 2 * tab_size, piece_height + 2 * tab_size)``
    has room for tabs on every side.

    Args:
        piece_width: Width of the grid cell.
        piece_height: Height of the grid cell.
        tab_size: Tab margin.
        edges: Connector types of the four edges.

    Returns:
        Curves in traversal order top -> right -> bottom -> left. The last
        curve ends where the first one starts.
    """
    if piece_width <= 0 or piece_height <= 0:
        raise ValueError(f"Piece size must be positive, got {piece_width}x{piece_height}")
    if tab_size < 0:
        raise ValueError(f"Tab size must not be negative, got {tab_size}")

    ox = oy = tab_size
    top_left = (ox, oy)
    top_right = (ox + piece_width, oy)
    bottom_right = (ox + piece_width, oy + piece_height)
    bottom_left = (ox, oy + piece_height)

    sides = [
        (top_left, top_right, edges.top),
        (top_right, bottom_right, edges.right),
        (bottom_right, bottom_left, edges.bottom),
        (bottom_left, top_left, edges.left),
    ]

    curves: List[BezierCurve] = []
    for start, end, connector in sides:
        curves.extend(connector_edge_curves(start, end, tab_size, connector))
    return curves


def outline_polygon(
    curves: Sequence[BezierCurve],
    points_per_curve: int = 20,
    offset: Point = (0.0, 0.0),
) -> List[Point]:
    """Sample an outline into a closed polygon.

    Args:
        curves: Outline curves.
        points_per_curve: Number of points to sample from each Bezier curve.
        offset: Translation added to every point.

    Returns:
        List of (x, y) points; the first point is repeated at the end.
    """
    polygon: List[Point] = []
    for curve in curves:
        points = curve.get_points(points_per_curve)
        for x, y in points[:-1]:  # Skip last to avoid duplication
            polygon.append((float(x) + offset[0], float(y) + offset[1]))

    if polygon:
        polygon.append(polygon[0])
    return polygon


def outline_bounds(
    curves: Sequence[BezierCurve],
    points_per_curve: int = 20,
) -> Tuple[float, float, float, float]:
    """Bounding box (x_min, y_min, x_max, y_max) of a sampled outline."""
    polygon = outline_polygon(curves, points_per_curve)
    if not polygon:
        return (0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in polygon]
    ys = [p[1] for p in polygon]
    return (min(xs), min(ys), max(xs), max(ys))
