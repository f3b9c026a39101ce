"""Puzzle engine - piece generation and board interaction for jigsaw puzzles.

This package cuts a source image into interlocking pieces with randomized
tab/blank connectors and tracks a play session on the board: dragging,
snapping pieces together into groups, locking groups onto the board and
detecting completion.
"""

from .board import DisjointSet, PuzzleBoard
from .config import Settings, get_settings
from .edge_map import EdgeOrientation, draw_edge_orientation, edges_from_orientation, generate_edge_map
from .generator import BoardLayout, PieceGenerator, generate_headless_pieces, make_layout
from .geometry import connector_edge_curves, outline_bounds, outline_polygon, synthesize_outline
from .image_masking import SourceRect, create_piece_mask, extract_piece, map_source_rect, piece_image_size
from .logging_utils import configure_logging
from .models import PUZZLE_SIZES, BezierCurve, ConnectorType, Piece, PieceEdges, PuzzleSize
from .schemas import BoardSnapshot, PieceView, PuzzleProgress, PuzzleStatus
from .session import PuzzleSession, format_time

__all__ = [
    # Models
    "BezierCurve",
    "ConnectorType",
    "PieceEdges",
    "Piece",
    "PuzzleSize",
    "PUZZLE_SIZES",
    # Connector map
    "EdgeOrientation",
    "draw_edge_orientation",
    "edges_from_orientation",
    "generate_edge_map",
    # Geometry
    "connector_edge_curves",
    "synthesize_outline",
    "outline_polygon",
    "outline_bounds",
    # Image masking
    "SourceRect",
    "map_source_rect",
    "piece_image_size",
    "create_piece_mask",
    "extract_piece",
    # Generation
    "BoardLayout",
    "make_layout",
    "PieceGenerator",
    "generate_headless_pieces",
    # Board and session
    "DisjointSet",
    "PuzzleBoard",
    "PuzzleSession",
    "format_time",
    # Snapshots
    "PieceView",
    "BoardSnapshot",
    "PuzzleProgress",
    "PuzzleStatus",
    # Config
    "Settings",
    "get_settings",
    "configure_logging",
]
