"""Shared fixtures for puzzle engine tests."""

import random
from typing import Callable, Dict, Optional, Tuple

import pytest
from PIL import Image

from puzzle_engine import PuzzleBoard, Settings, generate_headless_pieces

BoardFactory = Callable[..., PuzzleBoard]


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the cached instance."""
    return Settings()


@pytest.fixture
def board_factory(settings: Settings) -> BoardFactory:
    """Build headless boards with a seeded random source."""

    def make_board(
        rows: int,
        cols: int,
        board_width: float = 100.0,
        board_height: float = 100.0,
        seed: int = 42,
        board_settings: Optional[Settings] = None,
    ) -> PuzzleBoard:
        active = board_settings or settings
        pieces = generate_headless_pieces(rows, cols, board_width, board_height, active)
        return PuzzleBoard(pieces, rows, cols, board_width, board_height, rng=random.Random(seed), settings=active)

    return make_board


def _place(board: PuzzleBoard, positions: Dict[int, Tuple[float, float]]) -> None:
    for piece_id, position in positions.items():
        board.move_piece(piece_id, position)


def _spread_out(board: PuzzleBoard, spacing: float = 1000.0) -> None:
    _place(board, {p.id: (5000.0 + p.id * spacing, 5000.0 + p.id * spacing) for p in board.pieces})


@pytest.fixture
def place() -> Callable[[PuzzleBoard, Dict[int, Tuple[float, float]]], None]:
    """Move single pieces to absolute positions."""
    return _place


@pytest.fixture
def spread_out() -> Callable[..., None]:
    """Move every piece far from its neighbours so nothing snaps by accident."""
    return _spread_out


@pytest.fixture
def gradient_image() -> Image.Image:
    """A 400x300 RGB image where every pixel encodes its own coordinates."""
    img = Image.new("RGB", (400, 300))
    pixels = img.load()
    for y in range(300):
        for x in range(400):
            pixels[x, y] = (x % 256, y % 256, (x // 256) * 100)
    return img


@pytest.fixture
def solid_image() -> Image.Image:
    """A 400x300 solid red image."""
    return Image.new("RGB", (400, 300), (255, 0, 0))
