"""Tests for board interaction: dragging, snapping, locking and completion."""

import logging

import pytest
from pydantic import ValidationError

from puzzle_engine import DisjointSet, PieceView, PuzzleBoard, Settings, generate_headless_pieces


class TestDisjointSet:
    def test_union_and_find(self) -> None:
        groups = DisjointSet(range(5))
        assert groups.union(0, 1)
        assert groups.union(1, 2)
        assert not groups.union(0, 2)
        assert groups.find(2) == groups.find(0)
        assert groups.find(3) != groups.find(0)

    def test_reset_dissolves_groups(self) -> None:
        groups = DisjointSet(range(3))
        groups.union(0, 1)
        groups.reset()
        assert groups.find(1) == 1


class TestConstruction:
    def test_snap_threshold_is_fraction_of_smaller_cell(self, board_factory) -> None:
        assert board_factory(1, 2, 200.0, 100.0).snap_threshold == pytest.approx(35.0)
        assert board_factory(2, 2, 100.0, 100.0).snap_threshold == pytest.approx(17.5)
        assert board_factory(3, 4, 200.0, 300.0).snap_threshold == pytest.approx(17.5)

    @pytest.mark.parametrize("rows,cols,width,height", [(0, 2, 100.0, 100.0), (2, 2, 0.0, 100.0)])
    def test_degenerate_board_rejected(self, settings: Settings, rows: int, cols: int, width: float, height: float) -> None:
        with pytest.raises(ValueError):
            PuzzleBoard([], rows, cols, width, height, settings=settings)

    def test_piece_count_must_match_grid(self, settings: Settings) -> None:
        pieces = generate_headless_pieces(2, 2, 100.0, 100.0, settings)
        with pytest.raises(ValueError, match="Expected 6 pieces"):
            PuzzleBoard(pieces, 2, 3, 100.0, 100.0, settings=settings)

    def test_piece_ids_must_be_unique(self, settings: Settings) -> None:
        pieces = generate_headless_pieces(1, 2, 200.0, 100.0, settings)
        pieces[1].id = 0
        with pytest.raises(ValueError, match="unique"):
            PuzzleBoard(pieces, 1, 2, 200.0, 100.0, settings=settings)

    def test_fresh_board_state(self, board_factory) -> None:
        board = board_factory(2, 2)
        assert board.moves == 0
        assert not board.is_completed
        assert [p.id for p in board.pieces] == [0, 1, 2, 3]


class TestNeighbourSnapping:
    """A released group joins adjacent pieces that sit where they belong relative to it."""

    def test_chain_then_anchor(self, board_factory, place) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        place(board, {0: (500.0, 500.0), 1: (610.0, 505.0)})

        assert board.try_snap_piece(1)
        assert board.get_piece(1).current_position == pytest.approx((600.0, 500.0))
        assert board.get_piece(0).current_position == pytest.approx((500.0, 500.0))
        assert board.get_group_piece_ids(0) == {0, 1}
        assert not any(p.is_locked for p in board.pieces)
        assert board.moves == 1

        # Dragging one member carries the whole group
        board.move_piece(0, (3.0, 4.0))
        assert board.get_piece(1).current_position == pytest.approx((103.0, 4.0))

        assert board.try_snap_piece(0)
        assert board.get_piece(0).current_position == (0.0, 0.0)
        assert board.get_piece(1).current_position == (100.0, 0.0)
        assert all(p.is_locked for p in board.pieces)
        assert board.is_completed
        assert board.moves == 2

    def test_snap_distance_is_inclusive(self, board_factory, place) -> None:
        board = board_factory(1, 2, 200.0, 100.0, board_settings=Settings(SNAP_THRESHOLD_RATIO=0.25))
        assert board.snap_threshold == 25.0
        place(board, {0: (500.0, 500.0), 1: (625.0, 500.0)})

        assert board.try_snap_piece(1)
        assert board.get_group_piece_ids(1) == {0, 1}

    def test_beyond_threshold_does_not_snap(self, board_factory, place) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        place(board, {0: (500.0, 500.0), 1: (640.0, 500.0)})

        assert not board.try_snap_piece(1)
        assert board.get_group_piece_ids(1) == {1}
        assert board.moves == 1

    def test_chain_reaction_pulls_in_further_neighbours(self, board_factory, place, spread_out) -> None:
        """Joining one neighbour can bring the group within reach of another."""
        board = board_factory(1, 3, 300.0, 100.0)
        spread_out(board)
        place(board, {0: (5000.0, 5000.0), 2: (5200.0, 5000.0), 1: (5110.0, 5005.0)})

        assert board.try_snap_piece(1)
        assert board.get_group_piece_ids(0) == {0, 1, 2}
        assert board.get_piece(1).current_position == pytest.approx((5100.0, 5000.0))
        assert board.get_piece(2).current_position == pytest.approx((5200.0, 5000.0))
        assert board.moves == 1

    def test_diagonal_pieces_do_not_snap(self, board_factory, place, spread_out) -> None:
        board = board_factory(2, 2)
        spread_out(board)
        place(board, {0: (1000.0, 1000.0), 3: (1050.0, 1050.0)})

        assert not board.try_snap_piece(3)
        assert board.get_group_piece_ids(3) == {3}


class TestLocking:
    """Groups near their correct position are pulled onto the board and frozen."""

    def test_single_piece_anchor(self, board_factory, spread_out) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        spread_out(board)
        board.move_piece(0, (10.0, -8.0))

        assert board.try_snap_piece(0)
        piece = board.get_piece(0)
        assert piece.is_locked
        assert piece.current_position == (0.0, 0.0)
        assert not board.is_completed

    def test_anchor_distance_is_strict(self, board_factory, spread_out) -> None:
        board = board_factory(1, 2, 200.0, 100.0, board_settings=Settings(SNAP_THRESHOLD_RATIO=0.25))
        spread_out(board)
        board.move_piece(0, (25.0, 0.0))

        assert not board.try_snap_piece(0)
        assert not board.get_piece(0).is_locked

    def test_locked_piece_ignores_further_manipulation(self, board_factory, spread_out) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        spread_out(board)
        board.move_piece(0, (1.0, 1.0))
        board.try_snap_piece(0)
        moves = board.moves

        board.move_piece(0, (300.0, 300.0))
        assert not board.try_snap_piece(0)
        assert board.get_piece(0).current_position == (0.0, 0.0)
        assert board.moves == moves

    def test_snapping_to_a_locked_neighbour_locks_the_group(self, board_factory, spread_out) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        spread_out(board)
        board.move_piece(0, (0.0, 0.0))
        board.try_snap_piece(0)

        board.move_piece(1, (120.0, 10.0))
        assert board.try_snap_piece(1)
        assert all(p.is_locked for p in board.pieces)
        assert board.is_completed

    def test_full_completion_counts_every_release(self, board_factory, spread_out) -> None:
        board = board_factory(2, 2)
        spread_out(board)

        for piece in board.pieces:
            assert not board.is_completed
            board.move_piece(piece.id, piece.correct_position)
            assert board.try_snap_piece(piece.id)

        assert board.is_completed
        assert board.moves == 4
        assert all(p.is_locked for p in board.pieces)

    def test_completion_is_logged(self, board_factory, place, spread_out, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="puzzle_engine.board")
        board = board_factory(1, 2, 200.0, 100.0)
        spread_out(board)
        place(board, {0: (0.0, 0.0)})
        board.try_snap_piece(0)
        place(board, {1: (100.0, 0.0)})
        board.try_snap_piece(1)

        assert board.is_completed
        assert "Puzzle completed after 2 moves" in caplog.text


class TestCompletion:
    def test_check_completion_follows_positions(self, board_factory, spread_out) -> None:
        """check_completion is a query on the current layout and never sticks."""
        board = board_factory(2, 2)
        assert board.check_completion()
        assert not board.is_completed

        spread_out(board)
        assert not board.check_completion()

        board.move_piece(3, (50.0, 50.0))
        board.try_snap_piece(3)
        assert not board.is_completed

    def test_completion_through_play_stays_until_reset(self, board_factory, spread_out) -> None:
        board = board_factory(2, 2)
        spread_out(board)
        for piece in board.pieces:
            board.move_piece(piece.id, piece.correct_position)
            board.try_snap_piece(piece.id)
        assert board.is_completed
        moves = board.moves

        for piece_id in (0, 1, 2, 3):
            board.move_piece(piece_id, (900.0, 900.0))
            assert not board.try_snap_piece(piece_id)
        assert board.check_completion()
        assert board.is_completed
        assert board.moves == moves

        board.reset_pieces(400.0, 300.0)
        assert not board.is_completed

    def test_tolerance_applies_without_locking(self, board_factory, place) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        place(board, {1: (100.5, 0.0)})
        assert board.check_completion()
        place(board, {1: (101.5, 0.0)})
        assert not board.check_completion()

    def test_mark_as_completed(self, board_factory, spread_out) -> None:
        board = board_factory(2, 2)
        spread_out(board)

        board.mark_as_completed()

        assert board.is_completed
        for piece in board.pieces:
            assert piece.is_locked
            assert piece.current_position == piece.correct_position


class TestShuffle:
    def test_pieces_stay_inside_the_margin(self, board_factory) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        board.shuffle(400.0, 300.0)
        for piece in board.pieces:
            x, y = piece.current_position
            assert 20.0 <= x <= 244.0
            assert 20.0 <= y <= 144.0

    def test_locked_pieces_are_not_shuffled(self, board_factory, spread_out) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        spread_out(board)
        board.move_piece(0, (2.0, 2.0))
        board.try_snap_piece(0)

        board.shuffle(400.0, 300.0)

        assert board.get_piece(0).current_position == (0.0, 0.0)
        assert 20.0 <= board.get_piece(1).x <= 244.0

    def test_small_area_collapses_to_margin(self, board_factory) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        board.shuffle(100.0, 100.0)
        assert all(p.current_position == (20.0, 20.0) for p in board.pieces)

    def test_same_seed_same_layout(self, board_factory) -> None:
        first = board_factory(2, 2, seed=7)
        second = board_factory(2, 2, seed=7)
        first.shuffle(500.0, 500.0)
        second.shuffle(500.0, 500.0)
        assert [p.current_position for p in first.pieces] == [p.current_position for p in second.pieces]

    def test_reset_pieces_starts_over(self, board_factory) -> None:
        board = board_factory(2, 2)
        board.mark_as_completed()
        board.set_moves(9)

        board.reset_pieces(400.0, 300.0)

        assert board.moves == 0
        assert not board.is_completed
        for piece in board.pieces:
            assert not piece.is_locked
            assert board.get_group_piece_ids(piece.id) == {piece.id}
            assert 20.0 <= piece.x <= 400.0 - piece.width - 20.0


class TestPaintOrderAndHitTesting:
    def test_topmost_piece_wins(self, board_factory, place) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        place(board, {0: (100.0, 100.0), 1: (150.0, 100.0)})

        assert board.get_piece_at((200.0, 150.0)).id == 1
        board.bring_to_front(0)
        assert board.get_piece_at((200.0, 150.0)).id == 0

    def test_hit_test_bounds(self, board_factory, place) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        place(board, {0: (100.0, 100.0), 1: (150.0, 100.0)})

        assert board.get_piece_at((100.0, 100.0)).id == 0
        assert board.get_piece_at((286.0, 236.0)).id == 1
        assert board.get_piece_at((0.0, 0.0)) is None

    def test_group_is_raised_together(self, board_factory, place, spread_out) -> None:
        board = board_factory(1, 3, 300.0, 100.0)
        spread_out(board)
        place(board, {1: (5100.0, 5000.0)})
        board.try_snap_piece(1)

        order = board.bring_to_front(1)

        assert [p.id for p in order] == [2, 0, 1]
        assert [p.id for p in board.pieces] == [2, 0, 1]


class TestReadOnlyViews:
    """Callers only ever see frozen copies of the pieces."""

    def test_hit_test_returns_a_frozen_view(self, board_factory, spread_out) -> None:
        board = board_factory(2, 2)
        spread_out(board)

        hit = board.get_piece_at((5001.0, 5001.0))

        assert isinstance(hit, PieceView)
        with pytest.raises(ValidationError):
            hit.x = 0.0
        assert board.get_piece(0).current_position == (5000.0, 5000.0)

    def test_pieces_cannot_change_board_state(self, board_factory, spread_out) -> None:
        board = board_factory(2, 2)
        spread_out(board)

        with pytest.raises(ValidationError):
            board.pieces[0].is_locked = True
        assert not board.get_piece(0).is_locked

    def test_views_are_copies(self, board_factory, place) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        before = board.get_piece(0)

        place(board, {0: (300.0, 300.0)})

        assert before.current_position == (0.0, 0.0)
        assert board.get_piece(0).current_position == (300.0, 300.0)
        assert board.get_piece(99) is None

    def test_headless_pieces_have_no_image(self, board_factory) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        assert board.piece_image(0) is None
        assert board.piece_image(99) is None


class TestUnknownIds:
    def test_unknown_ids_are_ignored(self, board_factory) -> None:
        board = board_factory(2, 2)
        before = [p.current_position for p in board.pieces]

        board.move_piece(99, (0.0, 0.0))
        assert not board.try_snap_piece(99)
        assert [p.id for p in board.bring_to_front(99)] == [0, 1, 2, 3]

        assert board.get_group_piece_ids(99) == set()
        assert board.moves == 0
        assert [p.current_position for p in board.pieces] == before


class TestProgressAndSnapshots:
    def test_set_moves(self, board_factory) -> None:
        board = board_factory(2, 2)
        board.set_moves(7)
        assert board.moves == 7
        with pytest.raises(ValueError):
            board.set_moves(-1)

    def test_embed_at_translates_once(self, board_factory) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        board.embed_at(10.0, 20.0)

        assert [p.correct_position for p in board.pieces] == [(10.0, 20.0), (110.0, 20.0)]
        assert [p.current_position for p in board.pieces] == [(10.0, 20.0), (110.0, 20.0)]
        with pytest.raises(RuntimeError):
            board.embed_at(1.0, 1.0)

    def test_embed_at_refused_after_play_starts(self, board_factory) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        board.try_snap_piece(0)
        with pytest.raises(RuntimeError):
            board.embed_at(10.0, 20.0)

    def test_snapshot_is_an_immutable_copy(self, board_factory, place) -> None:
        board = board_factory(1, 2, 200.0, 100.0)
        snapshot = board.snapshot()

        place(board, {0: (300.0, 300.0)})

        assert (snapshot.pieces[0].x, snapshot.pieces[0].y) == (0.0, 0.0)
        assert snapshot.pieces[0].width == pytest.approx(136.0)
        with pytest.raises(ValidationError):
            snapshot.moves = 5
