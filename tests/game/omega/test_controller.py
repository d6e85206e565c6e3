"""Tests for GameController: move application, check detection, undo/redo."""

from __future__ import annotations

import random
from typing import Any

import pytest

from omega_chess.config import STRICT_CONFIG
from omega_chess.game.attacks import is_king_in_check
from omega_chess.game.board import Board, Piece
from omega_chess.game.controller import GameController, GameEvent
from omega_chess.game.moves import Move, MoveRejection, pattern_moves_from
from omega_chess.game.types import Color, GameStatus, PieceKind, Player

# 4 plies that are accepted from the initial position
OPENING = [
    ((9, 5), (7, 5)),
    ((2, 5), (4, 5)),
    ((10, 3), (8, 4)),
    ((1, 3), (3, 4)),
]


def _make_board(pieces: list[tuple[int, int, PieceKind, Color]]) -> Board:
    board = Board()
    for row, col, kind, color in pieces:
        board.set_piece_at(row, col, Piece(color, kind))
    return board


def _snapshot(controller: GameController) -> tuple[Board, Player, GameStatus, int]:
    return controller.board, controller.side_to_move, controller.status, controller.cursor


def _record(controller: GameController) -> list[tuple[GameEvent, Any]]:
    events: list[tuple[GameEvent, Any]] = []
    controller.subscribe(lambda event, payload: events.append((event, payload)))
    return events


class TestNewGame:
    def test_initial_state(self) -> None:
        game = GameController()
        assert game.side_to_move == Player.WHITE
        assert game.status == GameStatus.RUNNING
        assert game.board == Board.initial()
        assert game.history == ()
        assert game.cursor == 0
        assert not game.can_undo
        assert not game.can_redo

    def test_start_new_game_clears_history(self) -> None:
        game = GameController()
        for src, dst in OPENING:
            assert game.attempt_move(src, dst)
        game.start_new_game()
        assert game.board == Board.initial()
        assert game.side_to_move == Player.WHITE
        assert game.history == ()
        assert not game.can_undo

    def test_board_is_a_snapshot(self) -> None:
        game = GameController()
        board = game.board
        board.clear()
        assert game.board == Board.initial()


class TestAttemptMove:
    def test_permissive_pawn_move(self) -> None:
        """Geometry is not checked by default: a pawn may jump four squares."""
        game = GameController()
        assert game.attempt_move((9, 5), (5, 5))
        assert game.side_to_move == Player.BLACK
        assert game.status == GameStatus.RUNNING
        assert game.played_moves == (Move((9, 5), (5, 5)),)
        assert game.board.is_empty(9, 5)
        assert game.board.piece_at(5, 5) == Piece(Color.WHITE, PieceKind.PAWN, has_moved=True)
        assert game.last_rejection is None

    def test_accepts_move_object(self) -> None:
        game = GameController()
        assert game.attempt(Move((9, 5), (8, 5)))

    def test_empty_source_rejected_without_change(self) -> None:
        game = GameController()
        before = _snapshot(game)
        assert not game.attempt_move((3, 3), (4, 3))
        assert _snapshot(game) == before
        assert game.history == ()
        assert game.last_rejection == MoveRejection.EMPTY_SOURCE

    def test_wrong_side_rejected(self) -> None:
        game = GameController()
        assert not game.attempt_move((2, 5), (3, 5))
        assert game.last_rejection == MoveRejection.WRONG_COLOR

    def test_king_capture_rejected(self) -> None:
        game = GameController()
        game.setup_position(
            _make_board(
                [
                    (10, 6, PieceKind.KING, Color.WHITE),
                    (5, 6, PieceKind.KING, Color.BLACK),
                    (5, 5, PieceKind.ROOK, Color.WHITE),
                ]
            ),
            Player.WHITE,
        )
        before = _snapshot(game)
        assert not game.attempt_move((5, 5), (5, 6))
        assert game.last_rejection == MoveRejection.KING_CAPTURE
        assert _snapshot(game) == before

    def test_pinned_piece_cannot_expose_king(self) -> None:
        game = GameController()
        game.setup_position(
            _make_board(
                [
                    (10, 6, PieceKind.KING, Color.WHITE),
                    (9, 6, PieceKind.ROOK, Color.WHITE),
                    (1, 1, PieceKind.KING, Color.BLACK),
                    (5, 6, PieceKind.ROOK, Color.BLACK),
                ]
            ),
            Player.WHITE,
        )
        before = _snapshot(game)
        assert not game.attempt_move((9, 6), (9, 1))
        assert game.last_rejection == MoveRejection.LEAVES_KING_IN_CHECK
        assert _snapshot(game) == before
        # moving along the pin line (capturing the attacker) is fine
        assert game.attempt_move((9, 6), (5, 6))

    def test_missing_king_rejects_every_move(self) -> None:
        game = GameController()
        game.setup_position(
            _make_board(
                [
                    (1, 6, PieceKind.KING, Color.BLACK),
                    (5, 5, PieceKind.ROOK, Color.WHITE),
                ]
            ),
            Player.WHITE,
        )
        assert game.status == GameStatus.CHECK
        assert not game.attempt_move((5, 5), (5, 1))
        assert game.last_rejection == MoveRejection.LEAVES_KING_IN_CHECK


class TestCheckStatus:
    def _position(self) -> GameController:
        game = GameController()
        game.setup_position(
            _make_board(
                [
                    (10, 1, PieceKind.KING, Color.WHITE),
                    (5, 1, PieceKind.ROOK, Color.WHITE),
                    (1, 6, PieceKind.KING, Color.BLACK),
                    (2, 10, PieceKind.PAWN, Color.BLACK),
                ]
            ),
            Player.WHITE,
        )
        return game

    def test_giving_check(self) -> None:
        game = self._position()
        assert game.attempt_move((5, 1), (5, 6))
        assert game.side_to_move == Player.BLACK
        assert game.status == GameStatus.CHECK

    def test_must_answer_check(self) -> None:
        game = self._position()
        game.attempt_move((5, 1), (5, 6))
        assert not game.attempt_move((2, 10), (3, 10))
        assert game.last_rejection == MoveRejection.LEAVES_KING_IN_CHECK
        assert game.status == GameStatus.CHECK

    def test_escaping_check(self) -> None:
        game = self._position()
        game.attempt_move((5, 1), (5, 6))
        assert game.attempt_move((1, 6), (1, 7))
        assert game.status == GameStatus.RUNNING
        assert game.side_to_move == Player.WHITE

    def test_undo_restores_check_status(self) -> None:
        game = self._position()
        game.attempt_move((5, 1), (5, 6))
        game.attempt_move((1, 6), (1, 7))
        game.undo()
        assert game.status == GameStatus.CHECK
        game.undo()
        assert game.status == GameStatus.RUNNING
        assert game.side_to_move == Player.WHITE

    def test_setup_in_check(self) -> None:
        game = GameController()
        game.setup_position(
            _make_board(
                [
                    (10, 6, PieceKind.KING, Color.WHITE),
                    (1, 6, PieceKind.KING, Color.BLACK),
                    (3, 6, PieceKind.ROOK, Color.WHITE),
                ]
            ),
            Player.BLACK,
        )
        assert game.status == GameStatus.CHECK


class TestUndoRedo:
    def _play_opening(self, game: GameController) -> None:
        for src, dst in OPENING:
            assert game.attempt_move(src, dst), (src, dst)

    def test_round_trip(self) -> None:
        game = GameController()
        self._play_opening(game)
        after = _snapshot(game)

        for _ in OPENING:
            game.undo()
        assert game.board == Board.initial()
        assert game.side_to_move == Player.WHITE
        assert game.cursor == 0

        for _ in OPENING:
            game.redo()
        assert _snapshot(game) == after

    def test_availability(self) -> None:
        game = GameController()
        for src, dst in OPENING[:3]:
            game.attempt_move(src, dst)
        assert game.can_undo
        assert not game.can_redo

        game.undo()
        assert game.can_redo
        assert game.side_to_move == Player.WHITE

        # a new move instead of redo truncates the redo tail
        assert game.attempt_move((10, 8), (8, 7))
        assert not game.can_redo
        assert len(game.history) == 3
        assert game.history[-1] == Move((10, 8), (8, 7))

    def test_undo_keeps_history_for_redo(self) -> None:
        game = GameController()
        self._play_opening(game)
        game.undo()
        game.undo()
        assert len(game.history) == 4
        assert game.played_moves == tuple(Move(s, d) for s, d in OPENING[:2])

    def test_undo_at_start_is_noop(self) -> None:
        game = GameController()
        events = _record(game)
        game.undo()
        assert events == []
        assert game.board == Board.initial()

    def test_redo_at_end_is_noop(self) -> None:
        game = GameController()
        game.attempt_move((9, 5), (8, 5))
        events = _record(game)
        before = _snapshot(game)
        game.redo()
        assert events == []
        assert _snapshot(game) == before

    def test_undo_replays_has_moved_flags(self) -> None:
        game = GameController()
        game.attempt_move((9, 5), (8, 5))
        game.attempt_move((2, 5), (3, 5))
        game.undo()
        assert game.board.piece_at(8, 5).has_moved
        assert not game.board.piece_at(2, 5).has_moved

    def test_undo_to_custom_origin(self) -> None:
        origin = _make_board(
            [
                (10, 6, PieceKind.KING, Color.WHITE),
                (1, 6, PieceKind.KING, Color.BLACK),
                (5, 5, PieceKind.QUEEN, Color.BLACK),
            ]
        )
        game = GameController()
        game.setup_position(origin, Player.BLACK)
        assert game.attempt_move((5, 5), (5, 2))
        game.undo()
        assert game.board == origin
        assert game.side_to_move == Player.BLACK

    def test_reset_to_initial_position_keeps_history(self) -> None:
        game = GameController()
        self._play_opening(game)
        game.reset_to_initial_position()
        assert game.board == Board.initial()
        assert game.side_to_move == Player.WHITE
        assert len(game.history) == 4

    def test_reset_to_origin_in_check(self) -> None:
        origin = _make_board(
            [
                (10, 6, PieceKind.KING, Color.WHITE),
                (1, 6, PieceKind.KING, Color.BLACK),
                (3, 6, PieceKind.ROOK, Color.WHITE),
            ]
        )
        game = GameController()
        game.setup_position(origin, Player.BLACK)
        assert game.attempt_move((1, 6), (1, 7))
        assert game.status == GameStatus.RUNNING

        events = _record(game)
        game.reset_to_initial_position()
        assert game.board == origin
        assert game.side_to_move == Player.BLACK
        assert game.status == GameStatus.CHECK
        assert (GameEvent.STATUS_CHANGED, GameStatus.CHECK) in events


class TestNotifications:
    def test_move_events(self) -> None:
        game = GameController()
        events = _record(game)
        move = Move((9, 5), (8, 5))
        assert game.attempt(move)
        assert events == [
            (GameEvent.STATUS_CHANGED, GameStatus.RUNNING),
            (GameEvent.MOVE_COMMITTED, move),
            (GameEvent.BOARD_CHANGED, None),
            (GameEvent.UNDO_AVAILABILITY_CHANGED, True),
            (GameEvent.REDO_AVAILABILITY_CHANGED, False),
            (GameEvent.SIDE_TO_MOVE_CHANGED, Player.BLACK),
        ]

    def test_rejected_move_emits_nothing(self) -> None:
        game = GameController()
        events = _record(game)
        game.attempt_move((3, 3), (4, 3))
        assert events == []

    def test_undo_does_not_commit_a_move(self) -> None:
        game = GameController()
        game.attempt_move((9, 5), (8, 5))
        events = _record(game)
        game.undo()
        kinds = [event for event, _ in events]
        assert GameEvent.MOVE_COMMITTED not in kinds
        assert kinds == [
            GameEvent.STATUS_CHANGED,
            GameEvent.BOARD_CHANGED,
            GameEvent.UNDO_AVAILABILITY_CHANGED,
            GameEvent.REDO_AVAILABILITY_CHANGED,
            GameEvent.SIDE_TO_MOVE_CHANGED,
        ]
        assert (GameEvent.REDO_AVAILABILITY_CHANGED, True) in events

    def test_redo_commits_the_move(self) -> None:
        game = GameController()
        move = Move((9, 5), (8, 5))
        game.attempt(move)
        game.undo()
        events = _record(game)
        game.redo()
        assert (GameEvent.MOVE_COMMITTED, move) in events

    def test_new_game_events(self) -> None:
        game = GameController()
        events = _record(game)
        game.start_new_game()
        assert events == [
            (GameEvent.BOARD_CHANGED, None),
            (GameEvent.SIDE_TO_MOVE_CHANGED, Player.WHITE),
            (GameEvent.STATUS_CHANGED, GameStatus.RUNNING),
            (GameEvent.UNDO_AVAILABILITY_CHANGED, False),
            (GameEvent.REDO_AVAILABILITY_CHANGED, False),
        ]

    def test_unsubscribe(self) -> None:
        game = GameController()
        events: list[tuple[GameEvent, Any]] = []
        unsubscribe = game.subscribe(lambda event, payload: events.append((event, payload)))
        unsubscribe()
        game.attempt_move((9, 5), (8, 5))
        assert events == []


class TestStrictGeometry:
    def test_rejects_pattern_violation(self) -> None:
        game = GameController(STRICT_CONFIG)
        before = _snapshot(game)
        assert not game.attempt_move((9, 5), (5, 5))
        assert game.last_rejection == MoveRejection.BAD_GEOMETRY
        assert _snapshot(game) == before

    def test_accepts_pattern_move(self) -> None:
        game = GameController(STRICT_CONFIG)
        assert game.attempt_move((9, 5), (8, 5))
        assert game.attempt_move((1, 3), (3, 4))

    def test_structural_rejection_takes_priority(self) -> None:
        game = GameController(STRICT_CONFIG)
        assert not game.attempt_move((3, 3), (4, 3))
        assert game.last_rejection == MoveRejection.EMPTY_SOURCE


class TestTensorPlanes:
    def test_shape(self) -> None:
        game = GameController()
        assert tuple(game.to_tensor_planes().shape) == (19, 12, 12)


def _play_random(game: GameController, rng: random.Random, plies: int) -> int:
    """Play up to ``plies`` random pattern moves and return how many were accepted."""
    played = 0
    for _ in range(plies):
        board = game.board
        mover = game.side_to_move
        candidates = [
            Move((r, c), dst)
            for r, c, piece in board.pieces()
            if piece.color == mover.color
            for dst in pattern_moves_from(board, r, c)
        ]
        rng.shuffle(candidates)
        if not any(game.attempt(m) for m in candidates):
            break
        played += 1

        after = game.board
        assert after.find_king(Color.WHITE) is not None
        assert after.find_king(Color.BLACK) is not None
        assert not is_king_in_check(after, mover)
        if is_king_in_check(after, mover.opponent):
            assert game.status == GameStatus.CHECK
        else:
            assert game.status == GameStatus.RUNNING
    return played


class TestRandomPlay:
    @pytest.mark.parametrize("seed", [3, 7, 11, 19, 42])
    def test_kings_survive_and_mover_never_in_check(self, seed: int) -> None:
        """Random pattern moves never capture a king and never leave the mover in check."""
        game = GameController()
        assert _play_random(game, random.Random(seed), 60) > 0

    @pytest.mark.parametrize("seed", [3, 7, 11, 19, 42])
    def test_undo_all_then_redo_all(self, seed: int) -> None:
        """Undoing every ply and redoing them restores board, side, status and has_moved."""
        game = GameController()
        plies = _play_random(game, random.Random(seed), 80)
        after = _snapshot(game)

        for _ in range(plies):
            game.undo()
        assert not game.can_undo
        assert game.board == Board.initial()
        assert game.side_to_move == Player.WHITE
        assert game.status == GameStatus.RUNNING

        for _ in range(plies):
            game.redo()
        assert not game.can_redo
        assert _snapshot(game) == after
