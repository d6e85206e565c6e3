"""Game controller for Omega Chess.

対局の状態機械。盤面・手番・状態（通常 / 王手）・棋譜（history）と
カーソル（どこまで指したか）を持ち、着手・undo・redo を提供する。

盤面は常に「原点局面から history[:cursor] を順に再生した局面」と一致する。
undo はこの性質を使い、原点から手を再生し直して局面を復元する。

描画側への通知は subscribe() で登録したリスナーに (GameEvent, payload) で送る。
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum, unique
from typing import Any

import torch

from omega_chess.config import DEFAULT_CONFIG, GameConfig
from omega_chess.game.attacks import is_king_in_check
from omega_chess.game.board import Board
from omega_chess.game.encoding import board_to_planes
from omega_chess.game.moves import (
    Move,
    MoveRejection,
    Square,
    apply_structural_move,
    matches_movement_pattern,
    relocate,
    validate_structure,
)
from omega_chess.game.types import GameStatus, Player

logger = logging.getLogger(__name__)


@unique
class GameEvent(Enum):
    """Change notifications sent to subscribers.

    payload:
    - BOARD_CHANGED:             None
    - SIDE_TO_MOVE_CHANGED:      Player
    - STATUS_CHANGED:            GameStatus
    - MOVE_COMMITTED:            Move（着手成功と redo のときだけ。undo では送らない）
    - UNDO_AVAILABILITY_CHANGED: bool
    - REDO_AVAILABILITY_CHANGED: bool
    """

    BOARD_CHANGED = "board_changed"
    SIDE_TO_MOVE_CHANGED = "side_to_move_changed"
    STATUS_CHANGED = "status_changed"
    MOVE_COMMITTED = "move_committed"
    UNDO_AVAILABILITY_CHANGED = "undo_availability_changed"
    REDO_AVAILABILITY_CHANGED = "redo_availability_changed"


GameListener = Callable[[GameEvent, Any], None]


class GameController:
    """Owns one board, the side to move, the status and the move history.

    着手の流れ（attempt_move）:
    1. 盤面のスナップショットを取る
    2. 構造的な合法性を確認する（strict_geometry なら駒の動き方も確認）
    3. 駒を動かす
    4. 自分のキングが利かれていたらスナップショットに戻して False
    5. 受理: redo 可能な手を捨てて棋譜に追加し、手番を交代して状態を更新する

    ルール違反は例外にせず、False を返すだけ（状態は一切変わらない）。
    拒否理由は last_rejection で参照できる。
    """

    def __init__(self, config: GameConfig = DEFAULT_CONFIG) -> None:
        self._config = config
        self._listeners: list[GameListener] = []

        self._origin = Board.initial()
        self._origin_side = Player.WHITE
        self._board = Board()
        self._side_to_move = Player.WHITE
        self._status = GameStatus.RUNNING
        self._history: list[Move] = []
        self._cursor = 0
        self._last_rejection: MoveRejection | None = None

        self.start_new_game()

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def subscribe(self, listener: GameListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: GameEvent, payload: Any = None) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    def _notify_history_changed(self) -> None:
        self._emit(GameEvent.UNDO_AVAILABILITY_CHANGED, self.can_undo)
        self._emit(GameEvent.REDO_AVAILABILITY_CHANGED, self.can_redo)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def side_to_move(self) -> Player:
        return self._side_to_move

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def board(self) -> Board:
        """Snapshot of the current board. Mutating it does not affect the game."""
        return self._board.copy()

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._history)

    @property
    def history(self) -> tuple[Move, ...]:
        """Full move log, including moves that were undone and can be redone."""
        return tuple(self._history)

    @property
    def played_moves(self) -> tuple[Move, ...]:
        """Moves that make up the current position (history[:cursor])."""
        return tuple(self._history[: self._cursor])

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def last_rejection(self) -> MoveRejection | None:
        """Reason the most recent attempt_move() failed; None after a success."""
        return self._last_rejection

    def to_tensor_planes(self) -> torch.Tensor:
        """現局面を手番側から見たテンソルに変換する（encoding.board_to_planes 参照）。"""
        return board_to_planes(self._board, self._side_to_move)

    # ------------------------------------------------------------------
    # Game setup
    # ------------------------------------------------------------------

    def start_new_game(self) -> None:
        """Reset to the standard starting position with White to move and no history."""
        self._origin = Board.initial()
        self._origin_side = Player.WHITE
        self._restart()

    def setup_position(self, board: Board, side_to_move: Player = Player.WHITE) -> None:
        """Start from an arbitrary position.

        任意の局面から対局を始める（テストや研究局面用）。
        この局面が原点になり、undo はここまで巻き戻る。棋譜はクリアされる。
        """
        self._origin = board.copy()
        self._origin_side = side_to_move
        self._restart()

    def _restart(self) -> None:
        self._board = self._origin.copy()
        self._side_to_move = self._origin_side
        # 標準の初期配置では常に RUNNING。任意局面では王手のこともある
        self._status = self._compute_status()
        self._history.clear()
        self._cursor = 0
        self._last_rejection = None
        logger.debug("new game, %s to move", self._side_to_move.label)

        self._emit(GameEvent.BOARD_CHANGED)
        self._emit(GameEvent.SIDE_TO_MOVE_CHANGED, self._side_to_move)
        self._emit(GameEvent.STATUS_CHANGED, self._status)
        self._notify_history_changed()

    def reset_to_initial_position(self) -> None:
        """Reset board, side to move and status to the origin. History is left alone.

        undo の再生用。単独で呼ぶと棋譜と盤面が食い違うので、外部からは使わないこと。
        """
        self._board = self._origin.copy()
        self._side_to_move = self._origin_side
        self._status = self._compute_status()

        self._emit(GameEvent.BOARD_CHANGED)
        self._emit(GameEvent.SIDE_TO_MOVE_CHANGED, self._side_to_move)
        self._emit(GameEvent.STATUS_CHANGED, self._status)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def attempt_move(self, src: Square, dst: Square) -> bool:
        """Try to play src -> dst for the side to move. Return True if accepted."""
        return self.attempt(Move(tuple(src), tuple(dst)))

    def attempt(self, move: Move) -> bool:
        """Try to play ``move``. See attempt_move()."""
        mover = self._side_to_move
        rejection = self._check_move(move)
        if rejection is None:
            # スナップショット → 試しに動かす → 自玉が利かれていたら元に戻す
            snapshot = self._board.copy()
            relocate(self._board, move)
            if is_king_in_check(self._board, mover):
                self._board = snapshot
                rejection = MoveRejection.LEAVES_KING_IN_CHECK

        self._last_rejection = rejection
        if rejection is not None:
            logger.debug("rejected %s for %s: %s", move, mover.label, rejection.value)
            return False

        # undo 後に新しい手を指したら、redo 可能な手は捨てる
        del self._history[self._cursor :]
        self._history.append(move)
        self._cursor += 1
        self._side_to_move = mover.opponent
        self._update_status()
        logger.debug("%s played %s (%s)", mover.label, move, self._status.value)

        self._emit(GameEvent.MOVE_COMMITTED, move)
        self._emit(GameEvent.BOARD_CHANGED)
        self._notify_history_changed()
        self._emit(GameEvent.SIDE_TO_MOVE_CHANGED, self._side_to_move)
        return True

    def _check_move(self, move: Move) -> MoveRejection | None:
        rejection = validate_structure(self._board, self._side_to_move, move)
        if rejection is not None:
            return rejection
        if self._config.strict_geometry:
            piece = self._board.piece_at(*move.src)
            if not matches_movement_pattern(self._board, piece, move):
                return MoveRejection.BAD_GEOMETRY
        return None

    def undo(self) -> None:
        """Take back the last played move by replaying history[:cursor - 1] from the origin."""
        if not self.can_undo:
            return

        self._cursor -= 1
        board = self._origin.copy()
        side = self._origin_side
        for move in self._history[: self._cursor]:
            # 棋譜の手は検証済みなので、構造的な移動だけで再生する
            apply_structural_move(board, side, move)
            side = side.opponent
        self._board = board
        self._side_to_move = side
        self._update_status()
        logger.debug("undo to ply %d", self._cursor)

        self._emit(GameEvent.BOARD_CHANGED)
        self._notify_history_changed()
        self._emit(GameEvent.SIDE_TO_MOVE_CHANGED, self._side_to_move)

    def redo(self) -> None:
        """Re-apply history[cursor]. Redo trusts history: king safety is not re-checked."""
        if not self.can_redo:
            return

        move = self._history[self._cursor]
        if not apply_structural_move(self._board, self._side_to_move, move):
            logger.warning("redo of %s failed structural check", move)
            return

        self._cursor += 1
        self._side_to_move = self._side_to_move.opponent
        self._update_status()
        logger.debug("redo %s (ply %d)", move, self._cursor)

        self._emit(GameEvent.MOVE_COMMITTED, move)
        self._emit(GameEvent.BOARD_CHANGED)
        self._notify_history_changed()
        self._emit(GameEvent.SIDE_TO_MOVE_CHANGED, self._side_to_move)

    def _compute_status(self) -> GameStatus:
        # チェックメイト・ステイルメイトは判定しない（全合法手の列挙が必要なため）
        if is_king_in_check(self._board, self._side_to_move):
            return GameStatus.CHECK
        return GameStatus.RUNNING

    def _update_status(self) -> None:
        self._status = self._compute_status()
        self._emit(GameEvent.STATUS_CHANGED, self._status)
