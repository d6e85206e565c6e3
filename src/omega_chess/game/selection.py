"""Two-click move selection for input layers.

「移動元をクリック → 移動先をクリック」という入力を手（Move）に変換する小さな状態機械。
状態はセッションごとに MoveSelector インスタンスが持つ（グローバル変数は使わない）ので、
複数の対局やテストが互いに干渉しない。

    Idle ──(自分の駒をクリック)──▶ SourceSelected(row, col)
    SourceSelected ──(同じマス)──▶ Idle（キャンセル）
    SourceSelected ──(別の自分の駒)──▶ SourceSelected（選び直し）
    SourceSelected ──(その他のマス)──▶ Idle、Move を返す
"""

from __future__ import annotations

from dataclasses import dataclass

from omega_chess.game.board import Board, is_valid_cell
from omega_chess.game.moves import Move
from omega_chess.game.types import Player


@dataclass(frozen=True)
class Idle:
    """Nothing selected."""


@dataclass(frozen=True)
class SourceSelected:
    """A source square has been picked; waiting for the destination."""

    row: int
    col: int

    @property
    def square(self) -> tuple[int, int]:
        return self.row, self.col


SelectionState = Idle | SourceSelected


class MoveSelector:
    """Per-session selection state.

    select() は盤面を書き換えない。返ってきた Move を GameController.attempt() に渡すのは
    呼び出し側の責任。
    """

    def __init__(self) -> None:
        self._state: SelectionState = Idle()

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def selected(self) -> tuple[int, int] | None:
        """Currently selected source square, or None when idle."""
        if isinstance(self._state, SourceSelected):
            return self._state.square
        return None

    def reset(self) -> None:
        self._state = Idle()

    def select(self, row: int, col: int, board: Board, side: Player) -> Move | None:
        """Handle one click on (row, col). Return a Move once a destination is picked."""
        owns_piece = is_valid_cell(row, col) and board.piece_at(row, col).color == side.color

        if isinstance(self._state, Idle):
            if owns_piece:
                self._state = SourceSelected(row, col)
            return None

        src = self._state.square
        if (row, col) == src:
            self._state = Idle()
            return None
        if owns_piece:
            self._state = SourceSelected(row, col)
            return None

        self._state = Idle()
        return Move(src, (row, col))
