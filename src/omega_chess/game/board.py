"""Board representation for Omega Chess.

盤面のデータ構造。12×12 の配列のうち、中央 10×10 と四隅4マスだけが有効なマス。

Piece はイミュータブル（frozen=True）な値で、マスにはコピーとして置かれる。
Board 自体は1マスずつ書き換える可変オブジェクトだが、copy() で丸ごと複製できるので
「コピーを取って試しに動かし、ダメなら戻す」という使い方ができる。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from omega_chess.game.types import (
    BACK_RANK,
    BLACK_BACK_ROW,
    BLACK_PAWN_ROW,
    COLS,
    INNER_FIRST,
    INNER_LAST,
    ROWS,
    WHITE_BACK_ROW,
    WHITE_PAWN_ROW,
    Color,
    PieceKind,
)


@dataclass(frozen=True)
class Piece:
    """A piece on the board.

    盤面上の1つの駒。色・種類と「一度でも動いたか」のフラグを持つ。
    color か kind が NONE なら空マスを表す。
    """

    color: Color = Color.NONE
    kind: PieceKind = PieceKind.NONE
    has_moved: bool = False

    @property
    def is_empty(self) -> bool:
        return self.color == Color.NONE or self.kind == PieceKind.NONE

    def moved(self) -> Piece:
        """Return a copy with has_moved set."""
        return replace(self, has_moved=True)

    @staticmethod
    def empty() -> Piece:
        return EMPTY


EMPTY = Piece()


def is_inside_array(row: int, col: int) -> bool:
    """配列 12×12 の範囲内かどうか。"""
    return 0 <= row < ROWS and 0 <= col < COLS


def is_valid_cell(row: int, col: int) -> bool:
    """Return True for playable squares: the inner 10x10 block and the four corners.

    有効なマスかどうか。外周のうち四隅以外はパディングで、駒が置かれることはない。
    """
    if not is_inside_array(row, col):
        return False
    if INNER_FIRST <= row <= INNER_LAST and INNER_FIRST <= col <= INNER_LAST:
        return True
    # 四隅
    return row in (0, ROWS - 1) and col in (0, COLS - 1)


def _empty_cells() -> list[list[Piece]]:
    return [[EMPTY] * COLS for _ in range(ROWS)]


@dataclass
class Board:
    """Mutable 12x12 Omega Chess board.

    盤面は行優先の2次元リスト cells[row][col] で保持する。
    コンストラクタは空の盤面を作る。初期配置が欲しければ Board.initial() を使う。

    比較（==）はマスの内容で行うので、スナップショットとの一致判定にそのまま使える。
    """

    cells: list[list[Piece]] = field(default_factory=_empty_cells)

    @classmethod
    def initial(cls) -> Board:
        """Return a board set up in the standard starting position."""
        board = cls()
        board.reset_to_initial_position()
        return board

    # 判定はモジュール関数と同じ。Board 経由でも呼べるようにしておく
    is_inside_array = staticmethod(is_inside_array)
    is_valid_cell = staticmethod(is_valid_cell)

    def piece_at(self, row: int, col: int) -> Piece:
        """Return the piece at (row, col).

        Raises IndexError if (row, col) is outside the 12x12 array.
        """
        if not is_inside_array(row, col):
            msg = f"piece_at: ({row}, {col}) is outside the board array"
            raise IndexError(msg)
        return self.cells[row][col]

    def set_piece_at(self, row: int, col: int, piece: Piece) -> None:
        """Put ``piece`` on (row, col). Raises IndexError outside the array."""
        if not is_inside_array(row, col):
            msg = f"set_piece_at: ({row}, {col}) is outside the board array"
            raise IndexError(msg)
        self.cells[row][col] = piece

    def clear_cell(self, row: int, col: int) -> None:
        """Empty (row, col). Coordinates outside the array are ignored."""
        if is_inside_array(row, col):
            self.cells[row][col] = EMPTY

    def is_empty(self, row: int, col: int) -> bool:
        """空マスなら True。配列の外も空とみなす（レイの探索で使う）。"""
        if not is_inside_array(row, col):
            return True
        return self.cells[row][col].is_empty

    def clear(self) -> None:
        """全マスを空にする。"""
        self.cells = _empty_cells()

    def reset_to_initial_position(self) -> None:
        """Clear the board and set up the standard Omega Chess position.

        初期配置:
        - 黒: 後段 row 1、ポーン row 2、Wizard は (0,0) と (0,11)
        - 白: 後段 row 10、ポーン row 9、Wizard は (11,0) と (11,11)
        - 後段は列 1..10 に C R N B Q K B N R C
        """
        self.clear()
        for color, back_row, pawn_row, corner_row in (
            (Color.BLACK, BLACK_BACK_ROW, BLACK_PAWN_ROW, 0),
            (Color.WHITE, WHITE_BACK_ROW, WHITE_PAWN_ROW, ROWS - 1),
        ):
            for offset, kind in enumerate(BACK_RANK):
                self.set_piece_at(back_row, INNER_FIRST + offset, Piece(color, kind))
            for col in range(INNER_FIRST, INNER_LAST + 1):
                self.set_piece_at(pawn_row, col, Piece(color, PieceKind.PAWN))
            self.set_piece_at(corner_row, 0, Piece(color, PieceKind.WIZARD))
            self.set_piece_at(corner_row, COLS - 1, Piece(color, PieceKind.WIZARD))

    def copy(self) -> Board:
        """Return an independent copy (Piece values are immutable, rows are copied)."""
        return Board(cells=[list(row) for row in self.cells])

    def valid_cells(self) -> Iterator[tuple[int, int]]:
        """有効なマスを行優先で列挙する。"""
        for r in range(ROWS):
            for c in range(COLS):
                if is_valid_cell(r, c):
                    yield r, c

    def pieces(self) -> Iterator[tuple[int, int, Piece]]:
        """Yield (row, col, piece) for every occupied valid cell."""
        for r, c in self.valid_cells():
            piece = self.cells[r][c]
            if not piece.is_empty:
                yield r, c, piece

    def find_king(self, color: Color) -> tuple[int, int] | None:
        """Return the square of ``color``'s king, or None if it is not on the board.

        チェック判定に使用する。
        """
        for r, c, piece in self.pieces():
            if piece.kind == PieceKind.KING and piece.color == color:
                return r, c
        return None
