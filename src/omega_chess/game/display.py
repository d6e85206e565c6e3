"""Terminal display for Omega Chess boards.

盤面をターミナルに表示するためのモジュール。
"""

from __future__ import annotations

from omega_chess.game.board import Board, Piece, is_valid_cell
from omega_chess.game.moves import Move, format_square
from omega_chess.game.types import COLS, ROWS, Color


def piece_to_char(piece: Piece) -> str:
    """Convert a piece to its display character.

    駒を表示文字に変換する。白は大文字、黒は小文字、空マスは "."。
    """
    if piece.is_empty:
        return "."
    char = piece.kind.symbol
    if piece.color == Color.BLACK:
        return char.lower()
    return char


def format_move(move: Move, piece: Piece | None = None) -> str:
    """Format a move for the move log, e.g. "P 9,5 -> 5,5"."""
    text = f"{format_square(move.src)} -> {format_square(move.dst)}"
    if piece is not None and not piece.is_empty:
        return f"{piece_to_char(piece)} {text}"
    return text


def board_to_str(board: Board) -> str:
    """Convert a board to a human-readable string.

    Example output (先頭の数行):
              0  1  2  3  4  5  6  7  8  9 10 11
          0   w                                w
          1      c  r  n  b  q  k  b  n  r  c
          2      p  p  p  p  p  p  p  p  p  p
          3      .  .  .  .  .  .  .  .  .  .

    マス目の見方:
    - 大文字 = 白の駒、小文字 = 黒の駒
    - "." = 空いている有効マス
    - 空白 = 盤外（配列のパディング）
    - 行・列ラベルは配列のインデックスそのまま
    """
    lines: list[str] = []
    lines.append("    " + "".join(f"{c:>3}" for c in range(COLS)))
    for r in range(ROWS):
        cells: list[str] = []
        for c in range(COLS):
            if is_valid_cell(r, c):
                cells.append(piece_to_char(board.piece_at(r, c)))
            else:
                cells.append(" ")
        lines.append(f"{r:>3} " + "".join(f"{ch:>3}" for ch in cells).rstrip())
    return "\n".join(lines)
