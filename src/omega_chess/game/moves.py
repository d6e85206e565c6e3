"""Move rules for Omega Chess.

Structural legality (bounds, occupancy, color, king immunity) is checked for
every move attempt. It does not look at the piece's movement pattern; that is
only done by matches_movement_pattern() when strict geometry is enabled.

構造的な合法性（範囲・駒の有無・色・キングは取れない）と、
盤面上での駒の移動（relocate）を扱う。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from omega_chess.game.attacks import piece_attacks_square
from omega_chess.game.board import Board, Piece, is_inside_array, is_valid_cell
from omega_chess.game.types import PieceKind, Player, player_of

Square = tuple[int, int]

_SQUARE_RE = re.compile(r"^\s*\(?\s*(-?\d+)\s*[,\s]\s*(-?\d+)\s*\)?\s*$")


@dataclass(frozen=True)
class Move:
    """A move from one square to another.

    取った駒や成りの情報は持たない。
    """

    src: Square
    dst: Square

    def __str__(self) -> str:
        return f"{format_square(self.src)} -> {format_square(self.dst)}"


class MoveRejection(Enum):
    """Why a move attempt was rejected."""

    OUT_OF_BOUNDS = "square is outside the board array"
    INVALID_CELL = "square is not a playable cell"
    EMPTY_SOURCE = "no piece on the source square"
    WRONG_COLOR = "piece does not belong to the side to move"
    OWN_PIECE_CAPTURE = "cannot capture your own piece"
    KING_CAPTURE = "kings cannot be captured"
    BAD_GEOMETRY = "piece cannot move that way"
    LEAVES_KING_IN_CHECK = "move leaves your king in check"


def format_square(square: Square) -> str:
    row, col = square
    return f"{row},{col}"


def parse_square(text: str) -> Square:
    """Parse "r,c", "r c" or "(r, c)" into a (row, col) tuple.

    Raises ValueError on malformed input. Range is not checked here.
    """
    m = _SQUARE_RE.match(text)
    if m is None:
        msg = f"Cannot parse square: {text!r}"
        raise ValueError(msg)
    return int(m.group(1)), int(m.group(2))


def validate_structure(board: Board, player: Player, move: Move) -> MoveRejection | None:
    """Run the structural legality checks. Return None if the move passes.

    チェック順:
    1. 両方のマスが配列内
    2. 両方のマスが有効マス
    3. 移動元に駒がある
    4. その駒が手番側の色
    5. 移動先が自分の駒ではない
    6. 移動先が相手のキングではない（キングは取れない）
    """
    (fr, fc), (tr, tc) = move.src, move.dst
    if not is_inside_array(fr, fc) or not is_inside_array(tr, tc):
        return MoveRejection.OUT_OF_BOUNDS
    if not is_valid_cell(fr, fc) or not is_valid_cell(tr, tc):
        return MoveRejection.INVALID_CELL

    piece = board.piece_at(fr, fc)
    if piece.is_empty:
        return MoveRejection.EMPTY_SOURCE
    if piece.color != player.color:
        return MoveRejection.WRONG_COLOR

    target = board.piece_at(tr, tc)
    if not target.is_empty:
        if target.color == piece.color:
            return MoveRejection.OWN_PIECE_CAPTURE
        if target.kind == PieceKind.KING:
            return MoveRejection.KING_CAPTURE
    return None


def matches_movement_pattern(board: Board, piece: Piece, move: Move) -> bool:
    """Check that the move's geometry fits the piece's movement pattern.

    ポーン以外は利きの判定（attacks）と同じ。
    ポーンは「前に1マス、空マスへ」または「斜め前1マス、相手の駒を取る」のどちらか。
    ダブルステップ・アンパッサン・成りは扱わない。
    """
    (fr, fc), (tr, tc) = move.src, move.dst
    if piece.kind != PieceKind.PAWN:
        return piece_attacks_square(board, piece, fr, fc, tr, tc)

    owner = player_of(piece.color)
    if owner is None:
        return False
    target = board.piece_at(tr, tc)
    if tr - fr == owner.forward and tc == fc:
        return target.is_empty
    if piece_attacks_square(board, piece, fr, fc, tr, tc):
        return not target.is_empty and target.color != piece.color
    return False


def relocate(board: Board, move: Move) -> None:
    """Move the piece on move.src to move.dst, marking it as moved."""
    (fr, fc), (tr, tc) = move.src, move.dst
    piece = board.piece_at(fr, fc)
    board.set_piece_at(tr, tc, piece.moved())
    board.clear_cell(fr, fc)


def apply_structural_move(board: Board, player: Player, move: Move) -> bool:
    """Validate structurally and, if legal, relocate the piece in place.

    盤面を直接書き換える。不正な手なら盤面は変更せず False を返す。
    """
    if validate_structure(board, player, move) is not None:
        return False
    relocate(board, move)
    return True


def pattern_moves_from(board: Board, row: int, col: int) -> list[Square]:
    """List destinations that are structurally legal and fit the piece's pattern.

    ヒント表示用。キングの安全性（自殺手）はここでは見ない。
    """
    if not is_valid_cell(row, col):
        return []
    piece = board.piece_at(row, col)
    owner = player_of(piece.color)
    if piece.is_empty or owner is None:
        return []

    destinations: list[Square] = []
    for r, c in board.valid_cells():
        move = Move((row, col), (r, c))
        if (r, c) == (row, col):
            continue
        if validate_structure(board, owner, move) is not None:
            continue
        if matches_movement_pattern(board, piece, move):
            destinations.append((r, c))
    return destinations
