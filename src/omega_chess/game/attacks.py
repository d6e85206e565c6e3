"""Attack pattern matching for Omega Chess.

「駒 p が (pr, pc) にいるとき、(tr, tc) に利いているか」を判定する純粋関数群。
駒種ごとに1つのルール関数を持ち、_ATTACK_RULES テーブルで引く。

手番やチェックは考慮しない。遠距離駒（ルーク・ビショップ・クイーン）だけは
盤面を読んで途中の駒（ブロッカー）を検出する。
"""

from __future__ import annotations

from collections.abc import Callable

from omega_chess.game.board import Board, Piece, is_valid_cell
from omega_chess.game.types import (
    CHAMPION_JUMPS,
    KNIGHT_JUMPS,
    WIZARD_JUMPS,
    Color,
    PieceKind,
    Player,
)

# (board, piece, pr, pc, tr, tc) -> bool
AttackRule = Callable[[Board, Piece, int, int, int, int], bool]


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def _ray_reaches(board: Board, pr: int, pc: int, tr: int, tc: int) -> bool:
    """Walk one cell at a time from (pr, pc) toward (tr, tc).

    途中のマスが配列外・無効マス・駒ありのいずれかなら、そこでレイが止まる。
    呼び出し側で (tr, tc) が同じ行・列・対角線上にあることを保証すること。
    """
    step_r = _sign(tr - pr)
    step_c = _sign(tc - pc)
    r, c = pr + step_r, pc + step_c
    while is_valid_cell(r, c):
        if r == tr and c == tc:
            return True
        if not board.is_empty(r, c):
            break  # ブロッカー
        r, c = r + step_r, c + step_c
    return False


def _jump_matches(jumps: frozenset[tuple[int, int]], dr: int, dc: int) -> bool:
    return (abs(dr), abs(dc)) in jumps


def _pawn_attacks(board: Board, piece: Piece, pr: int, pc: int, tr: int, tc: int) -> bool:
    # ポーンは斜め前1マスだけに利く（前進は利きではない）
    if piece.color == Color.WHITE:
        forward = -1
    elif piece.color == Color.BLACK:
        forward = 1
    else:
        return False
    return tr - pr == forward and abs(tc - pc) == 1


def _knight_attacks(board: Board, piece: Piece, pr: int, pc: int, tr: int, tc: int) -> bool:
    return _jump_matches(KNIGHT_JUMPS, tr - pr, tc - pc)


def _king_attacks(board: Board, piece: Piece, pr: int, pc: int, tr: int, tc: int) -> bool:
    return max(abs(tr - pr), abs(tc - pc)) == 1


def _rook_attacks(board: Board, piece: Piece, pr: int, pc: int, tr: int, tc: int) -> bool:
    dr, dc = tr - pr, tc - pc
    if (dr == 0) == (dc == 0):
        # 同じマス、または縦横どちらの直線上でもない
        return False
    return _ray_reaches(board, pr, pc, tr, tc)


def _bishop_attacks(board: Board, piece: Piece, pr: int, pc: int, tr: int, tc: int) -> bool:
    dr, dc = tr - pr, tc - pc
    if dr == 0 or abs(dr) != abs(dc):
        return False
    return _ray_reaches(board, pr, pc, tr, tc)


def _queen_attacks(board: Board, piece: Piece, pr: int, pc: int, tr: int, tc: int) -> bool:
    return _rook_attacks(board, piece, pr, pc, tr, tc) or _bishop_attacks(
        board, piece, pr, pc, tr, tc
    )


def _champion_attacks(board: Board, piece: Piece, pr: int, pc: int, tr: int, tc: int) -> bool:
    # ジャンプ駒なのでブロッカーは無関係
    return _jump_matches(CHAMPION_JUMPS, tr - pr, tc - pc)


def _wizard_attacks(board: Board, piece: Piece, pr: int, pc: int, tr: int, tc: int) -> bool:
    return _jump_matches(WIZARD_JUMPS, tr - pr, tc - pc)


# 駒種 → 利き判定ルール。PieceKind.NONE 以外のすべての駒種を網羅すること
_ATTACK_RULES: dict[PieceKind, AttackRule] = {
    PieceKind.KING: _king_attacks,
    PieceKind.QUEEN: _queen_attacks,
    PieceKind.ROOK: _rook_attacks,
    PieceKind.BISHOP: _bishop_attacks,
    PieceKind.KNIGHT: _knight_attacks,
    PieceKind.PAWN: _pawn_attacks,
    PieceKind.CHAMPION: _champion_attacks,
    PieceKind.WIZARD: _wizard_attacks,
}


def attack_rule(kind: PieceKind) -> AttackRule:
    """Return the attack rule for ``kind``. Raises KeyError for PieceKind.NONE."""
    return _ATTACK_RULES[kind]


def piece_attacks_square(
    board: Board,
    piece: Piece,
    pr: int,
    pc: int,
    tr: int,
    tc: int,
) -> bool:
    """Check if ``piece`` standing on (pr, pc) attacks (tr, tc).

    駒が (tr, tc) の駒を取れる（利いている）かどうか。
    空の駒はどこにも利かない。
    """
    if piece.is_empty:
        return False
    return attack_rule(piece.kind)(board, piece, pr, pc, tr, tc)


def attackers_of(board: Board, row: int, col: int, by: Player) -> list[tuple[int, int]]:
    """Return the squares of ``by``'s pieces that attack (row, col)."""
    color = by.color
    return [
        (r, c)
        for r, c, piece in board.pieces()
        if piece.color == color and piece_attacks_square(board, piece, r, c, row, col)
    ]


def is_square_attacked(board: Board, row: int, col: int, by: Player) -> bool:
    """(row, col) が by 側のいずれかの駒に利かれているか。"""
    color = by.color
    for r, c, piece in board.pieces():
        if piece.color != color:
            continue
        if piece_attacks_square(board, piece, r, c, row, col):
            return True
    return False


def is_king_in_check(board: Board, player: Player) -> bool:
    """Check if ``player``'s king is under attack.

    キングが盤上にいない場合は「無限に王手されている」とみなして True を返す。
    キングは取れないルールなので通常は起きない。
    """
    king = board.find_king(player.color)
    if king is None:
        return True
    return is_square_attacked(board, king[0], king[1], player.opponent)
