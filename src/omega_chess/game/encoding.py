"""Tensor encoding of Omega Chess positions.

局面をテンソルに変換する。GameController.to_tensor_planes() の実体で、
局面を外部の解析・学習ツールへ渡すためのエクスポート形式。ルール判定では使わない。
"""

from __future__ import annotations

import torch

from omega_chess.game.board import Board, is_valid_cell
from omega_chess.game.types import COLS, PIECE_KINDS, ROWS, Player

_NUM_KINDS = len(PIECE_KINDS)  # 8

OWN_PLANES = 0
OPPONENT_PLANES = OWN_PLANES + _NUM_KINDS  # 8
VALID_PLANE = OPPONENT_PLANES + _NUM_KINDS  # 16
MOVED_PLANE = VALID_PLANE + 1  # 17
TURN_PLANE = MOVED_PLANE + 1  # 18
NUM_PLANES = TURN_PLANE + 1  # 19


def board_to_planes(board: Board, side_to_move: Player) -> torch.Tensor:
    """Convert a board to a (19, 12, 12) float tensor.

    Planes（チャンネル）の構成:
    ch.0-7:   手番側の駒（King, Queen, Rook, Bishop, Knight, Pawn, Champion, Wizard）
    ch.8-15:  相手側の駒（同じ順）
    ch.16:    有効マスのマスク
    ch.17:    一度でも動いた駒の位置
    ch.18:    手番インジケータ（白番なら全1）
    """
    planes = torch.zeros(NUM_PLANES, ROWS, COLS)
    own = side_to_move.color

    for r in range(ROWS):
        for c in range(COLS):
            if is_valid_cell(r, c):
                planes[VALID_PLANE, r, c] = 1.0

    for r, c, piece in board.pieces():
        # PieceKind は 1 始まりなので 1 を引いてチャンネル番号にする
        base = OWN_PLANES if piece.color == own else OPPONENT_PLANES
        planes[base + piece.kind.value - 1, r, c] = 1.0
        if piece.has_moved:
            planes[MOVED_PLANE, r, c] = 1.0

    if side_to_move == Player.WHITE:
        planes[TURN_PLANE, :, :] = 1.0

    return planes
