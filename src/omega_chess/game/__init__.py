"""Omega Chess rules engine: 10x10 board plus four corner squares."""

from omega_chess.game.board import EMPTY, Board, Piece, is_valid_cell
from omega_chess.game.controller import GameController, GameEvent
from omega_chess.game.display import board_to_str
from omega_chess.game.moves import Move, MoveRejection
from omega_chess.game.selection import MoveSelector
from omega_chess.game.types import COLS, ROWS, Color, GameStatus, PieceKind, Player

__all__ = [
    "Board",
    "COLS",
    "Color",
    "EMPTY",
    "GameController",
    "GameEvent",
    "GameStatus",
    "Move",
    "MoveRejection",
    "MoveSelector",
    "Piece",
    "PieceKind",
    "Player",
    "ROWS",
    "board_to_str",
    "is_valid_cell",
]
