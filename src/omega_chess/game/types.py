"""Types and constants for Omega Chess.

Omega Chess の基本型・定数定義。
盤面は 12×12 の配列で表現するが、実際に使えるのは中央の 10×10 と四隅の4マスだけ。
駒は通常のチェスの6種類に Champion と Wizard を加えた8種類。
"""

from __future__ import annotations

from enum import Enum, IntEnum, unique

# 配列サイズ: 12行 × 12列（外周は四隅を除いてパディング）
ROWS = 12
COLS = 12

# 中央 10×10 の範囲（両端を含む）
INNER_FIRST = 1
INNER_LAST = 10

# 四隅のマス（Wizard の初期位置）
CORNERS: tuple[tuple[int, int], ...] = (
    (0, 0),
    (0, COLS - 1),
    (ROWS - 1, 0),
    (ROWS - 1, COLS - 1),
)


@unique
class Color(IntEnum):
    """Piece color. NONE marks an empty square.

    駒の色。NONE は空マスを表す番兵値。
    """

    NONE = 0
    WHITE = 1
    BLACK = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


@unique
class PieceKind(IntEnum):
    """Piece kinds in Omega Chess.

    駒種（8種類 + NONE）。
    値 1..8 は encoding.board_to_planes() のチャンネル順にも対応する。
    """

    NONE = 0
    KING = 1
    QUEEN = 2
    ROOK = 3
    BISHOP = 4
    KNIGHT = 5
    PAWN = 6
    CHAMPION = 7  # 縦横1〜2マス、斜め2マスのジャンプ
    WIZARD = 8    # 斜め1マス、または (1,3) のジャンプ

    @property
    def symbol(self) -> str:
        """One-letter symbol (K, Q, R, B, N, P, C, W); a space for NONE."""
        return _KIND_SYMBOLS[self]

    @property
    def label(self) -> str:
        return self.name.capitalize()


_KIND_SYMBOLS: dict[PieceKind, str] = {
    PieceKind.NONE: " ",
    PieceKind.KING: "K",
    PieceKind.QUEEN: "Q",
    PieceKind.ROOK: "R",
    PieceKind.BISHOP: "B",
    PieceKind.KNIGHT: "N",
    PieceKind.PAWN: "P",
    PieceKind.CHAMPION: "C",
    PieceKind.WIZARD: "W",
}

# NONE を除いた実際の駒種
PIECE_KINDS: tuple[PieceKind, ...] = tuple(k for k in PieceKind if k != PieceKind.NONE)


@unique
class Player(IntEnum):
    """Side to move.

    手番。白（WHITE）は下側（row 10）から上へ、黒（BLACK）は上側（row 1）から下へ進む。
    """

    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> Player:
        """相手プレイヤーを返す。"""
        return Player(1 - self.value)

    @property
    def color(self) -> Color:
        """このプレイヤーの駒の色。"""
        return Color.WHITE if self == Player.WHITE else Color.BLACK

    @property
    def forward(self) -> int:
        """Row delta of a forward step (白は行番号が減る方向)."""
        return -1 if self == Player.WHITE else 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


def player_of(color: Color) -> Player | None:
    """Return the player owning pieces of ``color``, or None for Color.NONE."""
    if color == Color.WHITE:
        return Player.WHITE
    if color == Color.BLACK:
        return Player.BLACK
    return None


@unique
class GameStatus(Enum):
    """Game status as seen by the side to move.

    RUNNING / CHECK だけが実際に計算される。
    CHECKMATE / STALEMATE は全合法手の列挙が必要なため、どの遷移からも生成されない。
    """

    RUNNING = "running"
    CHECK = "check"
    CHECKMATE = "checkmate"  # never produced
    STALEMATE = "stalemate"  # never produced


# 初期配置の後段（列 1..10 の順）
BACK_RANK: tuple[PieceKind, ...] = (
    PieceKind.CHAMPION,
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
    PieceKind.CHAMPION,
)

WHITE_BACK_ROW = 10
WHITE_PAWN_ROW = 9
BLACK_BACK_ROW = 1
BLACK_PAWN_ROW = 2

# 移動・利きの方向定義: (行の変化, 列の変化)
# ジャンプ駒は差分の絶対値の組で定義し、符号はすべての組み合わせを許す
KNIGHT_JUMPS: frozenset[tuple[int, int]] = frozenset({(1, 2), (2, 1)})
CHAMPION_JUMPS: frozenset[tuple[int, int]] = frozenset({(1, 0), (0, 1), (2, 0), (0, 2), (2, 2)})
WIZARD_JUMPS: frozenset[tuple[int, int]] = frozenset({(1, 1), (1, 3), (3, 1)})
