"""FastAPI web application for playing Omega Chess in the browser.

FastAPI を使った Omega Chess の Web アプリケーション。
2人のプレイヤーが同じブラウザで交互に指す。盤面のクリック操作はサーバ側の
MoveSelector（対局ごとに1つ）で手に変換する。

エンドポイント:
  GET  /                 : フロントエンドの HTML を返す
  POST /api/new-game     : 新規対局を開始（ゲームIDを返す）
  POST /api/move         : 移動元・移動先を指定して指す
  POST /api/select       : マスをクリックする（2回目のクリックで着手）
  POST /api/undo/{id}    : 一手戻す
  POST /api/redo/{id}    : 一手進める
  GET  /api/state/{id}   : 現在の局面情報を取得
  GET  /api/hints/{id}   : 指定した駒の移動先候補
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from omega_chess.config import DEFAULT_CONFIG, STRICT_CONFIG, ServerConfig
from omega_chess.game.attacks import attackers_of
from omega_chess.game.board import is_valid_cell
from omega_chess.game.controller import GameController
from omega_chess.game.display import board_to_str
from omega_chess.game.moves import Move, format_square, pattern_moves_from
from omega_chess.game.selection import MoveSelector
from omega_chess.game.types import COLS, ROWS, GameStatus

logger = logging.getLogger(__name__)

# 静的ファイル（HTML, CSS, JS）のディレクトリ
STATIC_DIR = Path(__file__).parent / "static"

app = FastAPI(title="Omega Chess")
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@dataclass
class Session:
    """One game in progress: the controller plus this session's click state."""

    controller: GameController
    selector: MoveSelector = field(default_factory=MoveSelector)


# 対局情報のインメモリストレージ（サーバ再起動で消える簡易実装）
_games: dict[str, Session] = {}


class NewGameRequest(BaseModel):
    """新規対局リクエストのスキーマ。"""

    strict_geometry: bool = False  # True なら駒の動き方も検証する


class MoveRequest(BaseModel):
    """指し手リクエストのスキーマ。"""

    game_id: str
    src: tuple[int, int]  # (row, col)
    dst: tuple[int, int]


class SelectRequest(BaseModel):
    """クリックリクエストのスキーマ。"""

    game_id: str
    row: int
    col: int


def _get_session(game_id: str) -> Session:
    session = _games.get(game_id)
    if session is None:
        raise HTTPException(404, "Game not found")
    return session


def _state_to_dict(session: Session) -> dict[str, Any]:
    """Convert a session to a JSON-serializable dict.

    フロントエンドの JavaScript がこの形式を受け取って盤面を描画する。
    """
    controller = session.controller
    board = controller.board

    squares: list[list[dict[str, Any] | None]] = []
    for r in range(ROWS):
        row: list[dict[str, Any] | None] = []
        for c in range(COLS):
            piece = board.piece_at(r, c)
            if piece.is_empty:
                row.append(None)
            else:
                row.append(
                    {
                        "kind": piece.kind.name,
                        "color": piece.color.name,
                        "symbol": piece.kind.symbol,
                        "has_moved": piece.has_moved,
                    }
                )
        squares.append(row)

    # 王手をかけている駒（ハイライト用）
    checkers: list[list[int]] = []
    if controller.status == GameStatus.CHECK:
        side = controller.side_to_move
        king = board.find_king(side.color)
        if king is not None:
            checkers = [list(sq) for sq in attackers_of(board, king[0], king[1], side.opponent)]

    selected = session.selector.selected
    return {
        "side_to_move": controller.side_to_move.name,
        "status": controller.status.value,
        "strict_geometry": controller.config.strict_geometry,
        "can_undo": controller.can_undo,
        "can_redo": controller.can_redo,
        "squares": squares,
        "valid": [[is_valid_cell(r, c) for c in range(COLS)] for r in range(ROWS)],
        "selected": list(selected) if selected is not None else None,
        "move_log": [
            {"src": list(m.src), "dst": list(m.dst), "text": str(m)}
            for m in controller.played_moves
        ],
        "checkers": checkers,
        "rows": ROWS,
        "cols": COLS,
        "board_display": board_to_str(board),
    }


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """フロントエンドの HTML を配信する。"""
    index_path = STATIC_DIR / "index.html"
    return HTMLResponse(content=index_path.read_text(encoding="utf-8"))


@app.post("/api/new-game")
async def new_game(req: NewGameRequest) -> dict[str, Any]:
    """新規対局を開始する。対局IDと初期局面情報を返す。"""
    game_id = str(uuid.uuid4())[:8]
    config = STRICT_CONFIG if req.strict_geometry else DEFAULT_CONFIG
    session = Session(controller=GameController(config))
    _games[game_id] = session
    logger.info("new game %s (strict_geometry=%s)", game_id, req.strict_geometry)
    return {"game_id": game_id, "state": _state_to_dict(session)}


@app.post("/api/move")
async def make_move(req: MoveRequest) -> dict[str, Any]:
    """移動元・移動先を指定して指す。不正な手なら 400 と理由を返す。"""
    session = _get_session(req.game_id)
    controller = session.controller
    move = Move(req.src, req.dst)
    if not controller.attempt(move):
        reason = controller.last_rejection
        raise HTTPException(400, f"Illegal move {move}: {reason.value if reason else ''}")
    session.selector.reset()
    return {"move": str(move), "state": _state_to_dict(session)}


@app.post("/api/select")
async def select_square(req: SelectRequest) -> dict[str, Any]:
    """Handle a click on a square.

    1回目のクリックで移動元を選び、2回目で着手する。
    着手できなかった場合も 200 を返し、accepted=False と理由を返す
    （クリック操作では不正手はよくあることなので、エラー扱いにしない）。
    """
    session = _get_session(req.game_id)
    controller = session.controller
    move = session.selector.select(req.row, req.col, controller.board, controller.side_to_move)

    accepted: bool | None = None
    reason: str | None = None
    if move is not None:
        accepted = controller.attempt(move)
        if not accepted and controller.last_rejection is not None:
            reason = controller.last_rejection.value

    selected = session.selector.selected
    return {
        "selected": list(selected) if selected is not None else None,
        "move": str(move) if move is not None else None,
        "accepted": accepted,
        "reason": reason,
        "state": _state_to_dict(session),
    }


@app.post("/api/undo/{game_id}")
async def undo(game_id: str) -> dict[str, Any]:
    """一手戻す。戻せる手がなければ何もしない。"""
    session = _get_session(game_id)
    session.controller.undo()
    session.selector.reset()
    return _state_to_dict(session)


@app.post("/api/redo/{game_id}")
async def redo(game_id: str) -> dict[str, Any]:
    """一手進める。進める手がなければ何もしない。"""
    session = _get_session(game_id)
    session.controller.redo()
    session.selector.reset()
    return _state_to_dict(session)


@app.get("/api/state/{game_id}")
async def get_state(game_id: str) -> dict[str, Any]:
    """現在の局面情報を取得する（ページ再読み込み時などに使用）。"""
    return _state_to_dict(_get_session(game_id))


@app.get("/api/hints/{game_id}")
async def hints(game_id: str, row: int, col: int) -> dict[str, Any]:
    """Return the squares the piece on (row, col) could move to by its pattern.

    キングの安全性は考慮しない（実際に指すと拒否される手も含まれる）。
    """
    session = _get_session(game_id)
    targets = pattern_moves_from(session.controller.board, row, col)
    return {
        "from": format_square((row, col)),
        "targets": [list(t) for t in targets],
    }


def main() -> None:
    """Run the web server.

    `omega-web` または `python -m omega_chess.web.app` で起動する。
    OMEGA_HOST / OMEGA_PORT / OMEGA_LOG_LEVEL で設定を変更できる。
    """
    import uvicorn

    config = ServerConfig.from_env()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)


if __name__ == "__main__":
    main()
