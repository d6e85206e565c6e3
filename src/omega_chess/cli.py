"""CLI entry point for omega-chess: two players at one terminal.

コマンドラインで動く Omega Chess 対局プログラム（人間 対 人間）。

起動方法: `omega-cli` （`--strict` で駒の動き方も検証、`--verbose` でデバッグログ）

入力:
  r c          マスをクリック（1回目: 移動元、2回目: 移動先）
  r,c r,c      移動元と移動先をまとめて指定
  undo / redo  一手戻す / 進める
  hint         選択中の駒の移動先候補を表示
  log          棋譜を表示
  new          新規対局
  quit         終了
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable

from omega_chess.config import DEFAULT_CONFIG, STRICT_CONFIG, GameConfig
from omega_chess.game.controller import GameController
from omega_chess.game.display import board_to_str, format_move
from omega_chess.game.moves import Move, format_square, parse_square, pattern_moves_from
from omega_chess.game.selection import MoveSelector
from omega_chess.game.types import GameStatus

_HELP = "Commands: 'r c' (click), 'r,c r,c' (move), undo, redo, hint, log, new, quit"


def _parse_move(text: str) -> Move | None:
    """Parse "r,c r,c" into a Move. Return None if the text is a single square."""
    parts = text.split()
    if len(parts) == 2 and "," in parts[0] and "," in parts[1]:
        return Move(parse_square(parts[0]), parse_square(parts[1]))
    return None


def _format_log(controller: GameController) -> list[str]:
    lines: list[str] = []
    for i, move in enumerate(controller.played_moves):
        ply = "W" if i % 2 == 0 else "B"
        lines.append(f"  {i // 2 + 1}{ply}: {format_move(move)}")
    return lines or ["  (no moves)"]


def _play(
    controller: GameController,
    selector: MoveSelector,
    move: Move,
    write: Callable[[str], None],
) -> None:
    if controller.attempt(move):
        write(format_move(move))
        return
    reason = controller.last_rejection
    write(f"Illegal move {move}: {reason.value if reason else 'rejected'}")
    selector.reset()


def run_session(
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    config: GameConfig = DEFAULT_CONFIG,
) -> GameController:
    """Run the interactive loop until 'quit' or end of input.

    入出力関数を差し替えられるので、テストでは入力を文字列リストから流し込める。
    最後の GameController を返す。
    """
    controller = GameController(config)
    selector = MoveSelector()

    write("=== Omega Chess ===")
    write("White is uppercase, Black is lowercase.")
    write(_HELP)

    show_board = True
    while True:
        if show_board:
            write("")
            write(board_to_str(controller.board))
            status = " (CHECK)" if controller.status == GameStatus.CHECK else ""
            write(f"{controller.side_to_move.label} to move{status}")
            show_board = False

        prompt = "> "
        if selector.selected is not None:
            prompt = f"[{format_square(selector.selected)}] > "
        try:
            line = read(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            write("\nGame aborted.")
            return controller

        command = line.lower()
        if not command:
            continue
        if command in ("quit", "exit", "q"):
            return controller
        if command == "help":
            write(_HELP)
        elif command == "new":
            controller.start_new_game()
            selector.reset()
            show_board = True
        elif command == "undo":
            if not controller.can_undo:
                write("Nothing to undo.")
            controller.undo()
            selector.reset()
            show_board = True
        elif command == "redo":
            if not controller.can_redo:
                write("Nothing to redo.")
            controller.redo()
            selector.reset()
            show_board = True
        elif command == "log":
            for text in _format_log(controller):
                write(text)
        elif command == "hint":
            if selector.selected is None:
                write("Select a piece first.")
            else:
                targets = pattern_moves_from(controller.board, *selector.selected)
                write("Targets: " + (" ".join(format_square(t) for t in targets) or "none"))
        else:
            try:
                move = _parse_move(line)
                if move is None:
                    row, col = parse_square(line)
                    move = selector.select(
                        row, col, controller.board, controller.side_to_move
                    )
                    if move is None:
                        if selector.selected is None:
                            write("Nothing selected.")
                        continue
            except ValueError as e:
                write(f"Invalid input: {e}")
                continue
            _play(controller, selector, move, write)
            show_board = True


def main(argv: list[str] | None = None) -> None:
    """Run a two-player game in the terminal."""
    parser = argparse.ArgumentParser(prog="omega-cli", description="Play Omega Chess")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="reject moves that do not follow the piece's movement pattern",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    run_session(config=STRICT_CONFIG if args.strict else DEFAULT_CONFIG)


if __name__ == "__main__":
    main()
