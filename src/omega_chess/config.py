"""Configuration for the Omega Chess engine and its front ends.

エンジンとサーバの設定定義。設定クラスは frozen dataclass で、よく使う組み合わせは
プリセットとして用意しておく。
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """Configuration for GameController.

    Attributes:
        strict_geometry: True なら、駒の動き方（ナイトの跳び方、ルークの直線など）に
                         合わない手を拒否する。False（既定）では構造的なチェックと
                         自玉の安全性だけを見る、寛容な挙動になる。
    """

    strict_geometry: bool = False


# 既定: 駒の動き方は検証しない（寛容モード）
DEFAULT_CONFIG = GameConfig()

# 駒の動き方も検証する
STRICT_CONFIG = GameConfig(strict_geometry=True)


@dataclass(frozen=True)
class ServerConfig:
    """Settings for the web server.

    Attributes:
        host:      バインドするホスト
        port:      待ち受けポート
        log_level: ログレベル（uvicorn と logging の両方に渡す）
    """

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Read OMEGA_HOST, OMEGA_PORT and OMEGA_LOG_LEVEL, falling back to defaults."""
        defaults = cls()
        return cls(
            host=os.environ.get("OMEGA_HOST", defaults.host),
            port=int(os.environ.get("OMEGA_PORT", defaults.port)),
            log_level=os.environ.get("OMEGA_LOG_LEVEL", defaults.log_level).lower(),
        )
