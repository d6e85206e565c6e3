"""Tests for configuration objects."""

from __future__ import annotations

import dataclasses

import pytest

from omega_chess.config import DEFAULT_CONFIG, STRICT_CONFIG, GameConfig, ServerConfig


class TestGameConfig:
    def test_presets(self) -> None:
        assert not DEFAULT_CONFIG.strict_geometry
        assert STRICT_CONFIG.strict_geometry
        assert GameConfig() == DEFAULT_CONFIG

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.strict_geometry = True  # type: ignore[misc]


class TestServerConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("OMEGA_HOST", "OMEGA_PORT", "OMEGA_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        assert ServerConfig.from_env() == ServerConfig()

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OMEGA_HOST", "127.0.0.1")
        monkeypatch.setenv("OMEGA_PORT", "9000")
        monkeypatch.setenv("OMEGA_LOG_LEVEL", "DEBUG")
        config = ServerConfig.from_env()
        assert config == ServerConfig(host="127.0.0.1", port=9000, log_level="debug")

    def test_bad_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OMEGA_PORT", "eighty")
        with pytest.raises(ValueError):
            ServerConfig.from_env()
