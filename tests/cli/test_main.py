from __future__ import annotations

from typing import Any, Dict

import pytest

from chess_rules.cli import main as cli
from chess_rules.config import Settings


def test_flags_reach_app_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    # registered so the values main() writes are rolled back afterwards
    monkeypatch.setenv("CHESS_RULES_HOST", "0.0.0.0")
    monkeypatch.setenv("CHESS_RULES_PORT", "8000")
    monkeypatch.setenv("CHESS_RULES_LOG_LEVEL", "INFO")
    calls: Dict[str, Any] = {}

    def fake_run(app: str, **kwargs: Any) -> None:
        calls["app"] = app
        calls.update(kwargs)
        # what the factory would see when uvicorn calls it
        calls["settings"] = Settings()

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)

    cli.main(["--host", "127.0.0.1", "--port", "9001", "--log-level", "debug"])

    assert calls["app"] == "chess_rules.protocol.http.app:create_app"
    assert calls["factory"] is True
    assert calls["port"] == 9001
    assert calls["log_level"] == "debug"
    settings = calls["settings"]
    assert settings.host == "127.0.0.1"
    assert settings.port == 9001
    assert settings.log_level == "DEBUG"
