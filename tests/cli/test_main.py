from __future__ import annotations

from typing import Any, Dict

import pytest

from alphabeta.cli import main as cli


def test_main_runs_app_factory(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: Dict[str, Any] = {}

    def fake_run(app: str, **kwargs: Any) -> None:
        seen["app"] = app
        seen.update(kwargs)

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    cli.main(["--host", "127.0.0.1", "--port", "9000"])
    assert seen["app"] == "alphabeta.protocol.http.app:create_app"
    assert seen["factory"] is True
    assert seen["host"] == "127.0.0.1"
    assert seen["port"] == 9000
    assert seen["log_level"] == "info"
