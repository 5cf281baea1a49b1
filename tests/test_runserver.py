import importlib.util
from pathlib import Path

import pytest

from smartmess.config import Settings

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "runserver.py"


@pytest.fixture
def runserver(monkeypatch):
    spec = importlib.util.spec_from_file_location("smartmess_runserver", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    calls = {"migrations": 0, "served": []}

    def fake_migrations():
        calls["migrations"] += 1

    monkeypatch.setattr(module, "run_migrations_once", fake_migrations)
    monkeypatch.setattr(module.uvicorn, "run", lambda target, **kwargs: calls["served"].append(target))
    module.calls = calls
    return module


def test_migrates_before_serving_when_enabled(runserver, monkeypatch):
    monkeypatch.setattr(runserver, "get_settings", lambda: Settings(run_migrations=True))

    assert runserver.main() == 0
    assert runserver.calls["migrations"] == 1
    assert runserver.calls["served"] == ["smartmess.main:app"]


def test_skips_migrations_when_disabled(runserver, monkeypatch):
    monkeypatch.setattr(runserver, "get_settings", lambda: Settings(run_migrations=False))

    assert runserver.main() == 0
    assert runserver.calls["migrations"] == 0
    assert runserver.calls["served"] == ["smartmess.main:app"]


def test_failed_migration_stops_startup(runserver, monkeypatch):
    def broken():
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(runserver, "get_settings", lambda: Settings(run_migrations=True))
    monkeypatch.setattr(runserver, "run_migrations_once", broken)

    assert runserver.main() == 1
    assert runserver.calls["served"] == []
