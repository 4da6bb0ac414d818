"""Shared test fixtures for clawbox."""

from __future__ import annotations

from pathlib import Path

import pytest

from clawbox.ipc.emitter import IpcContext, IpcEmitter

# ---------------------------------------------------------------------------
# Shared helpers (plain functions, not fixtures, importable by test files)
# ---------------------------------------------------------------------------


def make_context(ipc_dir: Path, *, is_main: bool = False, **overrides: object) -> IpcContext:
    """Create an IpcContext with sensible defaults for testing."""
    values: dict = {
        "chat_jid": "team@g.us",
        "group_folder": "team",
        "is_main": is_main,
        "ipc_dir": ipc_dir,
    }
    values.update(overrides)
    return IpcContext(**values)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def ipc_dir(tmp_path: Path) -> Path:
    d = tmp_path / "ipc"
    d.mkdir()
    return d


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    """Sandbox root for file and shell tools."""
    d = tmp_path / "group"
    d.mkdir()
    return d.resolve()


@pytest.fixture()
def main_emitter(ipc_dir: Path) -> IpcEmitter:
    ctx = make_context(ipc_dir, is_main=True, chat_jid="main@g.us", group_folder="main")
    return IpcEmitter(ctx)


@pytest.fixture()
def group_emitter(ipc_dir: Path) -> IpcEmitter:
    return IpcEmitter(make_context(ipc_dir))


@pytest.fixture(autouse=True)
def _isolate_provider_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep real provider configuration out of tests."""
    for var in (
        "CUSTOM_PROVIDER_BASE_URL",
        "CUSTOM_PROVIDER_API_KEY",
        "CUSTOM_PROVIDER_MODEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("CUSTOM_PROVIDER_CONFIG", str(tmp_path / "no-provider-config.json"))
