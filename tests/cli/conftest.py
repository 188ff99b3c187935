from __future__ import annotations

import io
from pathlib import Path

import pytest

from mbox import __version__
from mbox.cli import main as cli_main
from mbox.cli.context import CommandContext
from mbox.cli.ui import UI
from mbox.settings import RuntimeSettings


@pytest.fixture()
def runtime_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> RuntimeSettings:
    """Isolated runtime settings; plugins are discovered from ``tmp_path/plugins``."""
    runtime = tmp_path / "runtime"
    home = runtime / "home"
    state_dir = runtime / "state"
    log_dir = runtime / "logs"
    for directory in (home, state_dir, log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    settings = RuntimeSettings(
        home_dir=home,
        state_dir=state_dir,
        log_dir=log_dir,
        plugin_dirs=(tmp_path / "plugins",),
        cli_version=__version__,
    )
    monkeypatch.setattr(cli_main, "SETTINGS", settings, raising=False)
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.delenv("MBOX_ROLES", raising=False)
    monkeypatch.delenv("MBOX2_DEVELOPMENT_ROOT", raising=False)
    return settings


@pytest.fixture()
def ui() -> UI:
    return UI(stdout=io.StringIO(), stderr=io.StringIO())


@pytest.fixture()
def context(runtime_settings: RuntimeSettings, ui: UI) -> CommandContext:
    return CommandContext(runtime_settings, ui, environ={})
