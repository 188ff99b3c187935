from __future__ import annotations

from pathlib import Path

import pytest

from mbox.settings import RuntimeSettings, load_settings
from mbox.utils.telemetry import iter_events, record_event, telemetry_enabled


@pytest.fixture()
def settings(tmp_path: Path) -> RuntimeSettings:
    return RuntimeSettings(home_dir=tmp_path, state_dir=tmp_path / "state", log_dir=tmp_path / "logs")


def test_record_and_iterate(settings: RuntimeSettings) -> None:
    record_event(settings, "command", {"command": "plugin list"}, status="ok", duration_ms=12.5, environ={})
    events = list(iter_events(settings))
    assert len(events) == 1
    assert events[0]["event"] == "command"
    assert events[0]["payload"] == {"command": "plugin list"}
    assert events[0]["durationMs"] == 12.5


def test_opt_out(settings: RuntimeSettings) -> None:
    assert not telemetry_enabled({"MBOX_TELEMETRY": "off"})
    record_event(settings, "command", environ={"MBOX_TELEMETRY": "0"})
    assert not settings.telemetry_file.exists()


def test_rejects_unknown_level(settings: RuntimeSettings) -> None:
    with pytest.raises(ValueError):
        record_event(settings, "command", level="debug", environ={})


def test_corrupt_lines_are_skipped(settings: RuntimeSettings) -> None:
    settings.telemetry_file.parent.mkdir(parents=True)
    settings.telemetry_file.write_text('not json\n\n{"event": "launch"}\n', encoding="utf-8")
    assert [event["event"] for event in iter_events(settings)] == ["launch"]


def test_load_settings_from_environment(tmp_path: Path) -> None:
    extra = tmp_path / "extra"
    loaded = load_settings({"MBOX_HOME": str(tmp_path / "home"), "MBOX_PLUGIN_PATH": str(extra)})
    assert loaded.home_dir == tmp_path / "home"
    assert loaded.log_dir == tmp_path / "home" / "logs"
    assert loaded.plugin_dirs == (extra, tmp_path / "home" / "plugins")
    assert loaded.telemetry_file == tmp_path / "home" / "logs" / "telemetry.jsonl"
