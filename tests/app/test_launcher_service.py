from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from mbox.app.launcher.service import LauncherService, script_command
from mbox.domain.launcher import LauncherItem, LauncherType


class RecordingRunner:
    def __init__(self, codes: Dict[str, int] | None = None) -> None:
        self.codes = codes or {}
        self.calls: List[Tuple[List[str], Path, Dict[str, str]]] = []

    def __call__(self, args: List[str], cwd: Path, env: Dict[str, str]) -> int:
        self.calls.append((args, cwd, env))
        return self.codes.get(Path(args[-1]).name, 0)

    @property
    def scripts(self) -> List[str]:
        return [Path(args[-1]).name for args, _, _ in self.calls]


def _item(tmp_path: Path, name: str, **scripts: str) -> LauncherItem:
    return LauncherItem(
        plugin_name="foo",
        item_name=name,
        scripts={LauncherType(kind): tmp_path / path for kind, path in scripts.items()},
        plugin_path=tmp_path,
    )


def _service(tmp_path: Path, runner, messages: List[str] | None = None) -> LauncherService:
    sink = messages if messages is not None else []
    return LauncherService(
        workspace_root=tmp_path / "workspace",
        temp_dir=lambda: tmp_path / "tmp",
        runner=runner,
        environ={"PATH": "/usr/bin"},
        info=sink.append,
        error=sink.append,
    )


def test_install_runs_check_first(tmp_path: Path) -> None:
    runner = RecordingRunner({"check.sh": 1})
    item = _item(tmp_path, "a", check="check.sh", install="install.sh")
    result = _service(tmp_path, runner).install_launcher_items([item])
    assert runner.scripts == ["check.sh", "install.sh"]
    assert result.to_dict() == {"success": ["foo/a"], "failed": []}


def test_passing_check_skips_install(tmp_path: Path) -> None:
    runner = RecordingRunner()
    item = _item(tmp_path, "a", check="check.sh", install="install.sh")
    messages: List[str] = []
    result = _service(tmp_path, runner, messages).install_launcher_items([item])
    assert runner.scripts == ["check.sh"]
    assert result.success == ["foo/a"]
    assert "[foo/a] already installed" in messages


def test_explicit_script_type_runs_only_that_script(tmp_path: Path) -> None:
    runner = RecordingRunner()
    item = _item(tmp_path, "a", check="check.sh", install="install.sh", uninstall="uninstall.sh")
    _service(tmp_path, runner).install_launcher_items([item], LauncherType.UNINSTALL)
    assert runner.scripts == ["uninstall.sh"]


def test_missing_script_fails_item(tmp_path: Path) -> None:
    runner = RecordingRunner()
    result = _service(tmp_path, runner).install_launcher_items([_item(tmp_path, "a")])
    assert result.failed == ["foo/a"]
    assert runner.calls == []


def test_failures_do_not_stop_later_items(tmp_path: Path) -> None:
    runner = RecordingRunner({"bad.sh": 3})
    bad = _item(tmp_path, "bad", install="bad.sh")
    good = _item(tmp_path, "good", install="good.sh")
    result = _service(tmp_path, runner).install_launcher_items([bad, good, bad])
    assert result.to_dict() == {"success": ["foo/good"], "failed": ["foo/bad"]}
    assert result.exit_code == 1
    assert runner.scripts == ["bad.sh", "good.sh"]


def test_runner_os_error_fails_item(tmp_path: Path) -> None:
    def runner(args, cwd, env):
        raise PermissionError(13, "Permission denied")

    result = _service(tmp_path, runner).install_launcher_items([_item(tmp_path, "a", install="install.sh")])
    assert result.failed == ["foo/a"]


def test_script_environment(tmp_path: Path) -> None:
    runner = RecordingRunner()
    _service(tmp_path, runner).install_launcher_items([_item(tmp_path, "a", install="install.sh")])
    _, cwd, env = runner.calls[0]
    assert cwd == tmp_path
    assert env["PATH"] == "/usr/bin"
    assert env["MBOX_PLUGIN_NAME"] == "foo"
    assert env["MBOX_PLUGIN_PATH"] == str(tmp_path)
    assert env["MBOX_LAUNCHER_ITEM"] == "a"
    assert env["MBOX_LAUNCHER_TYPE"] == "install"
    assert env["MBOX_ROOT"] == str(tmp_path / "workspace")
    assert env["MBOX_TMPDIR"] == str(tmp_path / "tmp")


def test_script_command_by_suffix(tmp_path: Path) -> None:
    assert script_command(tmp_path / "a.sh") == ["sh", str(tmp_path / "a.sh")]
    assert script_command(tmp_path / "a.py") == [sys.executable, str(tmp_path / "a.py")]
    assert script_command(tmp_path / "a") == [str(tmp_path / "a")]


@pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")
def test_real_scripts_run_in_plugin_directory(tmp_path: Path, make_plugin) -> None:
    root = make_plugin(
        "real",
        launcher=[{"name": "touch", "scripts": {"install": "install.sh"}}],
        scripts={"install.sh": '#!/bin/sh\necho "$MBOX_LAUNCHER_ITEM" > "$MBOX_ROOT/marker"\n'},
    )
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    item = LauncherItem(
        plugin_name="real",
        item_name="touch",
        scripts={LauncherType.INSTALL: root / "install.sh"},
        plugin_path=root,
    )
    service = LauncherService(workspace_root=workspace, temp_dir=lambda: tmp_path)
    result = service.install_launcher_items([item])
    assert result.success == ["real/touch"]
    assert (workspace / "marker").read_text(encoding="utf-8").strip() == "touch"
