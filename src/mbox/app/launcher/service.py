"""Execution of plugin launcher scripts."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping

from mbox.domain.launcher import LaunchResult, LauncherItem, LauncherType

ScriptRunner = Callable[[List[str], Path, Dict[str, str]], int]
Reporter = Callable[[str], None]


def run_script(args: List[str], cwd: Path, env: Dict[str, str]) -> int:
    return subprocess.run(args, cwd=cwd, env=env).returncode


def script_command(script: Path) -> List[str]:
    if script.suffix == ".sh":
        return ["sh", str(script)]
    if script.suffix == ".py":
        return [sys.executable, str(script)]
    return [str(script)]


def _ignore(message: str) -> None:
    return None


class LauncherService:
    """Runs launcher items one by one and aggregates their outcome."""

    def __init__(
        self,
        *,
        workspace_root: Path,
        temp_dir: Callable[[], Path],
        runner: ScriptRunner = run_script,
        environ: Mapping[str, str] | None = None,
        info: Reporter = _ignore,
        error: Reporter = _ignore,
    ) -> None:
        self._workspace_root = workspace_root
        self._temp_dir = temp_dir
        self._runner = runner
        self._environ = os.environ if environ is None else environ
        self._info = info
        self._error = error

    def install_launcher_items(
        self,
        items: Iterable[LauncherItem],
        launcher_type: LauncherType | None = None,
    ) -> LaunchResult:
        result = LaunchResult()
        for item in items:
            if result.contains(item):
                continue
            result.record(item, self.launch(item, launcher_type))
        return result

    def launch(self, item: LauncherItem, launcher_type: LauncherType | None = None) -> bool:
        kind = launcher_type or item.launcher_type
        if launcher_type is None and kind is LauncherType.INSTALL:
            check = item.script_for(LauncherType.CHECK)
            if check is not None and self._execute(item, LauncherType.CHECK, check, quiet=True):
                self._info(f"[{item.identifier}] already installed")
                return True
        script = item.script_for(kind)
        if script is None:
            self._error(f"[{item.identifier}] no `{kind.value}` script")
            return False
        ok = self._execute(item, kind, script)
        if ok:
            self._info(f"[{item.identifier}] {kind.value} succeeded")
        return ok

    def _execute(self, item: LauncherItem, kind: LauncherType, script: Path, *, quiet: bool = False) -> bool:
        args = script_command(script)
        env = self._build_env(item, kind)
        try:
            exit_code = self._runner(args, item.plugin_path or script.parent, env)
        except OSError as exc:
            self._error(f"[{item.identifier}] cannot run {script}: {exc}")
            return False
        if exit_code != 0 and not quiet:
            self._error(f"[{item.identifier}] {kind.value} failed (exit code {exit_code})")
        return exit_code == 0

    def _build_env(self, item: LauncherItem, kind: LauncherType) -> Dict[str, str]:
        env = dict(self._environ)
        env["MBOX_PLUGIN_NAME"] = item.plugin_name
        if item.plugin_path is not None:
            env["MBOX_PLUGIN_PATH"] = str(item.plugin_path)
        env["MBOX_LAUNCHER_ITEM"] = item.item_name
        env["MBOX_LAUNCHER_TYPE"] = kind.value
        env["MBOX_ROOT"] = str(self._workspace_root)
        env["MBOX_TMPDIR"] = str(self._temp_dir())
        env.setdefault("PYTHONUNBUFFERED", "1")
        return env


__all__ = ["LauncherService", "ScriptRunner", "run_script", "script_command"]
