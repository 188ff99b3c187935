"""Execution context threaded through every command of one invocation."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Mapping

from mbox.app.launcher.service import LauncherService, ScriptRunner, run_script
from mbox.app.plugins.registry import PluginRegistry
from mbox.settings import RuntimeSettings

from .ui import UI


class CommandContext:
    def __init__(
        self,
        settings: RuntimeSettings,
        ui: UI,
        *,
        environ: Mapping[str, str] | None = None,
        registry: PluginRegistry | None = None,
        runner: ScriptRunner = run_script,
    ) -> None:
        self.settings = settings
        self.ui = ui
        self.environ = os.environ if environ is None else environ
        self._registry = registry
        self._runner = runner
        self._temp_dir: Path | None = None

    @property
    def workspace_root(self) -> Path:
        return self.ui.root_path or Path(os.getcwd())

    @property
    def plugin_search_paths(self) -> List[Path]:
        paths = list(self.settings.plugin_dirs)
        if self.ui.dev_root is not None:
            paths.insert(0, self.ui.dev_root)
        return paths

    @property
    def registry(self) -> PluginRegistry:
        if self._registry is None:
            self._registry = PluginRegistry.discover(
                self.plugin_search_paths,
                workspace_root=self.workspace_root,
                cli_version=self.settings.cli_version,
            )
            for issue in self._registry.issues:
                self.ui.log_verbose(f"Skipped plugin: {issue}")
        return self._registry

    def launcher_service(self) -> LauncherService:
        return LauncherService(
            workspace_root=self.workspace_root,
            temp_dir=self.temp_dir,
            runner=self._runner,
            environ=self.environ,
            info=self.ui.log_info,
            error=self.ui.log_error,
        )

    def temp_dir(self) -> Path:
        if self._temp_dir is None:
            self._temp_dir = Path(tempfile.mkdtemp(prefix="mbox-"))
        return self._temp_dir

    def remove_temp_dir(self) -> None:
        if self._temp_dir is not None:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            self._temp_dir = None


__all__ = ["CommandContext"]
