"""Runtime settings for the mbox CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from mbox import __version__

HOME_ENV = "MBOX_HOME"
PLUGIN_PATH_ENV = "MBOX_PLUGIN_PATH"


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    state_dir: Path
    log_dir: Path
    plugin_dirs: tuple[Path, ...] = ()
    cli_version: str = __version__

    @property
    def telemetry_file(self) -> Path:
        return self.log_dir / "telemetry.jsonl"


def _default_home_dir(environ: Mapping[str, str]) -> Path:
    value = environ.get(HOME_ENV)
    if value:
        return Path(value).expanduser()
    return Path.home() / ".mbox"


def _extra_plugin_dirs(environ: Mapping[str, str]) -> list[Path]:
    raw = environ.get(PLUGIN_PATH_ENV, "")
    return [Path(item).expanduser() for item in raw.split(os.pathsep) if item.strip()]


def load_settings(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
    env = os.environ if environ is None else environ
    base = _default_home_dir(env)
    plugin_dirs = [*_extra_plugin_dirs(env), base / "plugins"]
    return RuntimeSettings(
        home_dir=base,
        state_dir=base / "state",
        log_dir=base / "logs",
        plugin_dirs=tuple(plugin_dirs),
    )


SETTINGS = load_settings()
