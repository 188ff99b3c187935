"""Registry of installed plugin packages."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

import yaml

from mbox import __version__
from mbox.domain.errors import UserError
from mbox.domain.launcher import LauncherItem, roles_match
from mbox.domain.plugin import MANIFEST_FILENAME, ManifestError, PluginPackage

from .schema import iter_schema_errors

WORKSPACE_DIR = ".mbox"
WORKSPACE_CONFIG = "config.yaml"


def workspace_config_path(root: Path) -> Path:
    return root / WORKSPACE_DIR / WORKSPACE_CONFIG


def load_workspace_plugins(root: Path) -> List[str]:
    """Plugin names enabled for the workspace at ``root``."""

    path = workspace_config_path(root)
    if not path.exists():
        return []
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise UserError(f"Invalid workspace config {path}: {exc}") from exc
    plugins = data.get("plugins", []) if isinstance(data, dict) else []
    if not isinstance(plugins, list) or not all(isinstance(name, str) for name in plugins):
        raise UserError(f"Invalid workspace config {path}: `plugins` must be a list of names")
    return plugins


class PluginRegistry:
    """Read-only view over the discovered plugin packages."""

    def __init__(
        self,
        packages: Iterable[PluginPackage],
        *,
        active: Iterable[str] = (),
        issues: Iterable[str] = (),
    ) -> None:
        self._packages: Dict[str, PluginPackage] = {}
        for package in packages:
            self._packages.setdefault(package.name, package)
        self._active = list(dict.fromkeys(active))
        self._issues = list(issues)

    @classmethod
    def discover(
        cls,
        search_paths: Sequence[Path],
        *,
        workspace_root: Path | None = None,
        cli_version: str = __version__,
    ) -> "PluginRegistry":
        packages: list[PluginPackage] = []
        issues: list[str] = []
        seen: set[str] = set()
        for manifest_path in _iter_manifests(search_paths):
            try:
                package = _load_package(manifest_path)
            except ManifestError as exc:
                issues.append(str(exc))
                continue
            if package.name in seen:
                continue
            if not package.is_compatible(cli_version):
                issues.append(f"[{package.name}] requires mbox {package.cli_requirement}, running {cli_version}")
                continue
            seen.add(package.name)
            packages.append(package)
        active = load_workspace_plugins(workspace_root) if workspace_root is not None else []
        return cls(packages, active=active, issues=issues)

    @property
    def all_packages(self) -> Mapping[str, PluginPackage]:
        return dict(self._packages)

    @property
    def issues(self) -> List[str]:
        return list(self._issues)

    def package(self, name: str) -> PluginPackage | None:
        return self._packages.get(name)

    def active_packages(self) -> List[PluginPackage]:
        required = [package for package in self._packages.values() if package.required]
        enabled = [self._packages[name] for name in self._active if name in self._packages]
        ordered: Dict[str, PluginPackage] = {}
        for package in [*required, *enabled]:
            ordered.setdefault(package.name, package)
        return list(ordered.values())

    def launcher_items_for(self, packages: Iterable[PluginPackage], roles: Sequence[str]) -> List[LauncherItem]:
        items: list[LauncherItem] = []
        for package in packages:
            if not package.has_launcher or not roles_match(package.roles, roles):
                continue
            items.extend(item for item in package.launcher_items if roles_match(item.roles, roles))
        return items


def _iter_manifests(search_paths: Sequence[Path]) -> Iterable[Path]:
    for base in search_paths:
        if not base.is_dir():
            continue
        direct = base / MANIFEST_FILENAME
        if direct.is_file():
            yield direct
            continue
        for child in sorted(base.iterdir()):
            candidate = child / MANIFEST_FILENAME
            if child.is_dir() and candidate.is_file():
                yield candidate


def _load_package(manifest_path: Path) -> PluginPackage:
    try:
        manifest = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ManifestError(f"{manifest_path}: {exc}") from exc
    errors = [f"{path or '<root>'}: {message}" for path, message in iter_schema_errors(manifest)]
    if errors:
        raise ManifestError(f"{manifest_path}: " + "; ".join(errors))
    return PluginPackage.from_manifest(manifest_path.parent.resolve(), manifest)


__all__ = ["PluginRegistry", "load_workspace_plugins", "workspace_config_path"]
