"""Domain model for installed plugin packages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from .launcher import LauncherItem, LauncherType

MANIFEST_FILENAME = "manifest.yaml"


class ManifestError(ValueError):
    """Raised when a plugin manifest cannot be turned into a package."""


@dataclass(frozen=True)
class PluginPackage:
    name: str
    version: str
    path: Path
    description: str = ""
    required: bool = False
    roles: Tuple[str, ...] = ()
    cli_requirement: str | None = None
    launcher_items: Tuple[LauncherItem, ...] = field(default_factory=tuple)

    @property
    def has_launcher(self) -> bool:
        return bool(self.launcher_items)

    def is_compatible(self, cli_version: str) -> bool:
        if not self.cli_requirement:
            return True
        return Version(cli_version) in SpecifierSet(self.cli_requirement)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "path": self.path.as_posix(),
            "description": self.description,
            "required": self.required,
            "roles": list(self.roles),
            "launcher": [item.to_dict() for item in self.launcher_items],
        }

    def detail_description(self) -> str:
        lines = [f"{self.name} ({self.version})", f"  Path: {self.path.as_posix()}"]
        if self.description:
            lines.append(f"  Description: {self.description}")
        if self.roles:
            lines.append(f"  Roles: {', '.join(self.roles)}")
        if self.launcher_items:
            lines.append("  Launcher:")
            for item in self.launcher_items:
                suffix = f" [{', '.join(item.roles)}]" if item.roles else ""
                lines.append(f"    - {item.item_name} ({item.launcher_type.value}){suffix}")
        return "\n".join(lines)

    @classmethod
    def from_manifest(cls, root: Path, manifest: Dict[str, Any]) -> "PluginPackage":
        name = manifest["name"]
        try:
            version = str(Version(str(manifest["version"])))
        except InvalidVersion as exc:
            raise ManifestError(f"[{name}] invalid version {manifest['version']!r}") from exc
        requirement = (manifest.get("compatibility") or {}).get("cli")
        if requirement:
            try:
                SpecifierSet(requirement)
            except InvalidSpecifier as exc:
                raise ManifestError(f"[{name}] invalid cli compatibility {requirement!r}") from exc
        items = _launcher_items(name, root, manifest.get("launcher") or [])
        return cls(
            name=name,
            version=version,
            path=root,
            description=manifest.get("description", ""),
            required=bool(manifest.get("required", False)),
            roles=tuple(manifest.get("roles") or ()),
            cli_requirement=requirement,
            launcher_items=items,
        )


def _launcher_items(plugin_name: str, root: Path, raw_items: List[Dict[str, Any]]) -> Tuple[LauncherItem, ...]:
    items: list[LauncherItem] = []
    seen: set[str] = set()
    for raw in raw_items:
        item_name = raw["name"]
        key = item_name.lower()
        if key in seen:
            raise ManifestError(f"[{plugin_name}] duplicate launcher item {item_name!r}")
        seen.add(key)
        launcher_type = LauncherType.parse(raw.get("type", LauncherType.INSTALL.value))
        if launcher_type is None:
            raise ManifestError(f"[{plugin_name}] launcher item {item_name!r} has unknown type {raw['type']!r}")
        scripts = {}
        for kind, relative in (raw.get("scripts") or {}).items():
            parsed = LauncherType.parse(kind)
            if parsed is None:
                raise ManifestError(f"[{plugin_name}] launcher item {item_name!r} has unknown script {kind!r}")
            scripts[parsed] = root / relative
        items.append(
            LauncherItem(
                plugin_name=plugin_name,
                item_name=item_name,
                launcher_type=launcher_type,
                roles=tuple(raw.get("roles") or ()),
                scripts=scripts,
                plugin_path=root,
            )
        )
    return tuple(items)


__all__ = ["MANIFEST_FILENAME", "ManifestError", "PluginPackage"]
