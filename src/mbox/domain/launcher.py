"""Value objects for plugin launcher items."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

LAUNCH_FAILED = 1


class LauncherType(str, Enum):
    """Kind of script used to run a launcher item."""

    CHECK = "check"
    INSTALL = "install"
    UNINSTALL = "uninstall"

    @classmethod
    def parse(cls, value: str) -> "LauncherType | None":
        lowered = value.lower()
        for member in cls:
            if member.value == lowered:
                return member
        return None


@dataclass(frozen=True)
class LauncherItem:
    """One launchable unit owned by a plugin."""

    plugin_name: str
    item_name: str
    launcher_type: LauncherType = LauncherType.INSTALL
    roles: Tuple[str, ...] = ()
    scripts: Mapping[LauncherType, Path] = field(default_factory=dict, hash=False, compare=False)
    plugin_path: Path | None = field(default=None, hash=False, compare=False)

    @property
    def identifier(self) -> str:
        return f"{self.plugin_name}/{self.item_name}"

    def script_for(self, launcher_type: LauncherType) -> Path | None:
        return self.scripts.get(launcher_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.item_name,
            "type": self.launcher_type.value,
            "roles": list(self.roles),
            "scripts": {kind.value: path.as_posix() for kind, path in self.scripts.items()},
        }


@dataclass
class LaunchResult:
    """Aggregate outcome of launching a set of items.

    Every distinct requested item lands in exactly one of the two lists,
    in the order it was first requested.
    """

    success: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def record(self, item: LauncherItem, ok: bool) -> None:
        identifier = item.identifier
        if identifier in self.success or identifier in self.failed:
            return
        (self.success if ok else self.failed).append(identifier)

    def contains(self, item: LauncherItem) -> bool:
        return item.identifier in self.success or item.identifier in self.failed

    @property
    def exit_code(self) -> int:
        return LAUNCH_FAILED if self.failed else 0

    def to_dict(self) -> Dict[str, List[str]]:
        return {"success": list(self.success), "failed": list(self.failed)}


def roles_match(declared: Iterable[str], requested: Iterable[str]) -> bool:
    requested_set = {role for role in requested if role}
    if not requested_set:
        return True
    declared_set = {role for role in declared if role}
    if not declared_set:
        return True
    return bool(declared_set & requested_set)


__all__ = ["LAUNCH_FAILED", "LaunchResult", "LauncherItem", "LauncherType", "roles_match"]
