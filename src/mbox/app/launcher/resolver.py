"""Resolve user supplied launcher names into launcher items."""

from __future__ import annotations

from typing import List, Mapping, Protocol, Sequence

from mbox.domain.errors import ArgumentError, UserError
from mbox.domain.launcher import LauncherItem
from mbox.domain.plugin import PluginPackage


class LauncherCatalog(Protocol):  # pragma: no cover
    @property
    def all_packages(self) -> Mapping[str, PluginPackage]:
        ...

    def package(self, name: str) -> PluginPackage | None:
        ...

    def active_packages(self) -> List[PluginPackage]:
        ...

    def launcher_items_for(self, packages: Sequence[PluginPackage], roles: Sequence[str]) -> List[LauncherItem]:
        ...


def split_launcher_name(name: str) -> tuple[str, str | None]:
    plugin_name, _, item_name = name.partition("/")
    return plugin_name, item_name or None


def resolve_launcher_items(
    names: Sequence[str],
    roles: Sequence[str],
    catalog: LauncherCatalog,
    *,
    all_plugins: bool = False,
) -> List[LauncherItem]:
    """Turn ``plugin`` and ``plugin/item`` tokens into launcher items.

    Items keep the order of ``names``; duplicates are preserved. With no
    names the active plugins (or every plugin when ``all_plugins`` is set)
    are filtered by ``roles`` instead.
    """

    items: list[LauncherItem] = []
    for name in names:
        items.extend(_resolve_name(name, roles, catalog))
    if names:
        return items
    packages = list(catalog.all_packages.values()) if all_plugins else catalog.active_packages()
    return catalog.launcher_items_for(packages, roles)


def _resolve_name(name: str, roles: Sequence[str], catalog: LauncherCatalog) -> List[LauncherItem]:
    plugin_name, item_name = split_launcher_name(name)
    plugin = catalog.package(plugin_name)
    if plugin is None:
        raise ArgumentError.invalid_value(name, "name")
    if not plugin.has_launcher:
        raise UserError(f"[{plugin.name}] No launcher in the plugin.")
    if item_name is None:
        if not roles:
            return list(plugin.launcher_items)
        matched = catalog.launcher_items_for([plugin], roles)
        if not matched:
            raise UserError(f"[{plugin.name}] No launcher item for roles: {', '.join(roles)}.")
        return matched
    wanted = item_name.lower()
    for item in plugin.launcher_items:
        if item.item_name.lower() == wanted:
            return [item]
    raise ArgumentError.invalid_value(name, "name")


__all__ = ["LauncherCatalog", "resolve_launcher_items", "split_launcher_name"]
