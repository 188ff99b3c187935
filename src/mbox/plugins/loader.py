"""Runtime command plugin loading for mbox."""

from __future__ import annotations

from typing import List

from mbox.plugins import CommandRegistrar, PluginContext, iter_entry_points
from mbox.settings import RuntimeSettings


def load_plugins(settings: RuntimeSettings, registrar: CommandRegistrar) -> List[str]:
    """Let every ``mbox.plugins`` entry point add commands to ``registrar``."""

    context = PluginContext(settings=settings)
    loaded: list[str] = []
    for entry_point in iter_entry_points():
        plugin = entry_point.load()
        register = getattr(plugin, "register", None)
        if callable(register):
            register(registrar, context)
            loaded.append(entry_point.name)
    return loaded
