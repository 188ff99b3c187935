"""Built-in command tree."""

from __future__ import annotations

from ..command import Command
from ..group import CommandGroup
from .plugin import LaunchAliasCommand, LaunchCommand, ListCommand, PluginCommand


class RootCommand(Command):
    description = "mbox command line tool"


def build_command_tree() -> CommandGroup:
    root = CommandGroup(command=RootCommand)
    root.add_command("plugin", PluginCommand)
    root.add_command("plugin list", ListCommand)
    root.add_command("plugin launch", LaunchCommand)
    root.add_command("launch", LaunchAliasCommand)
    return root


__all__ = [
    "LaunchAliasCommand",
    "LaunchCommand",
    "ListCommand",
    "PluginCommand",
    "RootCommand",
    "build_command_tree",
]
