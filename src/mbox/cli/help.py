"""Usage text for a resolved command."""

from __future__ import annotations

from typing import Any, Dict, List, Type

from .command import Command
from .group import CommandGroup


class Help:
    def __init__(self, command: Type[Command], group: CommandGroup, *, program: str = "mbox") -> None:
        self.command = command
        self.group = group
        self.program = program

    @property
    def usage(self) -> str:
        parts = [self.program, *self.group.path]
        if self.group.children:
            parts.append("<command>")
        for argument in self.command.arguments():
            token = f"<{argument.name}>" + ("..." if argument.plural else "")
            parts.append(token if argument.required else f"[{token}]")
        parts.append("[options]")
        return " ".join(parts)

    @property
    def description(self) -> str:
        lines = [f"Usage: {self.usage}"]
        if self.command.description:
            lines.extend(["", self.command.description])
        if self.group.children:
            lines.extend(["", "Commands:"])
            for name in sorted(self.group.children):
                child = self.group.children[name].command
                summary = child.description if child is not None and child.description else ""
                lines.append(f"  {name:<16}{summary}".rstrip())
        if self.command.arguments():
            lines.extend(["", "Arguments:"])
            for argument in self.command.arguments():
                lines.append(f"  {argument.name:<16}{argument.description}".rstrip())
        lines.extend(["", "Options:"])
        for option in self.command.options():
            label = f"--{option.name} <value>"
            text = option.description
            if option.values:
                text = f"{text} ({', '.join(option.values)})"
            lines.append(f"  {label:<24}{text}".rstrip())
        for flag in self.command.flags():
            label = f"--{flag.name}" + (f", -{flag.short}" if flag.short else "")
            lines.append(f"  {label:<24}{flag.description}".rstrip())
        return "\n".join(lines)

    def api_description(self) -> Dict[str, Any]:
        subcommands: List[Dict[str, Any]] = []
        for name in sorted(self.group.children):
            child = self.group.children[name].command
            subcommands.append({"name": name, "description": child.description if child else None})
        return {
            "command": self.group.full_name,
            "description": self.command.description,
            "usage": self.usage,
            "commands": subcommands,
            "arguments": [
                {"name": arg.name, "description": arg.description, "plural": arg.plural, "required": arg.required}
                for arg in self.command.arguments()
            ],
            "options": [
                {"name": opt.name, "description": opt.description, "values": list(opt.values)}
                for opt in self.command.options()
            ],
            "flags": [
                {"name": flag.name, "description": flag.description, "short": flag.short}
                for flag in self.command.flags()
            ],
        }


__all__ = ["Help"]
