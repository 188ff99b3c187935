"""Command tree and resolution of parsed arguments to a command type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Sequence, Type, Union

from mbox.domain.errors import ArgumentError

from .arguments import ParsedArguments
from .command import Command

if TYPE_CHECKING:  # pragma: no cover
    from .context import CommandContext


class CommandGroup:
    """Node of the command tree; ``command`` runs when the walk stops here."""

    def __init__(
        self,
        name: str = "",
        command: Type[Command] | None = None,
        parent: "CommandGroup | None" = None,
    ) -> None:
        self.name = name
        self.command = command
        self.parent = parent
        self.children: Dict[str, CommandGroup] = {}

    @property
    def path(self) -> List[str]:
        names: list[str] = []
        node: CommandGroup | None = self
        while node is not None and node.parent is not None:
            names.append(node.name)
            node = node.parent
        return list(reversed(names))

    @property
    def full_name(self) -> str:
        return " ".join(self.path)

    def child(self, name: str) -> "CommandGroup | None":
        return self.children.get(name)

    def add_command(self, path: Union[str, Sequence[str]], command: Type[Command]) -> "CommandGroup":
        names = path.split() if isinstance(path, str) else list(path)
        node = self
        for name in names:
            node = node.children.setdefault(name, CommandGroup(name, parent=node))
        if node.command is not None:
            raise ValueError(f"Command `{' '.join(names)}` already registered")
        node.command = command
        return node

    def walk(self, argv: ParsedArguments) -> "CommandGroup | None":
        """Consume path segments from ``argv``; ``None`` if one is unknown."""

        group = self
        while group.children:
            token = argv.peek_argument()
            if token is None:
                break
            child = group.child(token)
            if child is None:
                if group.command is not None and group.command.arguments():
                    break
                return None
            argv.shift_argument()
            group = child
        return group


@dataclass
class ResolvedCommand:
    group: CommandGroup
    command: Type[Command]


def resolve_command(
    root: CommandGroup,
    argv: ParsedArguments,
    context: "CommandContext",
    *,
    base: Type[Command] = Command,
) -> ResolvedCommand:
    group = root.walk(argv)
    if group is None:
        # Surface errors in the shared options before reporting the unknown command.
        base(context, argv).setup()
        raise ArgumentError.invalid_command(argv.peek_argument())
    if group.command is None:
        raise ArgumentError.invalid_command(None)
    command = group.command.forward_command or group.command
    return ResolvedCommand(group=group, command=command)


__all__ = ["CommandGroup", "ResolvedCommand", "resolve_command"]
