"""Command plugin interfaces for mbox."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import metadata
from typing import TYPE_CHECKING, Iterable, Protocol, Sequence, Type, Union

from mbox.settings import RuntimeSettings

if TYPE_CHECKING:  # pragma: no cover
    from mbox.cli.command import Command

ENTRY_POINT_GROUP = "mbox.plugins"


@dataclass(frozen=True)
class PluginContext:
    settings: RuntimeSettings


class CommandRegistrar(Protocol):  # pragma: no cover
    def add_command(self, path: Union[str, Sequence[str]], command: Type["Command"]) -> object:
        ...


class MboxPlugin(Protocol):  # pragma: no cover
    name: str

    def register(self, registrar: CommandRegistrar, context: PluginContext) -> None:
        ...


def iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=ENTRY_POINT_GROUP)
