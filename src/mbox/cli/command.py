"""Base command and its setup, validate, run lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, List, Optional, Tuple, Type

from mbox.domain.errors import ArgumentError

from .arguments import ParsedArguments
from .ui import UI, ApiFormat

if TYPE_CHECKING:  # pragma: no cover
    from .context import CommandContext


@dataclass(frozen=True)
class Argument:
    name: str
    description: str = ""
    plural: bool = False
    required: bool = False


@dataclass(frozen=True)
class Option:
    name: str
    description: str = ""
    values: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Flag:
    name: str
    description: str = ""
    short: str | None = None


class LifecycleState(str, Enum):
    CREATED = "created"
    SETTING_UP = "setting_up"
    VALIDATING = "validating"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"


class Command:
    """A single invocation.

    Subclasses declare their inputs through ``arguments``/``options``/``flags``
    and consume them in ``setup_flags``, ``setup_options`` and
    ``setup_arguments``, calling ``super()`` first so the shared inputs are
    consumed before their own.
    """

    name: ClassVar[str] = ""
    description: ClassVar[Optional[str]] = None
    forward_command: ClassVar[Optional[Type["Command"]]] = None

    @classmethod
    def arguments(cls) -> List[Argument]:
        return []

    @classmethod
    def options(cls) -> List[Option]:
        return [
            Option("root", "Working root path"),
            Option("dev-root", "Development root, required when running as `mdev`"),
            Option("logfile", "Write the log to this file"),
            Option("api", "Structured output format", values=tuple(fmt.value for fmt in ApiFormat)),
        ]

    @classmethod
    def flags(cls) -> List[Flag]:
        return [
            Flag("verbose", "Show verbose logs", short="v"),
            Flag("no-logfile", "Do not write log files"),
            Flag("help", "Show help", short="h"),
        ]

    def __init__(self, context: "CommandContext", argv: ParsedArguments) -> None:
        self.context = context
        self.argv = argv
        self.state = LifecycleState.CREATED

    @property
    def ui(self) -> UI:
        return self.context.ui

    def perform(self) -> None:
        try:
            self.state = LifecycleState.SETTING_UP
            self.setup()
            if self.ui.show_help:
                raise ArgumentError.invalid_command(None)
            self.state = LifecycleState.VALIDATING
            self.validate()
            self.state = LifecycleState.RUNNING
            self.run()
        except BaseException:
            self.state = LifecycleState.FAILED
            raise
        self.state = LifecycleState.FINISHED

    def setup(self) -> None:
        self.setup_flags()
        self.setup_options()
        self.setup_arguments()

    def setup_flags(self) -> None:
        if self.shift_flag("help"):
            self.ui.show_help = True
        if self.shift_flag("verbose"):
            self.ui.verbose = True
        if self.shift_flag("no-logfile"):
            self.ui.disable_logfile()

    def setup_options(self) -> None:
        # Applied before group resolution; consumed here so they are not leftovers.
        for name in ("root", "dev-root", "logfile"):
            self.shift_option(name)
        api = self.shift_option("api")
        if api is not None:
            api_format = ApiFormat.parse(api)
            if api_format is None:
                raise ArgumentError.invalid_value(api, "api")
            self.ui.api_format = api_format

    def setup_arguments(self) -> None:
        pass

    def validate(self) -> None:
        leftover = self.argv.remaining()
        if leftover:
            raise ArgumentError.unrecognized(leftover)

    def run(self) -> None:
        raise ArgumentError.invalid_command(None)

    def shift_flag(self, name: str) -> bool:
        short = next((flag.short for flag in self.flags() if flag.name == name), None)
        return self.argv.shift_flag(name, short)

    def shift_option(self, name: str) -> str | None:
        return self.argv.shift_option(name)

    def shift_options(self, name: str) -> List[str] | None:
        return self.argv.shift_options(name)

    def shift_argument(self, name: str, *, required: bool = False) -> str | None:
        value = self.argv.shift_argument()
        if value is None and required:
            raise ArgumentError.missing_argument(name)
        return value

    def shift_arguments(self, name: str, *, required: bool = False) -> List[str]:
        values = self.argv.shift_arguments()
        if not values and required:
            raise ArgumentError.missing_argument(name)
        return values


__all__ = ["Argument", "Command", "Flag", "LifecycleState", "Option"]
