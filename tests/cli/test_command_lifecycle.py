from __future__ import annotations

from typing import List

import pytest

from mbox.cli.arguments import ParsedArguments
from mbox.cli.command import Command, Flag, LifecycleState, Option
from mbox.cli.context import CommandContext
from mbox.cli.ui import ApiFormat
from mbox.domain.errors import ArgumentError, ArgumentErrorKind


class RecordingCommand(Command):
    name = "record"
    description = "Records what it consumed"

    @classmethod
    def options(cls) -> List[Option]:
        return [*super().options(), Option("mode", "Mode")]

    @classmethod
    def flags(cls) -> List[Flag]:
        return [*super().flags(), Flag("dry", "Dry run", short="d")]

    def __init__(self, context: CommandContext, argv: ParsedArguments) -> None:
        super().__init__(context, argv)
        self.order: List[str] = []
        self.ran = False

    def setup_flags(self) -> None:
        super().setup_flags()
        self.order.append("flags")
        self.dry = self.shift_flag("dry")

    def setup_options(self) -> None:
        super().setup_options()
        self.order.append("options")
        self.mode = self.shift_option("mode")
        if self.mode == "broken":
            raise ArgumentError.invalid_value(self.mode, "mode")

    def setup_arguments(self) -> None:
        super().setup_arguments()
        self.order.append("arguments")
        self.targets = self.shift_arguments("target")

    def run(self) -> None:
        self.ran = True
        self.ui.log_info("ran")


def test_lifecycle_consumes_in_order_and_runs(context: CommandContext) -> None:
    command = RecordingCommand(context, ParsedArguments(["a", "--mode", "fast", "-d", "b"]))
    command.perform()
    assert command.order == ["flags", "options", "arguments"]
    assert command.dry is True
    assert command.mode == "fast"
    assert command.targets == ["a", "b"]
    assert command.ran
    assert command.state is LifecycleState.FINISHED


def test_setup_error_never_runs(context: CommandContext) -> None:
    command = RecordingCommand(context, ParsedArguments(["--mode", "broken"]))
    with pytest.raises(ArgumentError):
        command.perform()
    assert not command.ran
    assert command.state is LifecycleState.FAILED
    assert context.ui.stdout.getvalue() == ""


def test_leftover_tokens_fail_validation(context: CommandContext) -> None:
    class Strict(RecordingCommand):
        def setup_arguments(self) -> None:
            self.order.append("arguments")

    command = Strict(context, ParsedArguments(["stray", "--bogus"]))
    with pytest.raises(ArgumentError) as excinfo:
        command.perform()
    assert excinfo.value.kind is ArgumentErrorKind.UNRECOGNIZED
    assert excinfo.value.description == "Unknown arguments: stray --bogus"
    assert not command.ran


def test_help_flag_stops_before_validation(context: CommandContext) -> None:
    command = RecordingCommand(context, ParsedArguments(["--help", "--bogus"]))
    with pytest.raises(ArgumentError) as excinfo:
        command.perform()
    assert excinfo.value.description == ""
    assert context.ui.show_help
    assert not command.ran


def test_shared_options_configure_ui(context: CommandContext) -> None:
    command = RecordingCommand(context, ParsedArguments(["--api", "yaml", "--verbose", "--no-logfile"]))
    command.perform()
    assert context.ui.api_format is ApiFormat.YAML
    assert context.ui.verbose
    assert not context.ui.logfile_enabled


def test_unknown_api_format_is_invalid_value(context: CommandContext) -> None:
    command = RecordingCommand(context, ParsedArguments(["--api", "xml"]))
    with pytest.raises(ArgumentError) as excinfo:
        command.perform()
    assert excinfo.value.kind is ArgumentErrorKind.INVALID_VALUE


def test_base_command_run_shows_help(context: CommandContext) -> None:
    with pytest.raises(ArgumentError) as excinfo:
        Command(context, ParsedArguments([])).perform()
    assert excinfo.value.kind is ArgumentErrorKind.INVALID_COMMAND
    assert excinfo.value.description == ""
