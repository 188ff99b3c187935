#!/usr/bin/env python3
"""Entry point for the mbox CLI."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Mapping, Sequence, TextIO

from mbox.app.launcher.service import ScriptRunner, run_script
from mbox.app.plugins.registry import PluginRegistry
from mbox.domain.errors import (
    ArgumentError,
    CommandRuntimeError,
    GenericError,
    SignalError,
    UserError,
)
from mbox.domain.session import Session, format_duration, session_title
from mbox.plugins.loader import load_plugins
from mbox.settings import SETTINGS, RuntimeSettings
from mbox.utils.telemetry import record_event

from .arguments import ParsedArguments
from .command import Command
from .commands import build_command_tree
from .context import CommandContext
from .exit_codes import DEV_ROOT_MISSING, ELEVATED_INVOCATION, compute_exit_code
from .group import CommandGroup, resolve_command
from .help import Help
from .signals import SignalSupervisor, TerminalState
from .ui import UI, Pipe

PROGRAM = "mbox"
DEV_PROGRAM = "mdev"
DEV_ROOT_ENV = "MBOX2_DEVELOPMENT_ROOT"
ELEVATED_ENV = "SUDO_USER"
GLOBAL_OPTIONS = ("root", "dev-root", "logfile", "api")


class Commander:
    """Drives one invocation from raw arguments to an exit code.

    The normal path and the signal path both end in ``finish`` followed by
    ``exit_app``; teardown runs once whichever path gets there first.
    """

    def __init__(
        self,
        arguments: Sequence[str],
        *,
        settings: RuntimeSettings,
        executable: str = PROGRAM,
        environ: Mapping[str, str] | None = None,
        registry: PluginRegistry | None = None,
        runner: ScriptRunner = run_script,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        terminal: TerminalState | None = None,
        exit_func: Callable[[int], None] = sys.exit,
    ) -> None:
        self.arguments = list(arguments)
        self.executable = executable
        self.settings = settings
        self.environ = os.environ if environ is None else environ
        self.ui = UI(stdout=stdout, stderr=stderr)
        self.context = CommandContext(settings, self.ui, environ=self.environ, registry=registry, runner=runner)
        self.start_time = datetime.now()
        self.session: Session | None = None
        self.root: CommandGroup = build_command_tree()
        self.group: CommandGroup = self.root
        self.command_class: type[Command] = Command
        self.command: Command | None = None
        self.argv: ParsedArguments | None = None
        self.exit_signal: SignalError | None = None
        self.exit_code: int | None = None
        self._finishing = False
        self._finished = False
        self._exit = exit_func
        self.supervisor = SignalSupervisor(self.ui, self._finish_from_signal, terminal=terminal)

    @property
    def finished(self) -> bool:
        return self._finished

    def execute(self) -> int:
        self.session = Session(session_title(self.arguments), is_main=True, started_at=self.start_time)
        self.supervisor.install()
        self.supervisor.terminal.store()
        try:
            refusal = self._preflight()
            if refusal is not None:
                return self.exit_app(refusal)
            try:
                code = self.run_commander()
            except Exception as error:
                if self.exit_signal is not None:
                    return self.exit_app(self.exit_code or 0)
                exit_code = self.finish(self.ui.status_code, error)
                self._hint_logfile(error)
            else:
                if self.exit_signal is not None:
                    return self.exit_app(self.exit_code or 0)
                exit_code = self.finish(code)
        finally:
            self.supervisor.terminal.restore()
        return self.exit_app(exit_code)

    def _preflight(self) -> int | None:
        if self.environ.get(ELEVATED_ENV) is not None:
            self.ui.log_info("[ERROR] Please do not use `sudo`!", pipe=Pipe.STDERR)
            return ELEVATED_INVOCATION

        argv = ParsedArguments(self.arguments)
        self.argv = argv
        for name in GLOBAL_OPTIONS:
            argv.option(name)
        root = argv.option("root")
        if root:
            self.ui.root_path = Path(root).expanduser()
        if Path(self.executable).name == DEV_PROGRAM:
            path = argv.option("dev-root") or self.environ.get(DEV_ROOT_ENV)
            if not path:
                self.ui.log_info(
                    f"[ERROR] `{DEV_PROGRAM}` requires the `--dev-root` option "
                    f"or the `{DEV_ROOT_ENV}` environment variable.",
                    pipe=Pipe.STDERR,
                )
                return DEV_ROOT_MISSING
            self.ui.dev_root = Path(path).expanduser()
        return None

    def _configure_logfile(self, argv: ParsedArguments) -> None:
        if argv.has_flag("no-logfile"):
            self.ui.disable_logfile()
            return
        logfile = argv.option("logfile")
        if logfile and Path(logfile).stem:
            self.ui.configure_logfile(Path(logfile).expanduser())
            return
        stamp = self.start_time.strftime("%Y-%m-%d_%H-%M-%S")
        self.ui.configure_logfile(self.settings.log_dir / f"{stamp}-{os.getpid()}.log")

    def run_commander(self) -> int:
        argv = self.argv
        assert argv is not None
        self._configure_logfile(argv)
        self.ui.log_info(f"[{self.start_time:%Y-%m-%d %H:%M:%S}] {argv.raw_description}", pipe=Pipe.FILE)
        if self.ui.logfile_enabled and self.ui.verbose_log_path is not None:
            self.supervisor.trace_faults(self.ui.verbose_log_path)
        self.ui.verbose = argv.has_flag("verbose", "v")

        thrown: Exception | None = None
        try:
            load_plugins(self.settings, self.root)
            self.execute_command(argv)
        except ArgumentError as error:
            help_text = Help(self.command_class, self.group, program=Path(self.executable).name or PROGRAM)
            if self.ui.show_help and self.ui.api_enabled:
                self.ui.log_api(help_text.api_description())
            else:
                if error.description:
                    self.ui.log_info(error.description, pipe=Pipe.STDERR | Pipe.FILE)
                    self.ui.log_info("", pipe=Pipe.STDERR)
                    thrown = error
                self.ui.log_info(help_text.description, pipe=Pipe.STDERR)
        except (CommandRuntimeError, UserError) as error:
            thrown = error
            if error.description:
                self.ui.log_error(error.description)
        except Exception as error:
            generic = GenericError.from_exception(error)
            thrown = generic
            if isinstance(error, (OSError, GenericError)):
                self.ui.log_error(generic.summary())
            else:
                self.ui.log_error(f"Unknown error occurred.\n\t{generic.description}")

        if thrown is not None:
            raise thrown
        return self.ui.status_code

    def execute_command(self, argv: ParsedArguments) -> str:
        resolved = resolve_command(self.root, argv, self.context)
        self.group = resolved.group
        self.command_class = resolved.command
        self.command = resolved.command(self.context, argv)
        self.command.perform()
        name = self.group.full_name or PROGRAM
        return f"help.{name}" if self.ui.show_help else name

    def finish(self, code: int, error: BaseException | None = None) -> int:
        # A signal arriving from here on leaves teardown to this path.
        self._finishing = True
        self.ui.flush_summary()
        session = self.session or Session(None, started_at=self.start_time)
        self.ui.duration = session.duration()
        duration = format_duration(self.ui.duration)
        self.ui.log_verbose("==" * 20 + " " + duration + " " + "==" * 20, pipe=Pipe.FILE)
        exit_code = compute_exit_code(code, error, help_requested=self.ui.show_help)
        self.exit_code = exit_code
        if self.ui.logfile_enabled:
            record_event(
                self.settings,
                "command",
                {
                    "command": self.group.full_name or PROGRAM,
                    "exit_code": exit_code,
                    "error": type(error).__name__ if error is not None else None,
                },
                status="ok" if exit_code == 0 else "fail",
                duration_ms=self.ui.duration * 1000,
                environ=self.environ,
            )
        return exit_code

    def exit_app(self, code: int) -> int:
        if self._finished:
            return self.exit_code if self.exit_code is not None else code
        self._finished = True
        self.exit_code = code
        self.context.remove_temp_dir()
        self.ui.flush_summary()
        self.ui.flush()
        self.supervisor.uninstall()
        self.session = None
        return code

    def _finish_from_signal(self, error: SignalError) -> None:
        if self._finishing or self._finished:
            return
        self.exit_signal = error
        code = self.finish(error.code, error)
        self.exit_app(code)
        self._exit(code)

    def _hint_logfile(self, error: Exception) -> None:
        if isinstance(error, (UserError, ArgumentError)):
            return
        path = self.ui.verbose_log_path
        if self.ui.logfile_enabled and path is not None and path.exists():
            self.ui.log_info(f"The log was saved: `{path}`", pipe=Pipe.STDERR)


def main(argv: list[str] | None = None, *, executable: str | None = None) -> int:
    if argv is None:
        arguments = sys.argv[1:]
        program = executable or sys.argv[0]
    else:
        arguments = argv
        program = executable or PROGRAM
    commander = Commander(arguments, settings=SETTINGS, executable=program)
    return commander.execute()


if __name__ == "__main__":
    sys.exit(main())
