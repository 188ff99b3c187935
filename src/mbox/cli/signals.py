"""Crash and cancel signal supervision."""

from __future__ import annotations

import faulthandler
import signal
import sys
import threading
import traceback
from enum import Enum
from pathlib import Path
from types import FrameType
from typing import Any, Callable, Dict, List, TextIO

from mbox.domain.errors import SignalError

from .ui import UI, Pipe

CRASH_SIGNALS = ("SIGABRT", "SIGQUIT", "SIGTRAP")
# Synchronous faults keep their default action; faulthandler dumps the stack.
FAULT_SIGNALS = ("SIGBUS", "SIGFPE", "SIGILL", "SIGSEGV")
CANCEL_SIGNALS = ("SIGINT", "SIGTERM", "SIGHUP")
IGNORED_SIGNALS = ("SIGTTOU",)


class SignalKind(str, Enum):
    CRASH = "crash"
    CANCEL = "cancel"


def _available(names: tuple[str, ...]) -> List[signal.Signals]:
    return [getattr(signal, name) for name in names if hasattr(signal, name)]


def signal_name(signum: int) -> str:
    described = signal.strsignal(signum)
    if described:
        return described
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"Signal {signum}"


class TerminalState:
    """Saves the terminal attributes of stdin so they can be restored."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._saved: Any = None

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdin

    def _fileno(self) -> int | None:
        if sys.platform == "win32":
            return None
        try:
            if not self.stream.isatty():
                return None
            return self.stream.fileno()
        except (AttributeError, OSError, ValueError):
            return None

    def store(self) -> None:
        fd = self._fileno()
        if fd is None:
            return
        import termios

        self._saved = termios.tcgetattr(fd)

    def restore(self) -> None:
        fd = self._fileno()
        if fd is None or self._saved is None:
            return
        import termios

        termios.tcsetattr(fd, termios.TCSADRAIN, self._saved)


class SignalSupervisor:
    """Turns crash and cancel signals into a ``SignalError`` for ``on_signal``.

    Only the first delivered signal is handled; later ones are ignored while
    the invocation is finishing.
    """

    def __init__(
        self,
        ui: UI,
        on_signal: Callable[[SignalError], None],
        *,
        terminal: TerminalState | None = None,
    ) -> None:
        self.ui = ui
        self._on_signal = on_signal
        self.terminal = terminal or TerminalState()
        self._guard = threading.Lock()
        self._previous: Dict[int, Any] = {}
        self._fault_log: TextIO | None = None
        self._faults_were_enabled = False

    @property
    def handling(self) -> bool:
        return self._guard.locked()

    def install(self) -> None:
        for signum in _available(IGNORED_SIGNALS):
            self._swap(signum, signal.SIG_IGN)
        for signum in _available(CRASH_SIGNALS):
            self._swap(signum, self._handle_crash)
        for signum in _available(CANCEL_SIGNALS):
            self._swap(signum, self._handle_cancel)
        self._faults_were_enabled = faulthandler.is_enabled()

    def trace_faults(self, path: Path) -> None:
        """Dump every thread's stack into ``path`` when a fault signal kills the process."""

        self._close_fault_log()
        path.parent.mkdir(parents=True, exist_ok=True)
        self._fault_log = path.open("a", encoding="utf-8")
        faulthandler.enable(file=self._fault_log, all_threads=True)

    def uninstall(self) -> None:
        previous, self._previous = self._previous, {}
        for signum, handler in previous.items():
            try:
                signal.signal(signum, handler)
            except (OSError, ValueError):
                continue
        if self._fault_log is not None:
            faulthandler.disable()
            self._close_fault_log()
            if self._faults_were_enabled:
                self._restore_fault_handler()

    def _close_fault_log(self) -> None:
        if self._fault_log is not None:
            self._fault_log.close()
            self._fault_log = None

    @staticmethod
    def _restore_fault_handler() -> None:
        try:
            faulthandler.enable(file=sys.__stderr__, all_threads=True)
        except (AttributeError, OSError, RuntimeError, ValueError):
            # No usable stderr descriptor to report to.
            return

    def _swap(self, signum: int, handler: Any) -> None:
        try:
            self._previous[signum] = signal.signal(signum, handler)
        except (OSError, ValueError):
            # Not settable on this platform or outside the main thread.
            return

    def _handle_crash(self, signum: int, frame: FrameType | None) -> None:
        self.handle(signum, frame, SignalKind.CRASH)

    def _handle_cancel(self, signum: int, frame: FrameType | None) -> None:
        self.handle(signum, frame, SignalKind.CANCEL)

    def handle(self, signum: int, frame: FrameType | None, kind: SignalKind) -> None:
        if not self._guard.acquire(blocking=False):
            return
        self.terminal.restore()
        self.ui.indents.clear()
        name = signal_name(signum)
        if kind is SignalKind.CRASH:
            for line in traceback.format_stack(frame):
                self.ui.log_info(line.rstrip("\n"), pipe=Pipe.FILE)
            message = f"Receive Signal: {name}"
        else:
            message = f"[Cancel] {name}"
        self.ui.log_summary(message)
        self._on_signal(SignalError(message, signum))


__all__ = [
    "CANCEL_SIGNALS",
    "CRASH_SIGNALS",
    "FAULT_SIGNALS",
    "IGNORED_SIGNALS",
    "SignalKind",
    "SignalSupervisor",
    "TerminalState",
    "signal_name",
]
