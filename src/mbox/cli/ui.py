"""Output sink shared by the orchestrator and commands."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from datetime import datetime
from enum import Enum, Flag, auto
from pathlib import Path
from typing import Any, Iterator, List, TextIO

import yaml


class Pipe(Flag):
    STDOUT = auto()
    STDERR = auto()
    FILE = auto()
    ALL = STDOUT | STDERR | FILE


class ApiFormat(str, Enum):
    NONE = "none"
    JSON = "json"
    YAML = "yaml"
    PLAIN = "plain"

    @classmethod
    def parse(cls, value: str) -> "ApiFormat | None":
        lowered = value.lower()
        for member in cls:
            if member.value == lowered:
                return member
        return None


def verbose_path_for(path: Path) -> Path:
    return path.with_name(f"{path.stem}.verbose{path.suffix}")


class UI:
    """Routes messages to the terminal and the invocation's log files."""

    def __init__(self, *, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self.available_pipes = Pipe.ALL
        self.info_log_path: Path | None = None
        self.verbose_log_path: Path | None = None
        self.verbose = False
        self.show_help = False
        self.api_format = ApiFormat.NONE
        self.status_code = 0
        self.root_path: Path | None = None
        self.dev_root: Path | None = None
        self.duration: float | None = None
        self.indents: List[str] = []
        self._summaries: List[str] = []

    @property
    def stdout(self) -> TextIO:
        return self._stdout or sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr or sys.stderr

    @property
    def api_enabled(self) -> bool:
        return self.api_format is not ApiFormat.NONE

    def configure_logfile(self, path: Path) -> None:
        self.info_log_path = path
        self.verbose_log_path = verbose_path_for(path)

    def disable_logfile(self) -> None:
        self.available_pipes &= ~Pipe.FILE

    @property
    def logfile_enabled(self) -> bool:
        return bool(self.available_pipes & Pipe.FILE)

    @contextmanager
    def indent(self, prefix: str = "  ") -> Iterator[None]:
        self.indents.append(prefix)
        try:
            yield
        finally:
            if self.indents:
                self.indents.pop()

    def log_info(self, message: str, pipe: Pipe = Pipe.STDOUT | Pipe.FILE) -> None:
        self._emit(message, pipe)

    def log_error(self, message: str) -> None:
        self._emit(f"[ERROR] {message}", Pipe.STDERR | Pipe.FILE)

    def log_verbose(self, message: str, pipe: Pipe = Pipe.STDOUT | Pipe.FILE) -> None:
        if not self.verbose:
            pipe &= Pipe.FILE
        self._emit(message, pipe, verbose_only=True)

    def log_summary(self, message: str) -> None:
        self._summaries.append(message)

    def flush_summary(self) -> None:
        summaries, self._summaries = self._summaries, []
        for message in summaries:
            self._emit(message, Pipe.STDERR | Pipe.FILE)

    def log_api(self, data: Any) -> None:
        self._write(self.stdout, self.format_api(data))

    def format_api(self, data: Any) -> str:
        if self.api_format is ApiFormat.YAML:
            return yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip("\n")
        if self.api_format is ApiFormat.PLAIN:
            return _plain(data)
        return json.dumps(data, ensure_ascii=False, indent=2)

    def flush(self) -> None:
        for stream in (self.stdout, self.stderr):
            stream.flush()

    def _decorate(self, message: str) -> str:
        prefix = "".join(self.indents)
        if not prefix:
            return message
        return "\n".join(prefix + line if line else line for line in message.split("\n"))

    def _emit(self, message: str, pipe: Pipe, *, verbose_only: bool = False) -> None:
        text = self._decorate(message)
        if self.api_enabled and pipe & Pipe.STDOUT:
            # stdout carries only the structured payload in api mode
            pipe = (pipe & ~Pipe.STDOUT) | Pipe.STDERR
        if pipe & Pipe.STDOUT:
            self._write(self.stdout, text)
        if pipe & Pipe.STDERR:
            self._write(self.stderr, text)
        if pipe & Pipe.FILE and self.logfile_enabled:
            if not verbose_only:
                self._append(self.info_log_path, text)
            self._append(self.verbose_log_path, text)

    @staticmethod
    def _write(stream: TextIO, text: str) -> None:
        stream.write(text + "\n")

    @staticmethod
    def _append(path: Path | None, text: str) -> None:
        if path is None:
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%H:%M:%S")
        with path.open("a", encoding="utf-8") as fh:
            for line in text.split("\n"):
                fh.write(f"[{stamp}] {line}\n")


def _plain(data: Any) -> str:
    if isinstance(data, dict):
        lines = []
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value, ensure_ascii=False)
            lines.append(f"{key}: {value}")
        return "\n".join(lines)
    if isinstance(data, list):
        return "\n".join(str(item) for item in data)
    return str(data)


__all__ = ["ApiFormat", "Pipe", "UI", "verbose_path_for"]
