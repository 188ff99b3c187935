"""Process-wide execution session."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

TITLE_TOKEN_LIMIT = 20


@dataclass
class Session:
    title: str | None
    is_main: bool = False
    started_at: datetime = field(default_factory=datetime.now)

    def duration(self, finished_at: datetime | None = None) -> float:
        end = finished_at or datetime.now()
        return (end - self.started_at).total_seconds()


def session_title(arguments: Sequence[str]) -> str | None:
    """Join the leading command words, stopping at the first flag or long token."""

    names: list[str] = []
    for arg in arguments:
        if arg.startswith("-") or len(arg) > TITLE_TOKEN_LIMIT:
            break
        names.append(arg)
    return " ".join(names) if names else None


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(max(seconds, 0.0), 60)
    hours, minutes = divmod(int(minutes), 60)
    if hours:
        return f"{hours}h {minutes}m {secs:.0f}s"
    if minutes:
        return f"{minutes}m {secs:.0f}s"
    return f"{secs:.2f}s"


__all__ = ["Session", "format_duration", "session_title"]
