"""Command line tokens with destructive, order dependent reads.

Commands consume what they declare through the ``shift_*`` methods: flags
first, then options, then positional arguments. A token is consumed at most
once; whatever is left over after setup is reported as unrecognised.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from typing import Iterable, List

from mbox.domain.errors import ArgumentError

_NUMBER = re.compile(r"^-\d+(\.\d+)?$")

LONG = "long"
SHORT = "short"
VALUE = "value"


@dataclass
class _Token:
    raw: str
    kind: str
    name: str | None = None
    inline: str | None = None
    literal: bool = False
    consumed: bool = False
    bound: bool = False


def _tokenize(arguments: Iterable[str]) -> List[_Token]:
    tokens: list[_Token] = []
    literal = False
    for arg in arguments:
        if literal:
            tokens.append(_Token(arg, VALUE, literal=True))
        elif arg == "--":
            literal = True
        elif arg.startswith("--"):
            name, sep, value = arg[2:].partition("=")
            tokens.append(_Token(arg, LONG, name=name, inline=value if sep else None))
        elif arg.startswith("-") and len(arg) > 1 and not _NUMBER.match(arg):
            for char in arg[1:]:
                tokens.append(_Token(f"-{char}", SHORT, name=char))
        else:
            tokens.append(_Token(arg, VALUE))
    return tokens


class ParsedArguments:
    def __init__(self, arguments: Iterable[str]) -> None:
        self._raw = list(arguments)
        self._tokens = _tokenize(self._raw)

    @property
    def raw_arguments(self) -> List[str]:
        return list(self._raw)

    @property
    def raw_description(self) -> str:
        return shlex.join(self._raw)

    def _value_after(self, index: int) -> _Token | None:
        following = index + 1
        if following >= len(self._tokens):
            return None
        token = self._tokens[following]
        if token.kind != VALUE or token.consumed or token.literal:
            return None
        return token

    def _option_tokens(self, name: str) -> List[int]:
        return [
            index
            for index, token in enumerate(self._tokens)
            if token.kind == LONG and token.name == name and not token.consumed
        ]

    # Non-destructive reads

    def option(self, name: str) -> str | None:
        """Peek at the last value of ``--name``.

        The value token is reserved for the option so positional reads skip it.
        """

        for index in reversed(self._option_tokens(name)):
            token = self._tokens[index]
            if token.inline is not None:
                return token.inline
            value = self._value_after(index)
            if value is not None:
                value.bound = True
                return value.raw
        return None

    def has_flag(self, name: str, short: str | None = None) -> bool:
        for token in self._tokens:
            if token.consumed:
                continue
            if token.kind == LONG and token.name == name and token.inline is None:
                return True
            if short is not None and token.kind == SHORT and token.name == short:
                return True
        return False

    def peek_argument(self) -> str | None:
        token = self._next_argument()
        return token.raw if token is not None else None

    def remaining(self) -> List[str]:
        return [token.raw for token in self._tokens if not token.consumed]

    # Destructive reads

    def shift_flag(self, name: str, short: str | None = None) -> bool:
        found = False
        for token in self._tokens:
            if token.consumed:
                continue
            if token.kind == LONG and token.name == name:
                if token.inline is not None:
                    raise ArgumentError.invalid_value(token.inline, name)
                token.consumed = found = True
            elif short is not None and token.kind == SHORT and token.name == short:
                token.consumed = found = True
        return found

    def shift_options(self, name: str) -> List[str] | None:
        indexes = self._option_tokens(name)
        if not indexes:
            return None
        values: list[str] = []
        for index in indexes:
            token = self._tokens[index]
            if token.inline is not None:
                values.append(token.inline)
            else:
                value = self._value_after(index)
                if value is None:
                    raise ArgumentError.missing_value(name)
                value.consumed = True
                values.append(value.raw)
            token.consumed = True
        return values

    def shift_option(self, name: str) -> str | None:
        values = self.shift_options(name)
        return values[-1] if values else None

    def shift_argument(self) -> str | None:
        token = self._next_argument()
        if token is None:
            return None
        token.consumed = True
        return token.raw

    def shift_arguments(self) -> List[str]:
        values: list[str] = []
        while (value := self.shift_argument()) is not None:
            values.append(value)
        return values

    def _next_argument(self) -> _Token | None:
        for token in self._tokens:
            if token.kind == VALUE and not token.consumed and not token.bound:
                return token
        return None


__all__ = ["ParsedArguments"]
