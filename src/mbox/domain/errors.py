"""Error taxonomy used to compute the process exit code."""

from __future__ import annotations

from enum import Enum

ARGUMENT_ERROR_CODE = 2
USER_ERROR_CODE = 254


class CommanderError(Exception):
    """Base class for classified command failures."""

    default_code = 1

    def __init__(self, description: str = "", *, code: int | None = None) -> None:
        super().__init__(description)
        self.description = description
        self.code = self.default_code if code is None else code

    def __str__(self) -> str:
        return self.description


class ArgumentErrorKind(str, Enum):
    INVALID_COMMAND = "invalid_command"
    INVALID_VALUE = "invalid_value"
    MISSING_VALUE = "missing_value"
    MISSING_ARGUMENT = "missing_argument"
    UNRECOGNIZED = "unrecognized"


class ArgumentError(CommanderError):
    """Malformed or unrecognised command line input.

    An empty description is a silent control signal: the caller prints
    usage help and does not treat the error as a failure.
    """

    default_code = ARGUMENT_ERROR_CODE

    def __init__(
        self,
        kind: ArgumentErrorKind,
        description: str = "",
        *,
        value: str | None = None,
        argument: str | None = None,
    ) -> None:
        super().__init__(description)
        self.kind = kind
        self.value = value
        self.argument = argument

    @classmethod
    def invalid_command(cls, token: str | None = None) -> "ArgumentError":
        description = f"Not found command `{token}`" if token else ""
        return cls(ArgumentErrorKind.INVALID_COMMAND, description, value=token)

    @classmethod
    def invalid_value(cls, value: str, argument: str) -> "ArgumentError":
        return cls(
            ArgumentErrorKind.INVALID_VALUE,
            f"Invalid value `{value}` for `{argument}`",
            value=value,
            argument=argument,
        )

    @classmethod
    def missing_value(cls, option: str) -> "ArgumentError":
        return cls(ArgumentErrorKind.MISSING_VALUE, f"Option `--{option}` requires a value", argument=option)

    @classmethod
    def missing_argument(cls, argument: str) -> "ArgumentError":
        return cls(ArgumentErrorKind.MISSING_ARGUMENT, f"Missing argument `{argument}`", argument=argument)

    @classmethod
    def unrecognized(cls, tokens: list[str]) -> "ArgumentError":
        joined = " ".join(tokens)
        return cls(ArgumentErrorKind.UNRECOGNIZED, f"Unknown arguments: {joined}", value=joined)


class CommandRuntimeError(CommanderError):
    """Internal operation failure with a specific exit code."""

    def __init__(self, description: str = "", code: int = 1) -> None:
        super().__init__(description, code=code)


class UserError(CommanderError):
    """Expected failure the user can act on."""

    default_code = USER_ERROR_CODE

    def __init__(self, description: str = "") -> None:
        super().__init__(description)


class SignalError(CommanderError):
    """Synthesised from a trapped operating system signal."""

    def __init__(self, description: str, signum: int) -> None:
        super().__init__(description, code=signum)
        self.signum = signum


class GenericError(CommanderError):
    """Any other failure coming from the runtime environment."""

    default_code = 0

    def __init__(
        self,
        description: str = "",
        *,
        domain: str = "mbox",
        code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(description, code=code)
        self.domain = domain
        self.reason = reason

    @classmethod
    def from_exception(cls, exc: BaseException) -> "GenericError":
        if isinstance(exc, GenericError):
            return exc
        if isinstance(exc, OSError):
            error = cls(
                exc.strerror or str(exc),
                domain=type(exc).__name__,
                code=exc.errno or 1,
                reason=exc.filename if isinstance(exc.filename, str) else None,
            )
        else:
            error = cls(str(exc) or type(exc).__name__, domain=type(exc).__name__, code=1)
        error.__cause__ = exc
        return error

    def summary(self) -> str:
        if self.reason:
            info = f"(code: {self.code} reason: {self.reason})"
        else:
            info = f"(code: {self.code})"
        return f"Error: {self.domain} {info}\n\t{self.description}"


__all__ = [
    "ARGUMENT_ERROR_CODE",
    "USER_ERROR_CODE",
    "ArgumentError",
    "ArgumentErrorKind",
    "CommandRuntimeError",
    "CommanderError",
    "GenericError",
    "SignalError",
    "UserError",
]
