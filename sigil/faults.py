"""
Sigil faults (user-facing errors) and their rendering.

Scope
- FaultCode: canonical, stable numeric identifiers, one per error kind.
- CommandException: base type carrying a message plus read-only options, able
  to render itself with rich (header, message, hint).
- BindingError and its kinds: produced by the binder, returned (not raised)
  inside a BindingResult.
- UnknownCommandError: produced by the dispatcher.

Faults are values
- The core never prints. The binder returns the first fault it meets and the
  dispatcher wraps it in a Failed outcome; only the shell renders faults to a
  terminal stream, via __rich__.

Styling
- __styles__ on __main__ overrides palette entries, __codes__ on __main__
  remaps numeric codes to host labels (see FaultCode.normalize()), __prog__ on
  __main__ names the program in the header.
"""
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_COMMAND
    - options (1111x): UNKNOWN_OPTION, UNEXPECTED_VALUE, MISSING_VALUE, MISSING_OPTION
    - positionals (1112x): TOO_MANY_ARGUMENTS, MISSING_ARGUMENT
    - conversion (1113x): INVALID_TYPE

    spacing leaves room for future kinds without reshuffling existing codes.
    """
    # --- routing errors ---
    UNKNOWN_COMMAND    = 11101

    # --- option errors ---
    UNKNOWN_OPTION     = 11112
    UNEXPECTED_VALUE   = 11113
    MISSING_VALUE      = 11117
    MISSING_OPTION     = 11118

    # --- positional errors ---
    TOO_MANY_ARGUMENTS = 11121
    MISSING_ARGUMENT   = 11125

    # --- conversion errors ---
    INVALID_TYPE       = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels; otherwise the numeric value
        is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog():
    return getattr(__import__("__main__"), "__prog__", None) or os.path.basename(sys.argv[0]) or "sigil"


class CommandException(Exception):
    """
    Base for every user-facing fault.

    Parameters
    - message: str, the human-readable sentence (str(fault) returns it).
    - options: free keyword context. Recognized keys: code, title, hint, prog,
      colorful, fancy, and whatever context the reporter attaches (index,
      token, suggestions, ...).

    Subclasses declare __code__ and __title__; explicit options win.
    """
    __code__ = Unset
    __title__ = "command error"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": None,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    @property
    def title(self):
        return self.options["title"]

    @property
    def hint(self):
        return self.options["hint"]

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r})"

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.message == other.message and dict(self.options) == dict(other.options)

    def __hash__(self):
        return hash((type(self), self.message))

    def __rich__(self):
        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(__import__("__main__"), "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"
        header = Text.assemble(
            "[ ",
            text(self.options.get("prog") or _prog(), "prog-name"),
            " — ",
            text(code, "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]",
        )
        message = text(self.message, "error-message")
        parts = [message]
        if self.hint:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")
        return Group(header, *parts)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class BindingError(CommandException):
    """
    A fault found while binding tokens against a signature.

    Attributes
    - kind / code: the FaultCode.
    - parameter: offending parameter name (the binding name for declared
      parameters, the raw spelling for unknown options, the raw token for
      surplus positionals).
    - fragment: the message fragment; str(error) returns it.
    """
    __title__ = "binding error"

    def __init__(self, message=Unset, /, *, parameter=None, **options):
        super().__init__(message, parameter=parameter, **options)

    @property
    def kind(self):
        return self.options["code"]

    @property
    def parameter(self):
        return self.options["parameter"]

    @property
    def fragment(self):
        return self.message

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r}, parameter={self.parameter!r})"


class UnknownOptionError(BindingError):
    __code__ = FaultCode.UNKNOWN_OPTION
    __title__ = "unknown option"


class MissingArgumentError(BindingError):
    __code__ = FaultCode.MISSING_ARGUMENT
    __title__ = "missing argument"


class MissingOptionError(BindingError):
    __code__ = FaultCode.MISSING_OPTION
    __title__ = "missing option"


class MissingValueError(BindingError):
    __code__ = FaultCode.MISSING_VALUE
    __title__ = "missing option value"


class UnexpectedValueError(BindingError):
    __code__ = FaultCode.UNEXPECTED_VALUE
    __title__ = "flag cannot take a value"


class TooManyArgumentsError(BindingError):
    __code__ = FaultCode.TOO_MANY_ARGUMENTS
    __title__ = "unexpected argument"


class InvalidTypeError(BindingError):
    __code__ = FaultCode.INVALID_TYPE
    __title__ = "invalid value"


class UnknownCommandError(CommandException):
    """
    Dispatcher fault: the command name is not registered.

    options carry `input` (the name asked for) and `suggestions` (close matches,
    for the hint only; the dispatcher never falls back to them).
    """
    __code__ = FaultCode.UNKNOWN_COMMAND
    __title__ = "unknown command"

    @property
    def kind(self):
        return self.options["code"]


__all__ = (
    "FaultCode",
    "CommandException",
    "BindingError",
    "UnknownOptionError",
    "MissingArgumentError",
    "MissingOptionError",
    "MissingValueError",
    "UnexpectedValueError",
    "TooManyArgumentsError",
    "InvalidTypeError",
    "UnknownCommandError",
)
