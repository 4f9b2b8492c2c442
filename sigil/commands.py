"""
Sigil command layer: commands, the registry and the dispatcher.

What this module provides
- Command: an immutable {name, description, signature, body} value. The body
  takes the bound mapping and returns whatever the command produces.
- CommandRegistry: read-only name → Command mapping, built once, iterated in
  registration order.
- dispatch(registry, argv): route one command line to help, to a command, or
  to a fault, and report the outcome as a value.

Outcomes
- Invoked(value): the body ran and returned value.
- HelpShown(text, command): help was requested; text is plain help text and
  command the Command it describes (None for the summary).
- Failed(error, message): an UnknownCommandError or a BindingError, plus the
  user-facing message ("Error: …" followed by the usage line for binding
  errors).

Routing rules
- no arguments, or a lone "-h"/"--help" → summary of every command;
- "-h <command>" → detailed help of that command (the binder is bypassed, so
  help works even when required arguments are absent);
- "<command> args…" → tokenize, bind, invoke.

The dispatcher never prints and never exits: the shell decides streams and exit
codes. Exceptions raised by a body propagate unchanged.

Quick start
    >>> deploy = Command("deploy", "Deploy.", Signature(positional("target")), lambda values: values["target"])
    >>> dispatch(CommandRegistry(deploy), ["deploy", "prod"])
    Invoked(value='prod')
"""
import builtins
import difflib
import logging
import re
import shlex
from collections import namedtuple
from collections.abc import Iterable

from .binder import bind
from .faults import *
from .help import HelpLevel, render, summary, usage
from .signatures import Signature
from .tokens import tokenize
from .utils import *
from .utils import IntrospectiveType

logger = logging.getLogger(__name__)

HELP_FLAGS = frozenset({"-h", "--help"})

Invoked = namedtuple("Invoked", ("value",))
HelpShown = namedtuple("HelpShown", ("text", "command"), defaults=(None,))
Failed = namedtuple("Failed", ("error", "message"))


def _sanitize_command(cls, metadata, /):
    """
    Internal: validate the four command fields.

    - name: shell-friendly word r"[^\\W\\d_][\\w:.-]*" (so "db:migrate" and
      "cache.clear" are accepted).
    - description: string, stripped; "" when undeclared.
    - signature: a Signature.
    - body: a callable taking the bound mapping.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\W\d_][\w:.-]*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid command name, got {name!r}")

    if not isinstance(description := metadata["description"], str | Unset | None):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    metadata["description"] = (description or "").strip()

    if not isinstance(metadata["signature"], Signature):
        raise TypeError(f"{cls.__typename__} 'signature' must be a signature")

    if not builtins.callable(metadata["body"]):
        raise TypeError(f"{cls.__typename__} 'body' must be callable")


class Command(metaclass=IntrospectiveType):
    """
    One dispatchable command.

    Fields (read-only)
    - name: the word typed after the program name.
    - description: free text; its first line is the summary.
    - signature: the Signature arguments are bound against.
    - body: Callable[[Mapping[str, object]], object].
    """

    __introspectable__ = (
        "name",
        "description",
        "signature",
        "body",
    )

    __displayable__ = (
        "name",
        "signature",
    )

    def __new__(cls, name, description=Unset, signature=Unset, body=Unset, /):
        metadata = {
            "name": name,
            "description": description,
            "signature": coalesce(signature, Signature()),
            "body": body,
        }
        _sanitize_command(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __call__(self, values, /):
        """
        Run the body with an already bound mapping.
        """
        return self._body(values)

    def __setattr__(self, name, value, /):
        if not name.startswith("_") or hasattr(self, name):
            raise AttributeError(f"{type(self).__typename__} is read-only")
        super().__setattr__(name, value)


class CommandRegistry(metaclass=IntrospectiveType):
    """
    Read-only collection of commands keyed by name.

    Construction
    - CommandRegistry(*commands) or CommandRegistry(iterable_of_commands).

    Raises
    - TypeError for non-command members.
    - ValueError when two commands share a name.
    """

    __introspectable__ = (
        "commands",
    )

    def __new__(cls, *commands):
        if len(commands) == 1 and not isinstance(commands[0], Command):
            if not isinstance(commands[0], Iterable):
                raise TypeError(f"{cls.__typename__} members must be commands")
            commands = tuple(commands[0])

        mapping = {}
        for command in commands:
            if not isinstance(command, Command):
                raise TypeError(f"{cls.__typename__} members must be commands")
            if mapping.setdefault(command.name, command) is not command:
                raise ValueError(f"{cls.__typename__} command name {command.name!r} is already in use")

        self = super().__new__(cls)
        self._commands = mapping
        return self

    def get(self, name, default=None, /):
        return self._commands.get(name, default)

    def suggestions(self, name, /):
        """
        Close matches for a mistyped command name (hints only).
        """
        return tuple(difflib.get_close_matches(name, self._commands, 3))

    def __getitem__(self, name, /):
        return self._commands[name]

    def __iter__(self):
        return iter(self._commands.values())

    def __len__(self):
        return len(self._commands)

    def __contains__(self, name, /):
        return name in self._commands

    def __setattr__(self, name, value, /):
        if not name.startswith("_") or hasattr(self, name):
            raise AttributeError(f"{type(self).__typename__} is read-only")
        super().__setattr__(name, value)


def _unknown(registry, name):
    suggestions = registry.suggestions(name)
    error = UnknownCommandError(
        "unknown command %r" % name,
        input=name,
        suggestions=suggestions,
        hint="did you mean %r?" % suggestions[0] if suggestions else "list the available commands with --help",
    )
    logger.debug("unknown command %r (suggestions: %r)", name, suggestions)
    return Failed(error, "Error: %s" % error)


def dispatch_command(registry, name, args, /):
    """
    Bind args against the named command and invoke its body.

    Parameters
    - registry: CommandRegistry
    - name: the command name.
    - args: the arguments after the command name (Iterable[str] or a shell-like
      string).

    Returns
    - Invoked(body result), or Failed(error, message) for an unknown command or
      a binding failure.
    """
    if not isinstance(registry, CommandRegistry):
        raise TypeError("dispatch_command() first argument must be a command-registry")

    if (command := registry.get(name)) is None:
        return _unknown(registry, name)

    result = bind(command.signature, tokenize(args))
    if not result:
        logger.debug("command %r failed to bind: %s", name, result.error)
        return Failed(result.error, "Error: %s\n%s" % (result.error, usage(command)))

    logger.debug("invoking command %r", name)
    return Invoked(command(dict(result.values)))


def dispatch(registry, argv, /, *, prog=None):
    """
    Route a full command line (program name excluded).

    Parameters
    - registry: CommandRegistry
    - argv: Iterable[str] | str
    - prog: optional program name; when given, the summary starts with a
      usage header naming it.

    Returns
    - Invoked | HelpShown | Failed
    """
    if not isinstance(registry, CommandRegistry):
        raise TypeError("dispatch() first argument must be a command-registry")
    if isinstance(argv, str):
        argv = shlex.split(argv)
    elif isinstance(argv, Iterable):
        argv = list(argv)
    else:
        raise TypeError("dispatch() second argument must be a string or an iterable of strings")

    if not argv or argv == ["-h"] or argv == ["--help"]:
        logger.debug("showing the summary of %d command(s)", len(registry))
        return HelpShown(summary(registry, prog=prog))

    head, *rest = argv
    if head in HELP_FLAGS:
        if (command := registry.get(name := rest[0])) is None:
            return _unknown(registry, name)
        logger.debug("showing the help of %r", name)
        return HelpShown(render(command, HelpLevel.DETAILED), command)

    return dispatch_command(registry, head, rest)


__all__ = (
    # Model
    "Command",
    "CommandRegistry",

    # Outcomes
    "Invoked",
    "HelpShown",
    "Failed",

    # Routing
    "HELP_FLAGS",
    "dispatch",
    "dispatch_command",
)
