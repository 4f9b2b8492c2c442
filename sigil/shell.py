"""
Sigil shell: the process-facing side of the dispatcher.

Responsibilities
- read the process arguments, dispatch them and print the outcome with rich:
  help on stdout, faults on stderr;
- map outcomes to exit codes: 0 for help and success (an int returned by the
  body is used as is), 2 for unknown commands and binding failures.

Runtime flags (keyword arguments, then __main__ attributes, then defaults)
- prog: program name for headers (__prog__; basename of sys.argv[0]).
- colorful: styled output (__colorful__; whether stdout is a terminal).
- fancy: faults framed in a panel (__fancy__; False).

Quick start
    if __name__ == "__main__":
        sys.exit(main(registry(deploy, login)))
"""
import logging
import os
import os.path
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from .commands import CommandRegistry, Invoked, HelpShown, Failed, HELP_FLAGS, dispatch
from .discovery import registry as build_registry, discover
from .help import renderable, summary
from .utils import *

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 2


def _setting(value, name, default):
    return coalesce(value, getattr(__import__("__main__"), name, default))


def configure_logging(level=logging.DEBUG, /, *, console=Unset):
    """
    Stream the "sigil" loggers to stderr through rich (once per process).

    Parameters
    - level: int or level name ("DEBUG", "info", ...).
    - console: Console to write to; a stderr Console when Unset.

    Raises
    - ValueError for an unknown level name.
    """
    if isinstance(level, str):
        level = level.strip().upper()
    root = logging.getLogger("sigil")
    root.setLevel(level)

    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        root.addHandler(RichHandler(console=coalesce(console, Console(stderr=True)), show_path=False))
    return root


class Shell:
    """
    Run command lines against a registry and print what happens.

    Parameters
    - registry: CommandRegistry, or anything discovery.registry() accepts
      (a command, a module, a module-glob pattern, an iterable of commands).
    - prog, colorful, fancy: see module notes.
    - stdout, stderr: Console objects (handy for capturing output in tests).
    """

    def __init__(self, registry, /, *, prog=Unset, colorful=Unset, fancy=Unset, stdout=Unset, stderr=Unset):
        if not isinstance(registry, CommandRegistry):
            registry = build_registry(registry)
        self.registry = registry
        self.stdout = coalesce(stdout, Console(highlight=False, soft_wrap=True))
        self.stderr = coalesce(stderr, Console(stderr=True, highlight=False, soft_wrap=True))
        self.prog = _setting(prog, "__prog__", None) or os.path.basename(sys.argv[0]) or "sigil"
        self.colorful = bool(_setting(colorful, "__colorful__", self.stdout.is_terminal))
        self.fancy = bool(_setting(fancy, "__fancy__", False))

    def run(self, argv=Unset, /):
        """
        Dispatch one command line (program name excluded; sys.argv[1:] when
        Unset) and return the exit code.
        """
        argv = coalesce(argv, sys.argv[1:])
        outcome = dispatch(self.registry, argv, prog=self.prog)

        match outcome:
            case HelpShown(text, command):
                self.help(text, command)
                return EXIT_SUCCESS
            case Invoked(value):
                if isinstance(value, int) and not isinstance(value, bool):
                    return value
                return EXIT_SUCCESS
            case Failed(error, message):
                self.fail(error, message)
                return EXIT_FAILURE
        raise RuntimeError("unexpected outcome")

    def help(self, text, command=None, /):
        if not self.colorful:
            return self.stdout.print(Text(text))
        if command is None:
            return self.stdout.print(summary(self.registry, prog=self.prog, colorful=True))
        self.stdout.print(renderable(command, colorful=True))

    def fail(self, error, message, /):
        """
        Print a fault: the "Error: …" message and usage line, or the rich
        rendering of the fault followed by the usage line when fancy.
        """
        logger.debug("reporting %r", error)
        head, _, tail = message.partition("\n")
        if self.fancy:
            self.stderr.print(error.__replace__(prog=self.prog, colorful=self.colorful, fancy=True))
        else:
            self.stderr.print(Text(head, "bold red" if self.colorful else ""))
        if tail:
            self.stderr.print(Text(tail))


def main(registry, argv=Unset, /, *, prog=Unset, colorful=Unset, fancy=Unset):
    """
    Build a Shell and run one command line; returns the exit code.
    """
    return Shell(registry, prog=prog, colorful=colorful, fancy=fancy).run(argv)


def entrypoint(argv=Unset, /):
    """
    Run "sigil <module-glob> [<command> [<args>]]".

    The commands of the modules matched by the glob form the registry. Set
    SIGIL_LOG to a level name to stream the library logs to stderr.
    """
    argv = list(coalesce(argv, sys.argv[1:]))
    stderr = Console(stderr=True, highlight=False, soft_wrap=True)

    if level := os.environ.get("SIGIL_LOG"):
        try:
            configure_logging(level)
        except ValueError:
            stderr.print(Text("Error: unknown log level %r in SIGIL_LOG" % level))
            return EXIT_FAILURE

    if not argv or argv[0] in HELP_FLAGS:
        console = stderr if not argv else Console(highlight=False, soft_wrap=True)
        console.print(Text("usage: sigil <module-glob> [<command> [<args>]]\n       sigil <module-glob> -h [<command>]"))
        return EXIT_SUCCESS if argv else EXIT_FAILURE

    pattern, *rest = argv
    try:
        commands = discover(pattern)
    except (TypeError, ValueError) as error:
        stderr.print(Text("Error: %s" % error))
        return EXIT_FAILURE

    return main(commands, rest, prog="sigil " + pattern)


__all__ = (
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    "configure_logging",
    "Shell",
    "main",
    "entrypoint",
)
