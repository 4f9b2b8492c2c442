"""
Sigil help renderer: usage and help text from the same signature the binder uses.

Levels
- HelpLevel.SUMMARY: one line, "<name>  <first line of description>".
- HelpLevel.DETAILED: usage line, description, arguments, options and a
  synthesized example invocation.

Layout rules
- usage: "usage: <name> [<options>] <first> [<optional>]". "[<options>]" sits
  right before the first positional (or ends the line when there is none)
  whenever the signature has options. Optional positionals are bracketed and
  array positionals read "<name>,...".
- rows: names are padded to the longest name of their own section, then the
  description follows; optional parameters append "(default: …)".
- empty sections print "no arguments" / "no options".
- option labels: "--name <param>", "--name" (bool), "--name=<param>" (array);
  "-x <param>", "-x" (bool), "-x=<param>" (array).

Rendering is a pure read of the command: repeated calls give identical text.

Styling
- renderable(...) returns a rich Text; render(...) returns its plain string.
- __styles__ on __main__ overrides palette entries; colorful=False drops them.
"""
import enum
import shlex
from collections import defaultdict

from rich.cells import cell_len
from rich.text import Text

from .signatures import ValueKind

_INDENT = "  "
_GUTTER = 2

_SAMPLES = {
    ValueKind.INT: "42",
    ValueKind.FLOAT: "1.5",
}


class HelpLevel(enum.Enum):
    SUMMARY = "summary"
    DETAILED = "detailed"


def _palette(colorful):
    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "description-section": "italic #A3A3A3",  # Neutral gray

        # === Sections / rows ===
        "group-label": "bold #FFFFFF",  # Pure white headers
        "argument-name": "bold #36C5F0",  # SKY-BLUE for positionals
        "option-name": "bold #00E6FF",  # CYAN for options
        "flag-name": "bold #22C55E",  # GREEN for flags
        "metavar": "bold #FFD600",  # AMBER for parameters
        "argument-description": "#9CA3AF",  # Muted gray
        "default": "dim #9CA3AF",
        "placeholder": "italic #737373",

        # === Example ===
        "example": "#E5E7EB",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _metavar(spec):
    return "<%s>" % spec.name


def _option_label(spec, styler):
    """
    Styled label of one named spec, e.g. "--user <user>" or "-f".
    """
    label = Text(spec.label, styler("flag-name" if spec.flag else "option-name"))
    if spec.flag:
        return label
    if spec.value_kind is ValueKind.ARRAY:
        return label.append("=").append(_metavar(spec), styler("metavar"))
    return label.append(" ").append(_metavar(spec), styler("metavar"))


def _positional_usage(spec, styler):
    usage = Text(_metavar(spec), styler("metavar"))
    if spec.value_kind is ValueKind.ARRAY:
        usage.append(",...")
    if not spec.required:
        usage = Text.assemble("[", usage, "]")
    return usage


def _default(spec):
    """
    The "(default: …)" suffix, or None when there is nothing worth showing.
    """
    if spec.required or spec.flag or spec.default is None:
        return None
    if spec.value_kind is ValueKind.ARRAY:
        if not spec.default:
            return None
        return "(default: %s)" % ",".join(spec.default)
    return "(default: %s)" % spec.default


def _usage(command, styler):
    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(command.name, styler("program-name"))

    signature = command.signature
    items = [_positional_usage(spec, styler) for spec in signature.positionals]
    if signature.options:
        items.insert(0, Text("[<options>]"))

    for item in items:
        usage.append(" ").append(item)
    return usage


def _section(title, rows, placeholder, styler):
    """
    A titled section with rows (label, description) aligned on a shared column.
    """
    section = Text()
    section.append(title, styler("group-label")).append(":\n")

    if not rows:
        return section.append(_INDENT).append(placeholder, styler("placeholder"))

    width = max(cell_len(label.plain) for label, _ in rows)
    column = len(_INDENT) + width + _GUTTER

    lines = []
    for label, description in rows:
        line = Text(_INDENT).append(label)
        if description.plain:
            first, *rest = description.split("\n", allow_blank=True)
            line.append(" " * (width - cell_len(label.plain) + _GUTTER)).append(first)
            for continuation in rest:
                line.append("\n")
                if continuation.plain:
                    line.append(" " * column).append(continuation)
        lines.append(line)
    return section.append(Text("\n").join(lines))


def _describe(spec, styler):
    description = Text(spec.description, styler("argument-description"))
    if default := _default(spec):
        if description.plain:
            description.append(" ")
        description.append(default, styler("default"))
    return description


def example(command):
    """
    Synthesize an invocation (argument list, command name excluded) that binds
    successfully: every required positional in order, then every required
    option in its inline form, each with a sample value.

        >>> example(deploy)
        ['EMAIL', 'PASSWORD', '--user=USER']
    """
    arguments = []
    for spec in command.signature.positionals:
        if spec.required:
            arguments.append(_SAMPLES.get(spec.value_kind, spec.name.upper()))
    for spec in command.signature.options:
        if spec.required:
            arguments.append("%s=%s" % (spec.label, _SAMPLES.get(spec.value_kind, spec.name.upper())))
    return arguments


def usage(command, /, *, colorful=False):
    """
    The one-line usage of a command as plain text (rich Text when colorful).
    """
    text = _usage(command, _palette(colorful))
    return text if colorful else text.plain


def summary(commands, /, *, prog=None, colorful=False):
    """
    Overview of several commands: one summary row each, names aligned.

    When `prog` is given, a two-line usage header is prepended.
    """
    styler = _palette(colorful)
    commands = list(commands)

    rows = []
    for command in commands:
        first = command.description.strip().split("\n", 1)[0] if command.description else ""
        rows.append((Text(command.name, styler("program-name")), Text(first, styler("argument-description"))))

    text = Text()
    if prog:
        text.append("usage", styler("usage-label")).append(": ")
        text.append(prog, styler("program-name")).append(" <command> [<args>]\n")
        text.append("       ").append(prog, styler("program-name")).append(" -h <command>\n\n")
    text.append(_section("commands", rows, "no commands", styler))
    return text if colorful else text.plain


def renderable(command, level=HelpLevel.DETAILED, /, *, colorful=False):
    """
    Build the help of one command as a rich Text.

    Parameters
    - command: any object with name, description and signature (a Command).
    - level: HelpLevel.
    - colorful: apply the palette (plain Text otherwise).
    """
    if not isinstance(level, HelpLevel):
        raise TypeError("renderable() level must be a help-level")
    styler = _palette(colorful)
    description = (command.description or "").strip()

    if level is HelpLevel.SUMMARY:
        text = Text(command.name, styler("program-name"))
        if description:
            text.append("  ").append(description.split("\n", 1)[0], styler("argument-description"))
        return text

    signature = command.signature
    parts = [_usage(command, styler)]

    if description:
        parts.append(Text(description, styler("description-section")))

    parts.append(_section(
        "arguments",
        [(Text(spec.name, styler("argument-name")), _describe(spec, styler)) for spec in signature.positionals],
        "no arguments",
        styler,
    ))
    parts.append(_section(
        "options",
        [(_option_label(spec, styler), _describe(spec, styler)) for spec in signature.options],
        "no options",
        styler,
    ))

    invocation = shlex.join([command.name, *example(command)])
    parts.append(Text("example:\n", styler("group-label")).append(_INDENT).append(invocation, styler("example")))

    return Text("\n\n").join(parts)


def render(command, level=HelpLevel.DETAILED, /):
    """
    Help text of one command at the given level, as a plain string.
    """
    return renderable(command, level).plain


__all__ = (
    "HelpLevel",
    "example",
    "usage",
    "summary",
    "renderable",
    "render",
)
