r"""
Sigil discovery: turn annotated Python callables into commands.

Declaration markers (used as parameter defaults)
- Argument(...): a positional argument; the parameter must be positional-only.
- Option("--name" | "-x", ...): a value option; the parameter must be standard.
- Flag("--name" | "-x", ...): a presence-only option; the parameter must be
  keyword-only.

The parameter name is the binding name. Value kinds come from the marker's
`kind` (a ValueKind or one of bool/int/float/str/list/tuple), else from the
annotation (int, float, str, bool, list[str], tuple[str, ...]; "X | None" also
makes the parameter nullable), else STRING.

Quick example:
    >>> @command
    ... def deploy(
    ...         email=Argument(descr="account e-mail"),
    ...         /,
    ...         user: str = Option("--user"),
    ...         *,
    ...         force=Flag("-f"),
    ... ):
    ...     '''Deploy the application.'''
    >>> deploy.name, [spec.label for spec in deploy.signature]
    ('deploy', ['email', '--user', '-f'])

Collecting
- discover("pkg.commands.*") imports every module the glob matches (see
  mglob) and returns the module-level Command objects, modules in sorted order
  and commands in definition order.
- registry(*sources) builds a CommandRegistry from commands, modules and
  module-glob patterns.
"""
import builtins
import importlib
import inspect
import logging
import types
import typing
from collections.abc import Iterable
from inspect import Parameter

from .commands import Command, CommandRegistry
from .signatures import ValueKind, ParameterKind, ParameterSpec, Signature
from .utils import *
from .utils import IntrospectiveType

logger = logging.getLogger(__name__)

_KINDS = {
    bool: ValueKind.BOOL,
    int: ValueKind.INT,
    float: ValueKind.FLOAT,
    str: ValueKind.STRING,
    list: ValueKind.ARRAY,
    tuple: ValueKind.ARRAY,
}


def _sanitize_kind(cls, metadata, /):
    if isinstance(kind := metadata["kind"], ValueKind | Unset):
        return
    if not isinstance(kind, type) or kind not in _KINDS:
        raise TypeError(f"{cls.__typename__} 'kind' must be a value-kind or one of bool, int, float, str, list, tuple")
    metadata["kind"] = _KINDS[kind]


def _sanitize_descr(cls, metadata, /):
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr, "")


def _sanitize_switch(cls, metadata, /):
    """
    Internal: split a "--name" / "-x" switch into (ParameterKind, text).

    Unset keeps the long form; the name is derived from the parameter later.
    """
    if not isinstance(switch := metadata["switch"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'switch' must be a string")
    if switch is Unset or switch.startswith("--"):
        metadata["kind_of_switch"] = ParameterKind.LONG_OPTION
    elif switch.startswith("-"):
        metadata["kind_of_switch"] = ParameterKind.SHORT_OPTION
    else:
        raise ValueError(f"{cls.__typename__} 'switch' must start with '-' or '--', got {switch!r}")


def _inspect_annotation(annotation):
    """
    (value kind or Unset, nullable) read from a parameter annotation.
    """
    if annotation is Parameter.empty:
        return Unset, False

    nullable = False
    if typing.get_origin(annotation) in (types.UnionType, typing.Union):
        members = [member for member in typing.get_args(annotation) if member is not type(None)]
        nullable = len(members) < len(typing.get_args(annotation))
        if len(members) != 1:
            return Unset, nullable
        annotation, = members

    origin = typing.get_origin(annotation) or annotation
    if not isinstance(origin, type):
        return Unset, nullable
    return _KINDS.get(origin, Unset), nullable


class Argument(metaclass=IntrospectiveType):
    """
    Marker for a positional argument.

    Parameters
    - kind: ValueKind or Python type (see module notes); inferred when Unset.
    - default: makes the argument optional.
    - descr: help text.
    - nullable: accept "no value" (default None) instead of being required.
    """

    __introspectable__ = (
        "kind",
        "default",
        "descr",
        "nullable",
    )

    def __new__(cls, kind=Unset, default=Unset, descr=Unset, *, nullable=False):
        metadata = {
            "kind": kind,
            "default": default,
            "descr": descr,
            "nullable": bool(nullable),
        }
        _sanitize_kind(cls, metadata)
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def resolve(self, name, annotation=Parameter.empty, /):
        """
        Build the ParameterSpec for the parameter `name`.
        """
        kind, nullable = _inspect_annotation(annotation)
        return ParameterSpec(
            name,
            ParameterKind.POSITIONAL,
            coalesce(self._kind, coalesce(kind, ValueKind.STRING)),
            default=self._default,
            nullable=self._nullable or nullable,
            description=self._descr,
        )

    def __argument__(self):
        return self


class Option(metaclass=IntrospectiveType):
    """
    Marker for a value option.

    Parameters
    - switch: "--name" or "-x"; Unset means "--<parameter name>" with "_" → "-".
    - kind, default, descr, nullable: as for Argument.
    """

    __introspectable__ = (
        "switch",
        "kind",
        "default",
        "descr",
        "nullable",
    )

    def __new__(cls, switch=Unset, /, kind=Unset, default=Unset, descr=Unset, *, nullable=False):
        metadata = {
            "switch": switch,
            "kind": kind,
            "default": default,
            "descr": descr,
            "nullable": bool(nullable),
        }
        _sanitize_switch(cls, metadata)
        _sanitize_kind(cls, metadata)
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def resolve(self, name, annotation=Parameter.empty, /):
        kind, nullable = _inspect_annotation(annotation)
        return ParameterSpec(
            name,
            self._kind_of_switch,
            coalesce(self._kind, coalesce(kind, ValueKind.STRING)),
            switch=self._switch,
            default=self._default,
            nullable=self._nullable or nullable,
            description=self._descr,
        )

    def __option__(self):
        return self


class Flag(metaclass=IntrospectiveType):
    """
    Marker for a presence-only option: True when given, False otherwise.
    """

    __introspectable__ = (
        "switch",
        "descr",
    )

    def __new__(cls, switch=Unset, /, descr=Unset):
        metadata = {
            "switch": switch,
            "descr": descr,
        }
        _sanitize_switch(cls, metadata)
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def resolve(self, name, annotation=Parameter.empty, /):
        return ParameterSpec(
            name,
            self._kind_of_switch,
            ValueKind.BOOL,
            switch=self._switch,
            description=self._descr,
        )

    def __flag__(self):
        return self


_PLACEMENTS = {
    Argument: (Parameter.POSITIONAL_ONLY, "positional-only"),
    Option: (Parameter.POSITIONAL_OR_KEYWORD, "standard"),
    Flag: (Parameter.KEYWORD_ONLY, "keyword-only"),
}


def signature_of(callback, /):
    """
    Build the Signature of a callable whose parameters default to markers.

    Raises
    - TypeError: non-callable or uninspectable callback, a parameter without a
      marker default, or a marker on the wrong kind of parameter.
    - ValueError: anything Signature/ParameterSpec reject (duplicated switches,
      a required positional after an optional one, ...).
    """
    try:
        parameters = inspect.signature(callback, eval_str=True).parameters
    except TypeError:
        raise TypeError("signature_of() argument must be callable") from None
    except ValueError:
        raise ValueError("signature_of() argument must be an inspectable callable") from None

    specs = []
    for name, parameter in parameters.items():
        if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
            raise TypeError(f"command parameter {name!r} cannot be variadic")
        if parameter.default is Parameter.empty:
            raise TypeError(f"command parameter {name!r} must have a default")

        marker = parameter.default
        if not isinstance(marker, Argument | Option | Flag):
            raise TypeError(f"command parameter {name!r} default must be an argument, option or flag")

        placement, label = _PLACEMENTS[type(marker)]
        if parameter.kind is not placement:
            raise TypeError(f"command {marker.__typename__} at parameter {name!r}, parameter must be {label}")

        specs.append(marker.resolve(name, parameter.annotation))

    return Signature(specs)


def _body(callback):
    """
    Adapt callback(*positionals, **named) to the body(mapping) contract.
    """
    positionals = [
        name for name, parameter in inspect.signature(callback).parameters.items()
        if parameter.kind is Parameter.POSITIONAL_ONLY
    ]

    @rename(getattr(callback, "__name__", "body"))
    def body(values, /):
        return callback(
            *(values[name] for name in positionals),
            **{name: value for name, value in values.items() if name not in positionals},
        )

    return body


def command(source=Unset, /, *, name=Unset, descr=Unset):
    """
    Create a Command from a callable, or return a decorator that will.

    Forms
    - command(callback, name=..., descr=...) -> Command
    - @command / @command(name=..., descr=...)

    Defaults
    - name: callback.__name__ with "_" → "-".
    - descr: the callback docstring (inspect.getdoc).
    """
    @rename("command")
    def wrapper(source, /):
        if not builtins.callable(source):
            raise TypeError("@command() must be applied to a callable")
        command = Command(
            coalesce(name, getattr(source, "__name__", "").replace("_", "-")),
            coalesce(descr, inspect.getdoc(source)),
            signature_of(source),
            _body(source),
        )
        logger.debug("declared command %r with %d parameter(s)", command.name, len(command.signature))
        return command

    return wrapper(source) if source is not Unset else wrapper


def collect(module, /):
    """
    Module-level Command objects of a module, in definition order.
    """
    if not isinstance(module, types.ModuleType):
        raise TypeError("collect() argument must be a module")
    return [object for object in vars(module).values() if isinstance(object, Command)]


def discover(pattern, /):
    """
    Import the modules matched by a module glob and collect their commands.

    Parameters
    - pattern: str, e.g. "tools.commands.*" or "tools.**.cli" (see mglob).

    Returns
    - list[Command]: modules in sorted order, commands in definition order,
      each command object once.

    Raises
    - TypeError: when pattern is not a string or a module cannot be imported.
    """
    if not isinstance(pattern, str):
        raise TypeError("discover() argument must be a string")

    def imp(module):
        try:
            return importlib.import_module(module)
        except ImportError:
            raise TypeError(f"unable to import module {module!r}") from None

    commands = []
    for module in map(imp, mglob(pattern)):
        for object in collect(module):
            if all(object is not known for known in commands):
                commands.append(object)
        logger.debug("discovered module %r", module.__name__)

    logger.debug("discovered %d command(s) for %r", len(commands), pattern)
    return commands


def registry(*sources):
    """
    Build a CommandRegistry from commands, modules and module-glob patterns.

        >>> registry(deploy, "tools.commands.*")
    """
    commands = []
    for source in sources:
        match source:
            case Command():
                found = [source]
            case str():
                found = discover(source)
            case types.ModuleType():
                found = collect(source)
            case Iterable():
                found = list(source)
            case _:
                raise TypeError("registry() arguments must be commands, modules, strings or iterables of commands")
        commands.extend(command for command in found if all(command is not known for known in commands))
    return CommandRegistry(commands)


__all__ = (
    # Markers
    "Argument",
    "Option",
    "Flag",

    # Declaration
    "signature_of",
    "command",

    # Collecting
    "collect",
    "discover",
    "registry",
)
