r"""
Sigil signature model: the typed shape of one command.

Overview
- ValueKind: BOOL | INT | FLOAT | STRING | ARRAY (array of strings).
- ParameterKind: POSITIONAL | LONG_OPTION | SHORT_OPTION.
- ParameterSpec: one declared positional argument or named option.
- Signature: ordered positionals plus long-name and short-letter lookups.

Both model types are plain data. They are validated once, on construction, and
are read-only afterwards (fields are exposed through mirrored properties), so a
single Signature can be shared by every bind/render call in the process.

Construction rules (sanitized on construction)
- name: a Python identifier; it is the key in the bound mapping.
- switch: long options use a shell-style name without the leading "--"
  (r"[^\W\d_](-?[^\W_]+)*"), short options a single letter without "-".
  Positionals take no switch.
- BOOL is presence-only: never positional, never required, default False.
- required is derived: no declared default and not nullable.
- nullable without a default means "optional, default None".
- defaults are checked against the value kind; ARRAY defaults become tuples.

Signature rules
- binding names, long names and short letters are unique;
- optional positionals trail required ones;
- an ARRAY positional, if any, is the last positional.

Quick example:
    >>> signature = Signature(
    ...     positional("email"),
    ...     positional("password"),
    ...     long_option("user"),
    ...     short_option("f", "force", ValueKind.BOOL),
    ... )
    >>> [spec.name for spec in signature.positionals]
    ['email', 'password']
"""
import enum
import math
import re
from collections.abc import Iterable

from .utils import *
from .utils import IntrospectiveType


class ValueKind(enum.Enum):
    """
    value kinds understood by the binder (they select the coercion rule).
    """
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


class ParameterKind(enum.Enum):
    """
    how a parameter is addressed on the command line.
    """
    POSITIONAL = "positional"
    LONG_OPTION = "long-option"
    SHORT_OPTION = "short-option"

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


def _sanitize_identity(cls, metadata, /):
    """
    Internal: validate name/kind/switch of a parameter.

    - name must be a Python identifier (it becomes a keyword of the body call).
    - kind must be a ParameterKind; value_kind a ValueKind.
    - POSITIONAL takes no switch; LONG_OPTION needs a shell-style long name
      (leading dashes are tolerated and stripped); SHORT_OPTION needs exactly
      one letter.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name.isidentifier():
        raise ValueError(f"{cls.__typename__} 'name' must be a valid identifier, got {name!r}")

    if not isinstance(kind := metadata["kind"], ParameterKind):
        raise TypeError(f"{cls.__typename__} 'kind' must be a parameter-kind")
    if not isinstance(metadata["value_kind"], ValueKind):
        raise TypeError(f"{cls.__typename__} 'value_kind' must be a value-kind")

    switch = metadata["switch"]
    match kind:
        case ParameterKind.POSITIONAL:
            if switch is not Unset:
                raise TypeError(f"positional {cls.__typename__} {name!r} cannot have a 'switch'")
            metadata["switch"] = None
        case ParameterKind.LONG_OPTION:
            if not isinstance(switch, str | Unset):
                raise TypeError(f"{cls.__typename__} 'switch' must be a string")
            # The binding name doubles as the long name when no switch is given.
            switch = coalesce(switch, name.replace("_", "-")).strip().removeprefix("--")
            if not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", switch):
                raise ValueError(f"{cls.__typename__} long option name {switch!r} is not a valid shell-style name")
            metadata["switch"] = switch
        case ParameterKind.SHORT_OPTION:
            if not isinstance(switch, str):
                raise TypeError(f"{cls.__typename__} short option requires a one-letter 'switch'")
            switch = switch.strip().removeprefix("-")
            if not re.fullmatch(r"[^\W\d_]", switch):
                raise ValueError(f"{cls.__typename__} short option switch must be a single letter, got {switch!r}")
            metadata["switch"] = switch


def _sanitize_default(cls, metadata, /):
    """
    Internal: derive required/default and check the default against the kind.

    Side effects
    - metadata["required"] is set.
    - metadata["default"] is normalized (float for FLOAT, tuple for ARRAY,
      None for a nullable parameter without a default).
    """
    name = metadata["name"]
    kind = metadata["kind"]
    value_kind = metadata["value_kind"]
    default = metadata["default"]
    nullable = metadata["nullable"]

    if value_kind is ValueKind.BOOL:
        if kind is ParameterKind.POSITIONAL:
            raise TypeError(f"positional {cls.__typename__} {name!r} cannot be a bool (presence-only kinds need a switch)")
        if default is not Unset and default is not False:
            raise ValueError(f"bool {cls.__typename__} {name!r} can only default to False")
        metadata["required"] = False
        metadata["default"] = False
        return

    if default is Unset:
        metadata["required"] = not nullable
        metadata["default"] = None
        return

    metadata["required"] = False
    if default is None:
        return

    match value_kind:
        case ValueKind.INT:
            if not isinstance(default, int) or isinstance(default, bool):
                raise TypeError(f"{cls.__typename__} {name!r} default must be an integer")
        case ValueKind.FLOAT:
            if not isinstance(default, int | float) or isinstance(default, bool):
                raise TypeError(f"{cls.__typename__} {name!r} default must be a number")
            if not math.isfinite(default):
                raise ValueError(f"{cls.__typename__} {name!r} default must be a finite number")
            metadata["default"] = float(default)
        case ValueKind.STRING:
            if not isinstance(default, str):
                raise TypeError(f"{cls.__typename__} {name!r} default must be a string")
        case ValueKind.ARRAY:
            if isinstance(default, str) or not isinstance(default, Iterable):
                raise TypeError(f"{cls.__typename__} {name!r} default must be an iterable of strings")
            default = tuple(default)
            if not all(isinstance(item, str) for item in default):
                raise TypeError(f"{cls.__typename__} {name!r} default must be an iterable of strings")
            metadata["default"] = default


def _sanitize_description(cls, metadata, /):
    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    metadata["description"] = coalesce(description, "").strip()


class ParameterSpec(metaclass=IntrospectiveType):
    """
    One declared argument or option.

    Fields (read-only)
    - name: binding identifier.
    - kind: ParameterKind.
    - switch: long name (without "--"), short letter (without "-"), or None.
    - value_kind: ValueKind.
    - required: derived, see module notes.
    - default: pre-typed default (None when required).
    - nullable: whether None is an accepted "no value" default.
    - description: free text, "" when undeclared.
    """

    __introspectable__ = (
        "name",
        "kind",
        "switch",
        "value_kind",
        "required",
        "default",
        "nullable",
        "description",
    )

    __displayable__ = (
        "name",
        "kind",
        "switch",
        "value_kind",
        "required",
        "default",
    )

    def __new__(
            cls,
            name,
            kind=ParameterKind.POSITIONAL,
            value_kind=ValueKind.STRING,
            /,
            *,
            switch=Unset,
            default=Unset,
            nullable=False,
            description=Unset,
    ):
        metadata = {
            "name": name,
            "kind": kind,
            "switch": switch,
            "value_kind": value_kind,
            "default": default,
            "nullable": bool(nullable),
            "description": description,
        }
        _sanitize_identity(cls, metadata)
        _sanitize_default(cls, metadata)
        _sanitize_description(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def positional(self):
        return self._kind is ParameterKind.POSITIONAL

    @property
    def flag(self):
        """
        True for presence-only options (BOOL long/short options).
        """
        return self._value_kind is ValueKind.BOOL

    @property
    def label(self):
        """
        The command-line spelling: "--name", "-x", or the binding name for positionals.
        """
        match self._kind:
            case ParameterKind.LONG_OPTION:
                return "--" + self._switch
            case ParameterKind.SHORT_OPTION:
                return "-" + self._switch
        return self._name

    def __setattr__(self, name, value, /):
        if not name.startswith("_") or hasattr(self, name):
            raise AttributeError(f"{type(self).__typename__} is read-only")
        super().__setattr__(name, value)


def positional(name, value_kind=ValueKind.STRING, /, **options):
    """
    Shorthand for ParameterSpec(name, ParameterKind.POSITIONAL, value_kind, **options).
    """
    return ParameterSpec(name, ParameterKind.POSITIONAL, value_kind, **options)


def long_option(name, value_kind=ValueKind.STRING, /, *, switch=Unset, **options):
    """
    Shorthand for a long option; the switch defaults to the name with "_" → "-".

        >>> long_option("dry_run", ValueKind.BOOL).label
        '--dry-run'
    """
    return ParameterSpec(name, ParameterKind.LONG_OPTION, value_kind, switch=switch, **options)


def short_option(letter, name, value_kind=ValueKind.STRING, /, **options):
    """
    Shorthand for a short option: short_option("f", "force", ValueKind.BOOL).
    """
    return ParameterSpec(name, ParameterKind.SHORT_OPTION, value_kind, switch=letter, **options)


class Signature(metaclass=IntrospectiveType):
    """
    The complete declared shape of one command.

    Fields (read-only)
    - positionals: tuple of positional specs, in binding order.
    - longs: mapping long name → spec.
    - shorts: mapping short letter → spec.
    - parameters: every spec in declaration order.

    Construction
    - Signature(*specs) or Signature(iterable_of_specs).

    Raises
    - TypeError for non-spec members.
    - ValueError for duplicated names/switches, an optional positional followed by
      a required one, or an array positional that is not the last positional.
    """

    __introspectable__ = (
        "positionals",
        "longs",
        "shorts",
        "parameters",
    )

    __displayable__ = (
        "parameters",
    )

    def __new__(cls, *parameters):
        if len(parameters) == 1 and not isinstance(parameters[0], ParameterSpec):
            if not isinstance(parameters[0], Iterable):
                raise TypeError(f"{cls.__typename__} members must be parameter-specs")
            parameters = tuple(parameters[0])

        names = set()
        positionals = []
        longs = {}
        shorts = {}
        optional = None
        array = None

        for spec in parameters:
            if not isinstance(spec, ParameterSpec):
                raise TypeError(f"{cls.__typename__} members must be parameter-specs")
            if spec.name in names:
                raise ValueError(f"{cls.__typename__} parameter name {spec.name!r} is already in use")
            names.add(spec.name)

            match spec.kind:
                case ParameterKind.POSITIONAL:
                    if array:
                        raise ValueError(f"{cls.__typename__} array positional {array!r} must be the last positional")
                    if spec.required and optional:
                        raise ValueError(
                            f"{cls.__typename__} required positional {spec.name!r} cannot follow optional positional {optional!r}"
                        )
                    if not spec.required:
                        optional = spec.name
                    if spec.value_kind is ValueKind.ARRAY:
                        array = spec.name
                    positionals.append(spec)
                case ParameterKind.LONG_OPTION:
                    if longs.setdefault(spec.switch, spec) is not spec:
                        raise ValueError(f"{cls.__typename__} long option '--{spec.switch}' is already in use")
                case ParameterKind.SHORT_OPTION:
                    if shorts.setdefault(spec.switch, spec) is not spec:
                        raise ValueError(f"{cls.__typename__} short option '-{spec.switch}' is already in use")

        self = super().__new__(cls)
        self._parameters = tuple(parameters)
        self._positionals = tuple(positionals)
        self._longs = longs
        self._shorts = shorts
        return self

    @property
    def options(self):
        """
        Named specs (long and short) in declaration order.
        """
        return tuple(spec for spec in self._parameters if not spec.positional)

    def lookup_long(self, name, /):
        """
        Return the spec for "--name" (given without dashes), or None.
        """
        return self._longs.get(name)

    def lookup_short(self, letter, /):
        """
        Return the spec for "-x" (given without the dash), or None.
        """
        return self._shorts.get(letter)

    def defaults(self):
        """
        Mapping of every non-required parameter to its default, in declaration order.
        """
        return {spec.name: spec.default for spec in self._parameters if not spec.required}

    def __iter__(self):
        return iter(self._parameters)

    def __len__(self):
        return len(self._parameters)

    def __contains__(self, name, /):
        return any(spec.name == name for spec in self._parameters)

    def __setattr__(self, name, value, /):
        if not name.startswith("_") or hasattr(self, name):
            raise AttributeError(f"{type(self).__typename__} is read-only")
        super().__setattr__(name, value)


__all__ = (
    # Enumerations
    "ValueKind",
    "ParameterKind",

    # Model
    "ParameterSpec",
    "Signature",

    # Shorthands
    "positional",
    "long_option",
    "short_option",
)
