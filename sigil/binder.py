"""
Sigil binder: resolve a token stream against a signature.

Contract
- bind(signature, tokens) -> BindingResult
  • success: result.values maps every declared parameter name to its typed value
    (defaults fill whatever the tokens did not set).
  • failure: result.error is the first BindingError met; nothing else is kept.

Algorithm
1. every slot starts at its default; required slots start unset.
2. tokens are scanned left to right with a cursor into the positional specs;
   only positional tokens advance it.
3. options
   • unknown name → UnknownOptionError
   • BOOL: an inline value → UnexpectedValueError; otherwise the slot is True
   • ARRAY: an inline value is mandatory (MissingValueError otherwise); each
     occurrence appends to the sequence
   • INT/FLOAT/STRING: the inline value, else the next token whatever its shape
     ("space form"), else MissingValueError
4. positionals: past the last declared one → TooManyArgumentsError; ARRAY
   positionals split the raw text on ",".
5. after the scan, the first unset required parameter in declaration order →
   MissingArgumentError (positional) or MissingOptionError (named).
6. INT/FLOAT use strict numeric parsing → InvalidTypeError on bad text.

Binding is fail-fast: the first fault stops the scan and is the only one
reported. Each call owns its state, so signatures can be bound concurrently.
"""
import difflib
import logging
import math
import re
from collections import deque

from .faults import *
from .signatures import ValueKind, Signature
from .tokens import Positional, LongOption, ShortOption, classify, spelling, tokenize
from .utils import *
from .utils import IntrospectiveType

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)
_FLOAT = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

_TYPENAMES = {
    ValueKind.INT: "integer",
    ValueKind.FLOAT: "number",
}

_SAMPLES = {
    ValueKind.INT: "42",
    ValueKind.FLOAT: "1.5",
}


def _excerpt(raw, width=32):
    return raw if len(raw) <= width else raw[:width - 3] + "..."


class BindingResult(metaclass=IntrospectiveType):
    """
    Outcome of one bind call: either values or an error, never both.

        >>> result = bind(signature, ["a@b.com"])
        >>> if result:
        ...     body(result.values)
        ... else:
        ...     report(result.error)
    """

    __introspectable__ = (
        "values",
        "error",
    )

    def __new__(cls, values=Unset, error=Unset):
        if (values is Unset) == (error is Unset):
            raise TypeError(f"{cls.__typename__} takes exactly one of 'values' or 'error'")
        if error is not Unset and not isinstance(error, BindingError):
            raise TypeError(f"{cls.__typename__} 'error' must be a binding-error")
        self = super().__new__(cls)
        self._values = coalesce(values)
        self._error = coalesce(error)
        return self

    @property
    def ok(self):
        return self._error is None

    def __bool__(self):
        return self.ok

    def unwrap(self):
        """
        Return the values, raising the error instead when binding failed.
        """
        if self._error is not None:
            raise self._error
        return self.values


def coerce(value_kind, raw, /):
    """
    Convert raw text to the value kind.

    Raises ValueError when INT/FLOAT text is not strictly numeric. BOOL has no
    textual form (presence is the value) and is rejected with TypeError.
    ARRAY splits on "," (the positional form).
    """
    match value_kind:
        case ValueKind.INT:
            if not _INTEGER.fullmatch(raw):
                raise ValueError(f"invalid integer literal {raw!r}")
            return int(raw)
        case ValueKind.FLOAT:
            if not _FLOAT.fullmatch(raw):
                raise ValueError(f"invalid number literal {raw!r}")
            if not math.isfinite(value := float(raw)):
                raise ValueError(f"number literal out of range {raw!r}")
            return value
        case ValueKind.STRING:
            return raw
        case ValueKind.ARRAY:
            return tuple(raw.split(","))
        case ValueKind.BOOL:
            raise TypeError("bool values have no textual form")
    raise TypeError("coerce() first argument must be a value-kind")


class Binder:
    """
    Per-call binding state: slots, accumulated arrays, positional cursor and
    the ordinal index of the token being read (used in messages).
    """

    def __init__(self, signature, /):
        if not isinstance(signature, Signature):
            raise TypeError("Binder() argument must be a signature")
        self.signature = signature
        self.values = signature.defaults()
        self.arrays = {}
        self.cursor = 0
        self.index = 0

    def run(self, tokens, /):
        """
        Bind every token, then check required parameters.

        Raises the first BindingError; returns the complete mapping otherwise.
        """
        queue = deque(tokens)
        while queue:
            token = queue.popleft()
            self.index += 1
            match token:
                case LongOption(name, value):
                    self._option(self.signature.lookup_long(name), "--" + name, value, queue)
                case ShortOption(letter, value):
                    self._option(self.signature.lookup_short(letter), "-" + letter, value, queue)
                case Positional(raw):
                    self._positional(raw)
                case _:
                    raise TypeError(f"unexpected token {token!r}")

        for spec in self.signature:
            if spec.name in self.values:
                continue
            if spec.positional:
                raise MissingArgumentError(
                    "missing required argument %r" % spec.name,
                    parameter=spec.name,
                    hint="add a value for %r in its position" % spec.name,
                )
            raise MissingOptionError(
                "missing required option %r" % spec.label,
                parameter=spec.name,
                hint="add %s" % self._example(spec),
            )

        return {spec.name: self.values[spec.name] for spec in self.signature}

    def _option(self, spec, label, value, queue):
        if spec is None:
            suggestions = difflib.get_close_matches(label, [known.label for known in self.signature.options], 5)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                hint = "check the available options with --help"
            raise UnknownOptionError(
                "unknown option %r at %s position" % (label, ordinal(self.index)),
                parameter=label,
                index=self.index,
                suggestions=tuple(suggestions),
                hint=hint,
            )

        if spec.value_kind is ValueKind.BOOL:
            if value is not None:
                raise UnexpectedValueError(
                    "flag %r at %s position cannot have an inline value" % (label, ordinal(self.index)),
                    parameter=spec.name,
                    index=self.index,
                    hint="remove everything from '=' (for example: %s)" % label,
                )
            self.values[spec.name] = True
            return

        if spec.value_kind is ValueKind.ARRAY:
            if value is None:
                raise MissingValueError(
                    "option %r at %s position requires an inline value" % (label, ordinal(self.index)),
                    parameter=spec.name,
                    index=self.index,
                    hint="use the inline form on every occurrence: %s=<value>" % label,
                )
            self.arrays.setdefault(spec.name, []).append(value)
            self.values[spec.name] = tuple(self.arrays[spec.name])
            return

        start = self.index
        if value is None:
            try:
                value = spelling(queue.popleft())
            except IndexError:
                raise MissingValueError(
                    "option %r at %s position requires a value" % (label, ordinal(start)),
                    parameter=spec.name,
                    index=start,
                    hint="provide a value (for example: %s=<value> or %s <value>)" % (label, label),
                ) from None
            self.index += 1
        self.values[spec.name] = self._coerce(spec, value, "option %r" % label, start)

    def _positional(self, raw):
        try:
            spec = self.signature.positionals[self.cursor]
        except IndexError:
            raise TooManyArgumentsError(
                "unexpected argument %r at %s position" % (raw, ordinal(self.index)),
                parameter=raw,
                index=self.index,
                hint="remove this extra value or check the expected usage with --help",
            ) from None
        self.cursor += 1
        self.values[spec.name] = self._coerce(spec, raw, "argument %r" % spec.name, self.index)

    def _coerce(self, spec, raw, subject, index):
        try:
            return coerce(spec.value_kind, raw)
        except ValueError:
            typename = _TYPENAMES[spec.value_kind]
            raise InvalidTypeError(
                "invalid %s %r for %s at %s position" % (typename, _excerpt(raw), subject, ordinal(index)),
                parameter=spec.name,
                index=index,
                input=raw,
                hint="use a valid %s (for example: %s)" % (typename, _SAMPLES[spec.value_kind]),
            ) from None

    @staticmethod
    def _example(spec):
        if spec.value_kind is ValueKind.ARRAY:
            return "%s=<%s>" % (spec.label, spec.name)
        return "%s <%s>" % (spec.label, spec.name)


def bind(signature, tokens, /):
    """
    Bind tokens against a signature; see the module notes for the rules.

    Parameters
    - signature: Signature
    - tokens: Iterable of tokens (from tokenize()); raw strings are classified
      on the fly, and a single string is split shell-style first.

    Returns
    - BindingResult
    """
    if isinstance(tokens, str):
        tokens = tokenize(tokens)
    tokens = [
        token if isinstance(token, Positional | LongOption | ShortOption) else classify(token)
        for token in tokens
    ]

    try:
        values = Binder(signature).run(tokens)
    except BindingError as error:
        logger.debug("binding failed: %s (%s)", error, error.kind.name)
        return BindingResult(error=error)

    logger.debug("bound %d parameter(s)", len(values))
    return BindingResult(values=values)


__all__ = (
    "BindingResult",
    "Binder",
    "coerce",
    "bind",
)
