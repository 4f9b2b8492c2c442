"""
Sigil tokenizer: classify raw command-line arguments by shape.

Token variants
- Positional(raw): anything that is not option-shaped.
- LongOption(name, value): "--name" or "--name=value". The name is the text
  between "--" and the first "=", the value everything after that "=".
- ShortOption(letter, value): "-x" or "-x=value" (exactly one letter).

value is None when no "=" was present, "" when "=" ends the token.

The tokenizer does no semantic validation: unknown names, missing values and
type errors are the binder's business. Combined short flags ("-fb") are not
supported and classify as positionals, as do "-", "-5" and "-1.5".

    >>> tokenize(["a@b.com", "--user=joe", "-f"])
    (Positional(raw='a@b.com'), LongOption(name='user', value='joe'), ShortOption(letter='f', value=None))
"""
import logging
import re
import shlex
from collections import namedtuple
from collections.abc import Iterable

logger = logging.getLogger(__name__)

Positional = namedtuple("Positional", ("raw",))
LongOption = namedtuple("LongOption", ("name", "value"), defaults=(None,))
ShortOption = namedtuple("ShortOption", ("letter", "value"), defaults=(None,))

_SHORT = re.compile(r"-(?P<letter>[^\W\d_])(?:=(?P<value>.*))?", re.DOTALL)


def classify(argument, /):
    """
    Classify a single raw argument into one token.
    """
    if not isinstance(argument, str):
        raise TypeError("classify() argument must be a string")

    if argument.startswith("--"):
        name, separator, value = argument[2:].partition("=")
        return LongOption(name, value if separator else None)

    if match := _SHORT.fullmatch(argument):
        return ShortOption(match["letter"], match["value"])

    return Positional(argument)


def spelling(token, /):
    """
    Rebuild the raw argument a token was classified from.

    The binder uses it when an option takes the following token as its value
    ("--name value"), whatever shape that token had.
    """
    match token:
        case Positional(raw):
            return raw
        case LongOption(name, value):
            return "--" + name + ("" if value is None else "=" + value)
        case ShortOption(letter, value):
            return "-" + letter + ("" if value is None else "=" + value)
    raise TypeError("spelling() argument must be a token")


def tokenize(arguments, /):
    """
    Split raw arguments into an ordered tuple of tokens.

    Parameters
    - arguments: Iterable[str] | str
      The arguments following the command name. A single string is split
      shell-style (shlex) first, which is handy in tests and embedding.

    Raises
    - TypeError when arguments is neither a string nor an iterable of strings.
    """
    if isinstance(arguments, str):
        arguments = shlex.split(arguments)
    elif not isinstance(arguments, Iterable):
        raise TypeError("tokenize() argument must be a string or an iterable of strings")

    tokens = tuple(map(classify, arguments))
    logger.debug("tokenized %d argument(s): %r", len(tokens), tokens)
    return tokens


__all__ = (
    "Positional",
    "LongOption",
    "ShortOption",
    "classify",
    "spelling",
    "tokenize",
)
