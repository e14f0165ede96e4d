"""
Multicommand utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the options, faults and commands layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks and help.

- sformat(message, *substitutions)
  • printf-style message building used by CommandDefinition.error()/usage_error().

- wrap(text, width)
  • Line-wise wrapping for help output; continuation lines keep the line's indentation.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> sformat("unknown file %s (%d bytes)", "a.txt", 12)
    'unknown file a.txt (12 bytes)'
    >>> wrap("  a summary that is long", 12)
    '  a summary\\n  that is\\n  long'
"""
import builtins
import functools
import json
import re
import textwrap
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in keyword parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., Console | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is, only Unset is
    replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _number(object, converter):
    """
    Convert for the numeric format codes; anything unconvertible reads as NaN.
    """
    try:
        return str(converter(object))
    except (TypeError, ValueError, OverflowError):
        return "NaN"


def _integer(object):
    # %i truncates toward zero, %d keeps fractions of non-integral numbers
    return int(object) if isinstance(object, int) else int(float(object))


def _decimal(object):
    if isinstance(object, bool):
        return int(object)
    if isinstance(object, int | float):
        return object if not isinstance(object, float) or not object.is_integer() else int(object)
    value = float(object)
    return int(value) if value.is_integer() else value


_codes = re.compile(r"%[sdifjoOc%]")


def sformat(message, /, *substitutions):
    """
    Build a message from printf-style codes.

    Codes
    - %s: str(value)
    - %d: number (integral values without a fraction), NaN when not numeric
    - %i: integer (truncated), NaN when not numeric
    - %f: float, NaN when not numeric
    - %j: JSON, "[Circular]" when the value cannot be serialized
    - %o / %O: repr(value)
    - %c: consumes a value and renders nothing
    - %%: a single percent sign

    Behavior
    - Without substitutions the message is returned untouched.
    - Codes left without a value stay as written.
    - Surplus substitutions are appended, separated by spaces (strings as-is,
      other values via repr).
    - A non-string message is rendered like a surplus value.
    """
    if not isinstance(message, str):
        return " ".join(map(_surplus, (message, *substitutions)))
    if not substitutions:
        return message

    queue = list(substitutions)

    def replace(match):
        code = match.group()[1]
        if code == "%":
            return "%"
        if not queue:
            return match.group()
        object = queue.pop(0)
        match code:
            case "s":
                return str(object)
            case "d":
                return _number(object, _decimal)
            case "i":
                return _number(object, _integer)
            case "f":
                return _number(object, float)
            case "j":
                try:
                    return json.dumps(object)
                except (TypeError, ValueError):
                    return "[Circular]"
            case "c":
                return ""
            case _:
                return repr(object)

    return " ".join([_codes.sub(replace, message), *map(_surplus, queue)])


def _surplus(object):
    return object if isinstance(object, str) else repr(object)


def wrap(text, width, /):
    """
    Wrap text to a column width, one source line at a time.

    - Each line wraps independently; words are never split at hyphens.
    - Continuation lines repeat the leading whitespace of their source line,
      so indented summaries stay indented.
    - Blank lines and a trailing newline are kept.
    """
    if not isinstance(text, str):
        raise TypeError("wrap() first argument must be a string")
    if not isinstance(width, int) or isinstance(width, bool):
        raise TypeError("wrap() second argument must be an integer")
    if width <= 0:
        raise ValueError("wrap() second argument must be positive")

    lines = []
    for line in text.split("\n"):
        if not line.strip():
            lines.append("")
            continue
        indent = line[:len(line) - len(line.lstrip())]
        lines.append(textwrap.fill(line, width, subsequent_indent=indent, break_on_hyphens=False))
    return "\n".join(lines)


Unset = UnsetType()
"""
Sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "sformat",
    "wrap",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
