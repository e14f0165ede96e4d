"""
Multicommand option schemas.

An OptionSchema declares which options a command accepts, in the shape the
tokenizer consumes:

- boolean: names of presence-only options (flags), e.g. ("h", "dry-run").
- string: names of options whose values must never be coerced to numbers.
- default: values for options absent from the command line.
- alias: name -> canonical name (or several names); every alias carries the
  identical value after tokenizing.
- stop_early: stop option parsing at the first positional argument.

Schemas are immutable. Extension hooks receive a schema and return an extended
one, so a class hierarchy composes its options as a left fold:

    class Base(CommandDefinition):
        def add_options(self, options):
            return super().add_options(options).add(boolean="verbose", alias={"v": "verbose"})

    class Frob(Base):
        def add_options(self, options):
            return super().add_options(options).add(string=["out"], default={"out": "-"})

Every hook chain starts from OptionSchema.seed(), which declares -h/--help.
"""
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import final

from .utils import Unset, coalesce


def _names(cls, field, value):
    """
    Normalize a name declaration (a string or an iterable of strings) to a tuple.
    """
    if isinstance(value, str):
        value = (value,)
    elif not isinstance(value, Iterable):
        raise TypeError(f"{cls.__name__} {field!r} must be a string or an iterable of strings")
    value = tuple(value)
    for name in value:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__name__} {field!r} must be a string or an iterable of strings")
        if not name:
            raise ValueError(f"{cls.__name__} {field!r} names must be non-empty")
    return value


def _mapping(cls, field, value):
    if not isinstance(value, Mapping):
        raise TypeError(f"{cls.__name__} {field!r} must be a mapping")
    for name in value:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__name__} {field!r} keys must be strings")
    return dict(value)


def _aliases(cls, value):
    aliases = _mapping(cls, "alias", value)
    for name, targets in aliases.items():
        aliases[name] = targets if isinstance(targets, str) else _names(cls, "alias", targets)
    return aliases


@final
class OptionSchema:
    """
    Immutable declaration of the options one command accepts.

    Merging (add() and |)
    - boolean/string: concatenated in order (duplicates are harmless to the tokenizer).
    - default/alias: merged key by key, later contributions override.
    - stop_early: overridden when given; the right operand of | always gives it.

    Fields are exposed read-only: tuples for name lists, MappingProxyType for maps.
    """
    __slots__ = ("_boolean", "_string", "_default", "_alias", "_stop_early")

    def __init__(self, *, boolean=(), string=(), default=MappingProxyType({}), alias=MappingProxyType({}),
                 stop_early=False):
        cls = type(self)
        object.__setattr__(self, "_boolean", _names(cls, "boolean", boolean))
        object.__setattr__(self, "_string", _names(cls, "string", string))
        object.__setattr__(self, "_default", MappingProxyType(_mapping(cls, "default", default)))
        object.__setattr__(self, "_alias", MappingProxyType(_aliases(cls, alias)))
        object.__setattr__(self, "_stop_early", bool(stop_early))

    @classmethod
    def seed(cls):
        """
        Return the schema every hook chain starts from: the -h/--help flag.
        """
        return cls(boolean=("h",), alias={"h": "help"})

    @property
    def boolean(self):
        return self._boolean

    @property
    def string(self):
        return self._string

    @property
    def default(self):
        return self._default

    @property
    def alias(self):
        return self._alias

    @property
    def stop_early(self):
        return self._stop_early

    def add(self, *, boolean=(), string=(), default=MappingProxyType({}), alias=MappingProxyType({}),
            stop_early=Unset):
        """
        Return a new schema extended with the given declarations.

        This schema is left untouched; chain the result through further hooks.
        """
        cls = type(self)
        return cls(
            boolean=self._boolean + _names(cls, "boolean", boolean),
            string=self._string + _names(cls, "string", string),
            default={**self._default, **_mapping(cls, "default", default)},
            alias={**self._alias, **_aliases(cls, alias)},
            stop_early=coalesce(stop_early, self._stop_early),
        )

    def __or__(self, other, /):
        if not isinstance(other, OptionSchema):
            return NotImplemented
        return self.add(
            boolean=other.boolean,
            string=other.string,
            default=other.default,
            alias=other.alias,
            stop_early=other.stop_early,
        )

    def __replace__(self, /, **overrides):
        fields = {
            "boolean": self._boolean,
            "string": self._string,
            "default": self._default,
            "alias": self._alias,
            "stop_early": self._stop_early,
        }
        unknown = overrides.keys() - fields.keys()
        if unknown:
            raise TypeError(f"{type(self).__name__} got unexpected field {min(unknown)!r}")
        return type(self)(**(fields | overrides))

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other, /):
        if not isinstance(other, OptionSchema):
            return NotImplemented
        return (
            self._boolean == other._boolean and
            self._string == other._string and
            dict(self._default) == dict(other._default) and
            dict(self._alias) == dict(other._alias) and
            self._stop_early == other._stop_early
        )

    __hash__ = None

    def __repr__(self):
        return "option-schema(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "boolean", self._boolean
        yield "string", self._string
        yield "default", dict(self._default)
        yield "alias", dict(self._alias)
        yield "stop_early", self._stop_early


__all__ = (
    "OptionSchema",
)
