r"""
Multicommand tokenizer: raw argv + OptionSchema -> Arguments.

The tokenizer follows minimist conventions, so command authors can rely on the
shapes they already know from that family of parsers:

- long options:  --key=value | --key value | --key (true, or "" for strings)
                 --no-key (false) | --key true/false (booleans)
- short options: -abc (three flags) | -n5, -n=5 | -o value (last letter only)
- terminator:    "--" ends option parsing; the rest are positionals verbatim
- numbers:       numeric-looking values become int/float unless the key is a
                 declared string ("_" declared as string keeps positionals as text)
- repetition:    repeated options collect a list in command-line order
- aliases:       every write goes to all names of an alias group

Nothing is validated here: unknown options are accepted as given. Deciding what
is acceptable is the job of the command's validation hook.
"""
import copy
import logging
import math
import re
from collections import deque
from collections.abc import Iterable

from .arguments import Arguments
from .options import OptionSchema
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

_inline = re.compile(r"--([^=]+)=(.*)", re.DOTALL)
_negated = re.compile(r"--no-(.+)", re.DOTALL)
_long = re.compile(r"--(.+)", re.DOTALL)
_short = re.compile(r"-[^-]+", re.DOTALL)
_switch = re.compile(r"(-|--)[^-]")
_numeric = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[-+]?\d+)?", re.IGNORECASE | re.ASCII)
_hexadecimal = re.compile(r"0x[0-9a-f]+", re.IGNORECASE | re.ASCII)
_integral = re.compile(r"[-+]?\d+", re.ASCII)
_attached = re.compile(r"-?\d+(\.\d*)?(e-?\d+)?", re.ASCII)


def _number(token):
    """
    Return the number an ASCII token spells, or Unset when it is not numeric.
    """
    if _hexadecimal.fullmatch(token):
        return int(token, 16)
    if _integral.fullmatch(token):
        return int(token)
    if _numeric.fullmatch(token):
        number = float(token)
        # out of range spellings (1e999) stay text
        return number if math.isfinite(number) else Unset
    return Unset


def _groups(schema):
    """
    Resolve alias declarations into groups: each name maps to every other name
    it is (transitively) aliased with.
    """
    parents = {}

    def find(name):
        parents.setdefault(name, name)
        while parents[name] != name:
            parents[name] = parents[parents[name]]
            name = parents[name]
        return name

    for name, targets in schema.alias.items():
        for target in (targets,) if isinstance(targets, str) else targets:
            parents[find(name)] = find(target)

    members = {}
    for name in parents:
        members.setdefault(find(name), []).append(name)
    return {name: tuple(peer for peer in members[find(name)] if peer != name) for name in parents}


class _Tokenizer:
    """
    One-shot tokenizing state for a single argv.
    """

    def __init__(self, schema):
        self._aliases = _groups(schema)
        self._booleans = self._expand(schema.boolean)
        self._strings = self._expand(schema.string)
        self._defaults = schema.default
        self._stop_early = schema.stop_early
        self._explicit = set()
        self._values = {}
        self._positionals = []

    def _expand(self, names):
        expanded = set()
        for name in names:
            expanded.add(name)
            expanded.update(self._aliases.get(name, ()))
        return expanded

    def _names(self, key):
        return (key, *self._aliases.get(key, ()))

    def _set(self, key, value):
        if isinstance(value, str) and key not in self._strings:
            value = coalesce(_number(value), value)
        for name in self._names(key):
            if name not in self._explicit:
                self._explicit.add(name)
                self._values[name] = value
            elif isinstance(self._values[name], list):
                self._values[name].append(value)
            else:
                self._values[name] = [self._values[name], value]

    def _flag(self, key):
        self._set(key, "" if key in self._strings else True)

    def _positional(self, token):
        if "_" not in self._strings:
            token = coalesce(_number(token), token)
        self._positionals.append(token)

    def _consume(self, key, tokens, *, switch):
        """
        give `key` the next token as its value when the forms allow it.
        """
        following = tokens[0] if tokens else None
        if following is not None and switch(following) and key not in self._booleans:
            self._set(key, tokens.popleft())
        elif following in ("true", "false"):
            self._set(key, tokens.popleft() == "true")
        else:
            self._flag(key)

    def _cluster(self, token, tokens):
        letters = token[1:-1]
        for index, letter in enumerate(letters):
            rest = token[index + 2:]

            if rest == "-":
                self._set(letter, rest)
                continue

            if re.match(r"[A-Za-z]", letter) and rest.startswith("="):
                return self._set(letter, rest[1:])

            if re.match(r"[A-Za-z]", letter) and _attached.fullmatch(rest):
                return self._set(letter, rest)

            if index + 1 < len(letters) and re.match(r"\W", letters[index + 1]):
                return self._set(letter, rest)

            self._flag(letter)

        key = token[-1]
        if key != "-":
            self._consume(key, tokens, switch=lambda following: following and not _switch.match(following))

    def __call__(self, argv):
        for name in self._booleans:
            self._values[name] = next(
                (self._defaults[peer] for peer in self._names(name) if peer in self._defaults), False
            )

        verbatim = []
        if "--" in argv:
            index = argv.index("--")
            argv, verbatim = argv[:index], argv[index + 1:]

        tokens = deque(argv)
        while tokens:
            token = tokens.popleft()

            if match := _inline.fullmatch(token):
                key, value = match.groups()
                self._set(key, value != "false" if key in self._booleans else value)
            elif match := _negated.fullmatch(token):
                self._set(match[1], False)
            elif match := _long.fullmatch(token):
                self._consume(match[1], tokens, switch=lambda following: not _switch.match(following))
            elif _short.match(token):
                self._cluster(token, tokens)
            else:
                self._positional(token)
                if self._stop_early:
                    self._positionals.extend(tokens)
                    break
        self._positionals.extend(verbatim)

        for key, value in self._defaults.items():
            if key in self._booleans or any(name in self._explicit for name in self._names(key)):
                continue
            for name in self._names(key):
                self._values[name] = copy.deepcopy(value)

        return Arguments(self._values, self._positionals)


def tokenize(argv, schema=Unset, /):
    """
    Split an argument vector into option values and positional tokens.

    Parameters
    - argv: Iterable[str], the arguments after the program (and command) name.
    - schema: OptionSchema, defaults to OptionSchema.seed().

    Returns
    - Arguments: option values by name and alias; positionals in order
      (numeric-looking positionals are returned as numbers).

    Raises
    - TypeError: when argv is not an iterable of strings or schema is not an OptionSchema.
    """
    schema = coalesce(schema, OptionSchema.seed())
    if not isinstance(schema, OptionSchema):
        raise TypeError("tokenize() second argument must be an option schema")
    if isinstance(argv, str) or not isinstance(argv, Iterable):
        raise TypeError("tokenize() first argument must be an iterable of strings")
    argv = list(argv)
    if not all(isinstance(token, str) for token in argv):
        raise TypeError("tokenize() first argument must be an iterable of strings")

    arguments = _Tokenizer(schema)(argv)
    logger.debug("tokenized %r into %r", argv, arguments)
    return arguments


__all__ = (
    "tokenize",
)
