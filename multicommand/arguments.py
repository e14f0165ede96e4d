"""
Multicommand parsed arguments.

Arguments is what flows through a command's hooks after tokenizing:

- the mapping part holds option values by name (aliases included): bool, str,
  int, float, or a list of these when the option was repeated;
- `positionals` holds the non-option tokens that validation has not consumed yet.

Validation hooks drain `positionals` (args.next() or list operations) and may
store what they extract back into the mapping. The dispatcher then seals the
structure: the execute hook only sees option values.
"""
from .utils import Unset


class Arguments(dict):
    """
    Option values plus the leftover positional tokens.

    Lifecycle
    - built by the tokenizer with every positional still pending;
    - validation consumes positionals and raises usage errors for bad input;
    - seal() is called by the dispatcher before execution; afterwards
      `positionals` raises AttributeError.
    """
    __slots__ = ("_positionals",)

    def __init__(self, options=(), /, positionals=()):
        super().__init__(options)
        self._positionals = list(positionals)

    @property
    def positionals(self):
        if self._positionals is Unset:
            raise AttributeError("positional arguments are not available after validation")
        return self._positionals

    @property
    def sealed(self):
        return self._positionals is Unset

    def next(self):
        """
        Remove and return the next positional token, or None when none remain.
        """
        positionals = self.positionals
        return positionals.pop(0) if positionals else None

    take = next

    def seal(self):
        """
        Withdraw the positional tokens; they must have been consumed by now.
        """
        if self.positionals:
            raise ValueError("cannot seal arguments with pending positionals")
        self._positionals = Unset

    def __repr__(self):
        if self.sealed:
            return f"arguments({dict.__repr__(self)})"
        return f"arguments({dict.__repr__(self)}, positionals={self._positionals!r})"

    def __rich_repr__(self):
        yield "options", dict(self)
        if not self.sealed:
            yield "positionals", self._positionals


__all__ = (
    "Arguments",
)
