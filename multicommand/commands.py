"""
Multicommand command layer: what one named command is.

What this module provides
- CommandDescriptor: static metadata for a registered command (syntax, summary,
  derived name, normalized name, help-group marker, the class itself).
- CommandDefinition: base class for named commands. A subclass declares its
  syntax and summary and overrides the hooks it needs:
  • add_options(options) -> OptionSchema   declare options (chain via super())
  • parse_args(args)                        consume positionals, raise usage errors
  • do_command(args)                        perform the command (may be async)
  • get_help(right_margin) -> str           help for `<command> --help`
- command(...): build a CommandDefinition from plain functions, hook by hook.

Quick start
    from multicommand import CommandDefinition, CommandRegistry, command, invoke

    class Copy(CommandDefinition):
        syntax = "copy <source> <target> [--force]"
        summary = "Copy one file over another."

        def add_options(self, options):
            return super().add_options(options).add(boolean="force", alias={"f": "force"})

        def parse_args(self, args):
            self.source = args.next()
            self.target = args.next()
            if self.target is None:
                raise self.usage_error("copy needs a %s and a %s", "source", "target")

        async def do_command(self, args):
            if not args["force"] and not await self.confirm("overwrite %s?" % self.target):
                raise self.error("not copied")
            ...

    @command("list [--all]", "List everything there is.")
    def listing(self, args):
        ...

    tool = CommandRegistry()
    tool.register([Copy, listing])
    invoke(tool)

Lifecycle of a definition
- One instance per dispatch, constructed with its binding:
  CommandDefinition(registry, descriptor). It is discarded after the dispatch.
"""
import asyncio
import inspect
from abc import ABC
from collections.abc import Mapping
from types import MappingProxyType
from typing import NamedTuple

from rich.prompt import Prompt

from .faults import *
from .utils import *


class CommandDescriptor(NamedTuple):
    """
    Static metadata describing one registrable command.

    Fields
    - syntax: usage string; its first whitespace-delimited token is the command name.
    - summary: one-line description for the aggregate help listing.
    - name: first token of syntax, display case preserved.
    - normname: lowercased name, the unique dispatch key.
    - first_of_group: true for the first command of a register() call.
    - command_class: the CommandDefinition subclass to instantiate.
    - extra: any further keys get_info() returned, read-only.
    """
    syntax: str
    summary: str
    name: str
    normname: str
    first_of_group: bool
    command_class: type
    extra: Mapping = MappingProxyType({})

    @classmethod
    def describe(cls, command_class, /, *, first_of_group=False):
        """
        Derive the descriptor of a command class from its get_info().

        Raises
        - TypeError: when the class is not a CommandDefinition or its info is malformed.
        - ValueError: when the syntax carries no name.
        """
        if not isinstance(command_class, type) or not issubclass(command_class, CommandDefinition):
            raise TypeError(f"command {command_class!r} must be a CommandDefinition subclass")

        info = command_class.get_info()
        if not isinstance(info, Mapping):
            raise TypeError(f"{command_class.__name__}.get_info() must return a mapping")
        info = dict(info)
        syntax = info.pop("syntax", Unset)
        summary = info.pop("summary", Unset)
        if not isinstance(syntax, str):
            raise TypeError(f"{command_class.__name__} 'syntax' must be a string")
        if not isinstance(summary, str):
            raise TypeError(f"{command_class.__name__} 'summary' must be a string")
        if not syntax.split():
            raise ValueError(f"{command_class.__name__} 'syntax' must start with the command name")

        name = syntax.split()[0]
        return cls(
            syntax=syntax,
            summary=summary,
            name=name,
            normname=name.lower(),
            first_of_group=first_of_group,
            command_class=command_class,
            extra=MappingProxyType(info),
        )


class CommandDefinition(ABC):
    """
    Base class for a named command.

    When the first command-line argument names a registered command, the
    registry instantiates that command's class and runs its hooks in order:
    add_options() → (tokenize) → parse_args() → do_command(). `-h`/`--help`
    short-circuit to get_help() instead of validating and running.

    Class attributes
    - syntax: e.g. "copy <source> <target> [--force]"; the first token is the name.
    - summary: one line for the aggregate help listing.
    Override get_info() instead when the metadata has to be computed.

    Instance attributes (bound at construction)
    - registry: the dispatching CommandRegistry.
    - name: the command name as written in syntax (display case).
    - info: the CommandDescriptor.
    """
    syntax = Unset
    summary = Unset

    @classmethod
    def get_info(cls):
        """
        Return {"syntax": ..., "summary": ...} describing this command.
        """
        return {"syntax": cls.syntax, "summary": cls.summary}

    def __init__(self, registry, info, /):
        if not isinstance(info, CommandDescriptor):
            raise TypeError(f"{type(self).__name__} 'info' must be a command descriptor")
        self.registry = registry
        self.name = info.name
        self.info = info

    def add_options(self, options):
        """
        Return `options` extended with this command's option declarations.

        The schema handed in already declares -h/--help. Call
        super().add_options(options) first so every ancestor contributes its
        slice, then extend the result with OptionSchema.add(). Does nothing by
        default.
        """
        return options

    def parse_args(self, args):
        """
        Validate the tokenized arguments.

        `args` maps option names to values and carries the non-option tokens in
        args.positionals. Remove every positional this command recognizes
        (args.next() returns None once they run out); the registry reports any
        left over as UnexpectedArgError. Raise a usage error (see usage_error())
        for invalid input. Extracted values may be kept on self or stored back
        into args. Must be a plain function, not a coroutine function. Does
        nothing by default.
        """

    def do_command(self, args):
        """
        Perform the command with the validated option values.

        May be a coroutine function. Raise CommandError to report that the
        command could not complete; args.positionals is no longer available.
        """
        raise CommandError(f"Command '{self.name}' not implemented", code=FaultCode.NOT_IMPLEMENTED)

    def get_help(self, right_margin):
        """
        Return the help shown for `<command> --help`, wrapped at right_margin
        by the registry. Defaults to this command's entry of the aggregate help.
        """
        return self.registry.get_help_summary_entry(self.info, right_margin)

    async def confirm(self, message):
        """
        Ask the operator a yes/no question; true only for "y" or "yes" (any case).

        The prompt waits for one line of input in a worker thread, so the event
        loop keeps running.
        """
        answer = await asyncio.to_thread(
            Prompt.ask, f"{message} (y/n)", default="n", show_default=False, console=self.registry.console
        )
        return answer.strip().lower() in ("y", "yes")

    def error(self, message, /, *substitutions):
        """
        Build (not raise) a CommandError; message accepts printf-style codes (see sformat()).
        """
        return CommandError(sformat(message, *substitutions))

    def usage_error(self, message, /, *substitutions):
        """
        Build (not raise) a CommandUsageError; message accepts printf-style codes (see sformat()).
        """
        return CommandUsageError(sformat(message, *substitutions))

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, syntax={self.info.syntax!r})"

    def __rich_repr__(self):
        yield "name", self.name
        yield "syntax", self.info.syntax
        yield "summary", self.info.summary


def command(syntax, summary, /, *, options=Unset, validate=Unset, help=Unset):
    """
    Build a CommandDefinition subclass from functions instead of a class body.

    The decorated function becomes do_command; the optional callables fill in
    the other hooks. Every function receives the command instance first, just
    like a method:

    - options(self, options) -> OptionSchema       (add_options)
    - validate(self, args)                          (parse_args)
    - help(self, right_margin) -> str               (get_help)

    Hooks left out keep the CommandDefinition defaults.

    Example
        @command("greet <name>", "Say hello.", validate=lambda self, args: setattr(self, "who", args.next()))
        async def greet(self, args):
            print("hello", self.who)
    """
    if not isinstance(syntax, str):
        raise TypeError("command() first argument must be a string")
    if not isinstance(summary, str):
        raise TypeError("command() second argument must be a string")

    hooks = {}
    for name, hook in (("add_options", options), ("parse_args", validate), ("get_help", help)):
        if hook is Unset:
            continue
        if not callable(hook):
            raise TypeError(f"command() {name.replace('_', ' ')} hook must be callable")
        hooks[name] = hook

    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        return type(getattr(callback, "__name__", "command"), (CommandDefinition,), {
            "__doc__": inspect.getdoc(callback),
            "__module__": getattr(callback, "__module__", __name__),
            "syntax": syntax,
            "summary": summary,
            "do_command": callback,
            **hooks,
        })

    return wrapper


__all__ = (
    "CommandDescriptor",
    "CommandDefinition",
    "command",
)
