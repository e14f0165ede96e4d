"""
Multicommand registry: register named commands, dispatch argument vectors.

CommandRegistry is the tool itself. The first command-line argument, when it
does not start with a dash, names the command to run; otherwise the registry's
own default command runs. Both paths share one pipeline:

    route → extend options → tokenize → (help?) → validate → execute

- extend options: add_options()/add_default_options() fold declarations into
  OptionSchema.seed(); errors here are defects and propagate untouched.
- help: -h/--help renders help (command or aggregate) and ends the dispatch.
- validate: parse_args()/parse_default_args(); CommandError ends the dispatch,
  and positionals left over become UnexpectedArgError.
- execute: do_command()/do_default_command(), awaited when it is a coroutine.

dispatch() is a coroutine and its outcome is the completion: it returns on
success and raises the reported fault otherwise. invoke() runs a registry from
the process arguments and turns faults into a printed message and exit status 1.
"""
import asyncio
import inspect
import logging
import math
import os.path
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console

from .commands import CommandDescriptor
from .faults import *
from .options import OptionSchema
from .tokenizer import tokenize
from .utils import *

logger = logging.getLogger(__name__)

DEFAULT_WRAP_WIDTH = 80  # column at which help output wraps


def _display(token):
    """
    Render a tokenized positional as the text a user would have typed.
    """
    if isinstance(token, str):
        return token
    if isinstance(token, bool):
        return "true" if token else "false"
    if isinstance(token, float) and math.isfinite(token) and token.is_integer():
        return str(int(token))
    return str(token)


def _sanitized(prompt):
    """
    Normalize a prompt into a list of argument strings.
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if all(isinstance(token, str) for token in tokens):
            return tokens
    raise TypeError("argument vector must be a string or an iterable of strings")


class CommandRegistry:
    """
    A command line that performs one of several named commands, or a default one.

    Configuration (keyword-only)
    - help_wrap_width: column at which help output wraps (default 80).
    - console: rich Console help is written to (default: a Console on stdout).
    - prog: program name shown in fault headers and hints (default: basename of sys.argv[0]).

    Extension points (override in a subclass)
    - add_default_options(), parse_default_args(), do_default_command()
    - get_help(), get_help_intro(), get_help_summary_entry(), get_help_trailer()
    """

    def __init__(self, *, help_wrap_width=Unset, console=Unset, prog=Unset):
        help_wrap_width = coalesce(help_wrap_width, DEFAULT_WRAP_WIDTH)
        if not isinstance(help_wrap_width, int) or isinstance(help_wrap_width, bool):
            raise TypeError(f"{type(self).__name__} 'help_wrap_width' must be an integer")
        if help_wrap_width <= 0:
            raise ValueError(f"{type(self).__name__} 'help_wrap_width' must be positive")
        if not isinstance(console, Console | Unset):
            raise TypeError(f"{type(self).__name__} 'console' must be a rich console")
        if not isinstance(prog, str | Unset):
            raise TypeError(f"{type(self).__name__} 'prog' must be a string")

        self._help_wrap_width = help_wrap_width
        self._console = console
        self._prog = coalesce(prog, os.path.basename(sys.argv[0]))
        self._descriptors = []

    @property
    def help_wrap_width(self):
        return self._help_wrap_width

    @property
    def console(self):
        if self._console is Unset:
            self._console = Console()
        return self._console

    @property
    def prog(self):
        return self._prog

    @property
    def descriptors(self):
        """
        The registered command descriptors, in registration (and display) order.
        """
        return tuple(self._descriptors)

    def register(self, command_classes, /):
        """
        Add named commands (CommandDefinition subclasses). May be called many times.

        If the first command-line argument is the name of one of these commands
        (case-insensitively), that command runs instead of the default command.
        The commands of one call form one group in the aggregate help.

        Raises
        - TypeError: when given something other than an iterable of command classes.
        - ValueError: when a command name is already registered; nothing of the
          call is registered in that case.
        """
        if isinstance(command_classes, type) or not isinstance(command_classes, Iterable):
            raise TypeError(f"{type(self).__name__}.register() argument must be an iterable of command classes")

        batch = []
        taken = {descriptor.normname for descriptor in self._descriptors}
        for command_class in command_classes:
            descriptor = CommandDescriptor.describe(command_class, first_of_group=not batch)
            if descriptor.normname in taken:
                raise ValueError(f"duplicate command name '{descriptor.normname}'")
            taken.add(descriptor.normname)
            batch.append(descriptor)

        self._descriptors.extend(batch)
        logger.debug("registered commands %s", ", ".join(descriptor.name for descriptor in batch) or "(none)")

    add_commands = register

    def lookup(self, name, /):
        """
        Return the descriptor registered under `name` (any case), or None.
        """
        normname = name.lower()
        for descriptor in self._descriptors:
            if descriptor.normname == normname:
                return descriptor
        return None

    async def dispatch(self, argv, /):
        """
        Run the command line described by `argv` (program name excluded).

        Returns
        - whatever the execute hook returned, or None when help was shown.

        Raises
        - CommandUsageError: unrecognized command, invalid input, unexpected arguments.
        - CommandError: raised by the validate or execute hook.
        - anything else a hook raised, unchanged (those are defects).
        """
        argv = _sanitized(argv)

        if argv and not argv[0].startswith("-"):
            descriptor = self.lookup(argv[0])
            if descriptor is None:
                logger.debug("unrecognized command %r", argv[0])
                raise CommandUsageError(
                    f"unrecognized command '{argv[0].lower()}'",
                    code=FaultCode.UNRECOGNIZED_COMMAND,
                    hint=f"run '{self.prog} --help' to see the available commands",
                )
            command = descriptor.command_class(self, descriptor)
            options = command.add_options(OptionSchema.seed())
            route = f"{self.prog} {descriptor.name}"
            argv = argv[1:]
            validate, execute, helper = command.parse_args, command.do_command, command.get_help
        else:
            options = self.add_default_options(OptionSchema.seed())
            route = self.prog
            validate, execute, helper = self.parse_default_args, self.do_default_command, self.get_help

        if not isinstance(options, OptionSchema):
            raise TypeError(f"option hooks must return an option schema, not {type(options).__name__}")

        args = tokenize(argv, options)

        if args.get("help"):
            logger.debug("help requested for %r", route)
            text = helper(self._help_wrap_width)
            self.console.out(wrap(text, self._help_wrap_width), end="", highlight=False)
            return None

        args.positionals[:] = map(_display, args.positionals)
        try:
            outcome = validate(args)
        except CommandError as fault:
            logger.debug("validation of %r failed: %s", route, fault)
            if fault.code.usage and not fault.hint:
                fault.hint = f"run '{route} --help' for usage"
            raise
        if inspect.isawaitable(outcome):
            if inspect.iscoroutine(outcome):
                outcome.close()
            raise TypeError(f"validation hooks must be synchronous, {route!r} returned {type(outcome).__name__}")

        if args.positionals:
            logger.debug("validation of %r left %r", route, args.positionals)
            raise UnexpectedArgError(args.positionals[0], hint=f"run '{route} --help' for usage")

        args.seal()
        logger.debug("running %r with %r", route, args)
        result = execute(args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def add_default_options(self, options):
        """
        Return `options` extended with the options accepted when no command name
        is given. The schema already declares -h/--help. Does nothing by default.
        """
        return options

    def parse_default_args(self, args):
        """
        Validate the arguments of the default command (see CommandDefinition.parse_args).
        Does nothing by default.
        """

    def do_default_command(self, args):
        """
        Perform the default command: the one that runs when the first argument is
        not a command name. May be a coroutine function.

        By default it reports a missing command name, or that there is no default
        command when no commands are registered.
        """
        if self._descriptors:
            raise CommandUsageError(
                "Missing command argument",
                code=FaultCode.MISSING_COMMAND,
                hint=f"run '{self.prog} --help' to see the available commands",
            )
        raise CommandError("Default command not implemented", code=FaultCode.NOT_IMPLEMENTED)

    def get_help(self, right_margin):
        """
        Return the help page summarizing all commands: get_help_intro(), one
        get_help_summary_entry() per command (a blank line opening each group),
        then get_help_trailer(). The registry wraps the result at help_wrap_width.
        """
        if not self._descriptors:
            return "Help is not available."

        help = self.get_help_intro(right_margin)
        for descriptor in self._descriptors:
            if descriptor.first_of_group:
                help += "\n"
            help += self.get_help_summary_entry(descriptor, right_margin)
        return help + self.get_help_trailer(right_margin)

    def get_help_intro(self, right_margin):
        return "This tool supports the following commands:\n\n"

    def get_help_summary_entry(self, descriptor, right_margin):
        """
        Return one command's entry: the upper-cased name with the rest of its
        syntax, then the summary indented by two spaces.
        """
        syntax = descriptor.syntax.lstrip()[len(descriptor.name):]
        return descriptor.name.upper() + syntax + "\n" + wrap("  " + descriptor.summary, right_margin) + "\n"

    def get_help_trailer(self, right_margin):
        return "\n"

    def __invoke__(self, prompt=Unset, /, **options):
        """
        Run this registry to completion from a prompt.

        Parameters
        - prompt: Unset (sys.argv[1:]), a shell-like string (shlex.split), or an
          iterable of strings.
        - options: fault rendering options (colorful, fancy, console).

        CommandError faults are printed to stderr and end the process with status 1;
        anything else propagates.
        """
        tokens = _sanitized(prompt)
        try:
            return asyncio.run(self.dispatch(tokens))
        except CommandError as fault:
            trigger(fault, prog=self.prog, **options)

    def __repr__(self):
        return f"command-registry(prog={self._prog!r}, commands={[d.name for d in self._descriptors]!r})"


def invoke(object, prompt=Unset, /, **options):
    """
    Convenience runner for registries.

    Parameters
    - object: anything implementing __invoke__(prompt, **options), e.g. a CommandRegistry.
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of strings.
    - options: forwarded to __invoke__ (fault rendering options).
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt, **options)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "CommandRegistry",
    "DEFAULT_WRAP_WIDTH",
    "invoke",
)
