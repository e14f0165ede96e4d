"""
Multicommand faults (errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every fault the framework reports,
  and the discriminant dispatch and invoke() decide on (see FaultCode.usage).
- CommandError / CommandUsageError / UnexpectedArgError: the taxonomy.
  • CommandError: the command cannot complete.
  • CommandUsageError: the caller supplied invalid command-line input.
  • UnexpectedArgError: more positional arguments than the command consumed.
- trigger(): print a fault to stderr through rich and exit non-zero.

Propagation
- Faults are ordinary exceptions; hooks raise them and the dispatcher forwards
  them as the outcome of dispatch().
- Anything that is not a CommandError is a defect and is never converted or
  swallowed by this package.

Styling
- Faults render themselves for rich (__rich__). The host application may define
  __styles__ (palette overrides) and __prog__ (program name) in __main__.
"""
import copy
import logging
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - execution (101xx): COMMAND_FAILED, NOT_IMPLEMENTED
    - usage (102xx): USAGE, UNRECOGNIZED_COMMAND, MISSING_COMMAND, UNEXPECTED_ARGUMENT

    the host application can provide a __codes__ mapping in __main__ to show
    friendlier labels instead of the numbers (see normalize()).
    """
    # --- execution faults (101xx) ---
    COMMAND_FAILED       = 10101
    NOT_IMPLEMENTED      = 10102

    # --- usage faults (102xx) ---
    USAGE                = 10201
    UNRECOGNIZED_COMMAND = 10202
    MISSING_COMMAND      = 10203
    UNEXPECTED_ARGUMENT  = 10204

    @property
    def usage(self):
        """
        true when the code denotes invalid caller input rather than a failed command.
        """
        return 10200 <= self.value < 10300

    def normalize(self):
        """
        return a host-normalized string for this code.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandError(Exception):
    """
    Error that prevents the command from running.

    Attributes
    - message: the human-readable message.
    - code: FaultCode discriminant (COMMAND_FAILED unless given).
    - hint: optional one-line suggestion shown under the message.
    - options: rendering/reporting options merged through copy.replace().
    """
    __defaultcode__ = FaultCode.COMMAND_FAILED
    __title__ = "command failed"

    def __init__(self, message, /, *, code=Unset, hint=Unset, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.code = FaultCode(coalesce(code, type(self).__defaultcode__))
        self.hint = coalesce(hint)
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = getattr(main, "__prog__", self.options.get("prog") or os.path.basename(sys.argv[0]))

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " | ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.__title__.title(), "error-title"),
            " ]"
        )
        renders = [text(self.message, "error-message")]
        if self.hint:
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        console = self.options.get("console") or Console(stderr=True)
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        # built without __init__, subclasses may take other constructor arguments
        fault = type(self).__new__(type(self), *self.args)
        fault.__dict__.update(self.__dict__)
        fault.code = FaultCode(overrides.pop("code", self.code))
        fault.hint = overrides.pop("hint", self.hint)
        fault.options = MappingProxyType({**self.options, **overrides})
        return fault


class CommandUsageError(CommandError):
    """
    Command line usage error: the caller supplied invalid input.
    """
    __defaultcode__ = FaultCode.USAGE
    __title__ = "usage error"


class UnexpectedArgError(CommandUsageError):
    """
    More non-option arguments were given than the command accepts.

    The message is built from the offending token; `argument` keeps it.
    """
    __defaultcode__ = FaultCode.UNEXPECTED_ARGUMENT
    __title__ = "unexpected argument"

    def __init__(self, argument, /, **options):
        super().__init__('UnexpectedArgument: "%s"' % argument, **options)
        self.argument = argument


def trigger(fault, /, **options):
    """
    surface a fault: render it to stderr and exit with status 1.

    contract
    - fault must provide __trigger__ and __replace__ methods (CommandError does).
    - options are merged into the fault via copy.replace() before triggering.

    typical options
    - prog, colorful, fancy, console (a rich Console to print on).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    logger.debug("triggering fault %s: %s", getattr(fault, "code", None), fault)
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandError",
    "CommandUsageError",
    "UnexpectedArgError",
    "trigger",
)
