"""
Helmsman faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- IllegalBuilderStateError: programmer error raised while registering an
  incomplete builder. It is not a CommandException, so it is never
  caught by the dispatch layer alongside user faults.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- Reconstruction and the registry create faults and surface them with trigger(fault, **ctx).
- In non-shell mode, exceptions are raised and warnings are emitted with warnings.warn;
  in shell mode, both are rendered via rich on stderr.
"""
import copy
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, PERMISSION_DENIED
    - values (1112x)
      • MISSING_ARGUMENT, UNCASTABLE_VALUE, UNPARSED_TOKENS
    - registration (1113x)
      • NAME_TAKEN
    - warnings (12xxx)
      • DISCARDED_EXECUTOR

    normalize() lets the host remap codes to its own labels while the numeric
    values stay stable.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101
    PERMISSION_DENIED           = 11102

    # --- value errors (11xxx) ---
    MISSING_ARGUMENT            = 11121
    UNCASTABLE_VALUE            = 11122
    UNPARSED_TOKENS             = 11123

    # --- registration errors (11xxx) ---
    NAME_TAKEN                  = 11131

    # --- warnings (12xxx) ---
    DISCARDED_EXECUTOR          = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _renderer(fault, styles, title, message):
    """
    shared rich layout for errors and warnings.

    layout
    - header: "[ prog — code | title ]"
    - body: message, then "→ hint", then the host docs for the code (if any)
    - fancy: everything wrapped in a Panel titled by the header
    """
    main = __import__("__main__")
    options = defaultdict(lambda: Unset, fault.options)
    colorful = bool(_option(options, "colorful", True))
    fancy = bool(_option(options, "fancy", False))
    styles = defaultdict(str, styles | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    prog = getattr(main, "__prog__", _option(options, "command", "helmsman"))
    code = options["code"]

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if code else "", "code"),
        " | ",
        text(str(_option(options, "title", "")).title(), title),
        " ]"
    )
    body = [text(fault.message, message)]
    if hint := _option(options, "hint", None):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
    if code and (docs := getdoc(code)):
        body.append(text(docs, "docs"))

    if fancy:
        return Panel(Group(*body), title=header, title_align="left")

    return Group(header, *body)


def _option(options, name, default, /):
    """
    read a rendering option, falling back to `default` when it was never set.
    """
    value = options[name]
    return default if value is Unset else value


class CommandException(Exception):
    """
    base class of every user-facing fault.

    options
    - code: FaultCode, title: str, hint: str, plus any context the reporter wants
      to carry (e.g., command, parameters, token).
    - shell/fancy/colorful: rendering switches merged in by trigger().
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Text | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        return _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "dim",
        }, "error-title", "error-message")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingArgumentError(CommandException): ...
class UnknownCommandError(CommandException): ...
class PermissionDeniedError(CommandException): ...
class UncastableValueError(CommandException): ...
class UnparsedTokensError(CommandException): ...
class NameTakenError(CommandException): ...


class CommandWarning(ABC, Warning):
    """
    base class of every user-facing warning (never aborts the current operation).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Text | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        return _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
            "docs": "dim",
        }, "warning-title", "warning-message")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 4))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DiscardedExecutorWarning(CommandWarning): ...


class IllegalBuilderStateError(RuntimeError):
    """
    a builder was used in a state its operation does not accept.

    raised by Builder.register() when no executor is attached (for instance,
    because a parameter was added after executes()). this is a construction
    bug: fail fast at setup time instead of catching it.
    """


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised
      and warnings are emitted through the warnings module.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "MissingArgumentError",
    "UnknownCommandError",
    "PermissionDeniedError",
    "UncastableValueError",
    "UnparsedTokensError",
    "NameTakenError",
    "CommandWarning",
    "DiscardedExecutorWarning",
    "IllegalBuilderStateError",
    "FaultCode",
    "trigger",
    "getdoc",
)
