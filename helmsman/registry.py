"""
Helmsman reference host: command registry and dispatcher.

Builders talk to a registrar only through register(owner, spec, name). This
module ships an in-memory registrar that also dispatches invocations, so the
library is usable (and testable) end to end without any other host.

What this module provides
- CommandSpec: the compiled command handed over by Builder.register().
- Registration: a registered (owner, name, spec) triple.
- Result: a small success/failure outcome executors may return.
- Registry: the namespace of command names plus dispatch().

Dispatch pipeline
1. split the prompt (shlex for strings; iterables are used as tokens)
2. resolve the command name                  → UnknownCommandError
3. check the permission when the source can  → PermissionDeniedError
4. run the elements in declaration order     → UncastableValueError
5. reject leftover tokens                    → UnparsedTokensError
6. call the compiled executor                → MissingArgumentError, or the outcome

Faults are surfaced through Registry.trigger(): raised when shell=False,
rendered with rich on stderr (and dispatch returns None) when shell=True.
"""
import copy
import shlex
from collections import deque
from collections.abc import Iterable
from threading import Lock
from typing import Any, NamedTuple

from rich.table import Table
from rich.text import Text

from .faults import *


class CommandSpec(NamedTuple):
    """
    Compiled command specification.

    Fields
    - descr: str | Text | None
    - permission: str | None
    - elements: tuple of parsing elements, in declaration order
    - executor: execute(source, context) -> outcome
    - usage: usage line, e.g. "say <msg>"
    """
    descr: Any
    permission: Any
    elements: tuple
    executor: Any
    usage: str


class Registration(NamedTuple):
    owner: Any
    name: str
    spec: CommandSpec


class Result(NamedTuple):
    """
    Outcome of an executor.

    - success: whether the command did what was asked
    - payload: optional value carried back to the caller
    """
    success: bool
    payload: Any = None

    @classmethod
    def succeeded(cls, payload=None, /):
        return cls(True, payload)

    @classmethod
    def failed(cls, payload=None, /):
        return cls(False, payload)


class Registry:
    """
    In-memory registrar and dispatcher.

    Runtime flags (keyword-only)
    - shell: render faults with rich instead of raising them.
    - fancy: wrap rendered faults in a Panel.
    - colorful: colorize rendered faults.

    Thread-safety
    - register() and unregister() serialize writes with a lock; names(),
      iteration and the help table read a snapshot taken under the same lock.
    """

    def __init__(self, *, shell=False, fancy=False, colorful=True):
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)
        self._commands = {}
        self._lock = Lock()

    def register(self, owner, spec, name, /):
        """
        Claim `name` for `spec` on behalf of `owner`.

        Names are case-insensitive. Claiming a taken name raises NameTakenError
        (always raised, never rendered: registration happens at setup time).
        """
        if not isinstance(spec, CommandSpec):
            raise TypeError("register() second argument must be a command spec")
        if not isinstance(name, str):
            raise TypeError("register() third argument must be a string")

        with self._lock:
            if (key := name.lower()) in self._commands:
                raise NameTakenError(
                    f"command name {name!r} is already registered by {self._commands[key].owner!r}",
                    code=FaultCode.NAME_TAKEN,
                    title="name taken",
                    hint="pick another name or unregister the existing command",
                    command=name,
                )
            self._commands[key] = registration = Registration(owner, name, spec)
        return registration

    def unregister(self, name, /):
        if not isinstance(name, str):
            raise TypeError("unregister() argument must be a string")
        with self._lock:
            return self._commands.pop(name.lower(), None)

    def get(self, name, /):
        if not isinstance(name, str):
            raise TypeError("get() argument must be a string")
        return self._commands.get(name.lower())

    def names(self):
        return tuple(registration.name for registration in self._snapshot())

    def __contains__(self, name):
        return isinstance(name, str) and name.lower() in self._commands

    def __iter__(self):
        return iter(self._snapshot())

    def __len__(self):
        return len(self._commands)

    def _snapshot(self):
        with self._lock:
            return tuple(self._commands.values())

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this registry's runtime flags merged in.
        """
        trigger(fault, **options, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def dispatch(self, source, prompt, /):
        """
        Run a command line on behalf of `source`.

        Parameters
        - source: caller identity, passed through to the executor untouched.
          When it provides has_permission(node), commands with a permission
          are checked against it.
        - prompt: str (shell-like, split with shlex) or Iterable[str] (tokens).

        Returns
        - the executor's outcome, unchanged; None when a fault was rendered (shell mode).
        """
        if isinstance(prompt, str):
            tokens = deque(shlex.split(prompt))
        elif isinstance(prompt, Iterable):
            tokens = deque()
            for token in prompt:
                if not isinstance(token, str):
                    raise TypeError("dispatch() second argument must be a string or an iterable of strings")
                tokens.append(token)
        else:
            raise TypeError("dispatch() second argument must be a string or an iterable of strings")

        try:
            return self._dispatch(source, tokens)
        except CommandException as fault:
            self.trigger(fault)
            return None

    def _dispatch(self, source, tokens):
        name = tokens.popleft() if tokens else ""
        if (registration := self.get(name)) is None:
            raise UnknownCommandError(
                f"unknown command {name!r}",
                code=FaultCode.UNKNOWN_COMMAND,
                title="unknown command",
                hint=f"available commands: {', '.join(sorted(self.names())) or 'none'}",
                command=name,
            )

        spec = registration.spec
        if spec.permission and callable(check := getattr(source, "has_permission", None)) and not check(spec.permission):
            raise PermissionDeniedError(
                f"missing permission {spec.permission!r} for command {registration.name!r}",
                code=FaultCode.PERMISSION_DENIED,
                title="permission denied",
                hint="ask an administrator for access",
                command=registration.name,
            )

        context = {}
        try:
            for element in spec.elements:
                element.parse(tokens, context)
            if tokens:
                raise UnparsedTokensError(
                    f"unexpected {' '.join(map(repr, tokens))} after the last argument",
                    code=FaultCode.UNPARSED_TOKENS,
                    title="unparsed tokens",
                    hint=f"usage: {spec.usage}",
                    tokens=tuple(tokens),
                )
            return spec.executor(source, context)
        except CommandException as fault:
            raise copy.replace(fault, command=fault.options.get("command", registration.name)) from None

    def usage(self, name, /):
        if (registration := self.get(name)) is None:
            return None
        return registration.spec.usage

    def __rich__(self):
        table = Table(title="commands", title_justify="left")
        table.add_column("usage", style="bold")
        table.add_column("permission", style="dim")
        table.add_column("description")
        for registration in sorted(self._snapshot(), key=lambda registration: registration.name):
            spec = registration.spec
            table.add_row(
                spec.usage,
                spec.permission or "",
                spec.descr if isinstance(spec.descr, Text) else Text(spec.descr or ""),
            )
        return table

    def __repr__(self):
        return f"registry(names={self.names()!r}, shell={self.shell!r}, fancy={self.fancy!r}, colorful={self.colorful!r})"


__all__ = (
    "CommandSpec",
    "Registration",
    "Result",
    "Registry",
)
