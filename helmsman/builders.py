"""
Helmsman builder layer: declare, type and register commands.

What this module provides
- Builder[_A]: an immutable command definition. _A is the composite argument
  type its executor receives; it widens by one nesting level per parameter:
    command("tp")                       → Builder[Source]
      .takes(double("x"))               → Builder[tuple[Source, float]]
      .takes(double("y"))               → Builder[tuple[tuple[Source, float], float]]
  (the static side lives in builders.pyi; at run time reconstruction builds
  exactly the same nesting, see helmsman.reconstruction)
- command(name, *, strict=False): start a builder.

Core ideas
- Every operation returns a new builder (copy.replace protocol); nothing is
  ever mutated, so derived builders can be shared freely.
- takes() discards the executor: an executor written for the narrower
  composite cannot survive a widening. The discard is silent and register()
  refuses the builder until executes() is called again; strict builders also
  issue a DiscardedExecutorWarning when it happens.
- register() is the only side effect: it hands a compiled CommandSpec to a
  registrar. Registrar failures propagate unchanged.

Quick start
    from helmsman import command, double, Registry, Result

    registry = Registry()

    def teleport(arguments):
        (source, x), y = arguments
        return Result.succeeded((x, y))

    command("tp").takes(double("x")).takes(double("y")).executes(teleport).register(registry, "plugin")
    registry.dispatch(player, "tp 1.5 2.5")
"""
import copy
import functools
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from . import reconstruction
from .faults import *
from .parameters import Parameter
from .registry import CommandSpec
from .utils import *


class BuilderType(type):
    """
    Metaclass that wires introspection on Builder.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - builder(name='say', descr=None, permission=None, parameters=(...), executor=None)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_strings(cls, metadata):
    """
    Normalize scalar string metadata fields.

    - name: required str, a letter or digit first, then letters/digits/underscores/hyphens.
    - descr: str | Text | Unset; strings are trimmed and cannot be empty.
    - permission: str | Unset; dotted node such as "plugin.command.say".

    Errors
    - TypeError: wrong type.
    - ValueError: empty or malformed value.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\W_][\w-]*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a single word without spaces")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(permission := metadata["permission"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'permission' must be a string")
    elif isinstance(permission, str) and not re.fullmatch(r"[\w-]+(\.[\w-]+)*", permission := permission.strip()):
        raise ValueError(f"{cls.__typename__} 'permission' must be a dotted permission node")
    metadata["permission"] = coalesce(permission)


def _process_parameters(cls, metadata):
    """
    Validate the declared parameters and stabilize them into a tuple.

    Keys must be unique: they are the lookup keys of reconstruction.
    """
    if not isinstance(parameters := metadata["parameters"], Iterable):
        raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameters")
    seen = set()
    for parameter in (parameters := tuple(parameters)):
        if not isinstance(parameter, Parameter):
            raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameters")
        elif parameter.key in seen:
            raise ValueError(f"{cls.__typename__} parameter name {parameter.key!r} is already in use")
        seen.add(parameter.key)
    metadata["parameters"] = parameters


def _process_executor(cls, metadata):
    if not callable(executor := metadata["executor"]) and executor is not Unset:
        raise TypeError(f"{cls.__typename__} 'executor' must be callable")
    metadata["executor"] = coalesce(executor)


def _process_flags(cls, metadata):
    if not isinstance(metadata["strict"], bool):
        raise TypeError(f"{cls.__typename__} 'strict' must be a boolean")


class Builder[_A](Frozen, metaclass=BuilderType):
    """
    Immutable, typed command definition.

    Responsibilities
    - Configuration: name, description and permission, exposed as read-only properties.
    - Accumulation: an append-only tuple of parameters in declaration order.
    - Binding: an optional executor written against the composite type _A.
    - Registration: compile and hand everything to a registrar (see register()).
    - Strictness: when strict, discarding an executor issues a DiscardedExecutorWarning.

    Lifecycle
    - Created by command(name), transformed by with_description/with_permission/
      takes/executes (each returning a new builder), and finally registered.
    - Registration returns the same builder, which can be registered again
      elsewhere or used as a base for further builders.
    """

    __introspectable__ = (
        "name",
        "descr",
        "permission",
        "parameters",
        "executor",
        "strict",
    )

    def __new__(cls, name, /, descr=Unset, permission=Unset, parameters=(), executor=Unset, *, strict=False):
        metadata = {
            "name": name,
            "descr": descr,
            "permission": permission,
            "parameters": parameters,
            "executor": executor,
            "strict": strict,
        }
        _process_strings(cls, metadata)
        _process_parameters(cls, metadata)
        _process_executor(cls, metadata)
        _process_flags(cls, metadata)

        with super().__new__(cls) as self:
            for field, object in metadata.items():
                setattr(self, "_" + field, object)
        return self

    @property
    def usage(self):
        """
        Usage line: the command name followed by each parameter's usage token.
        """
        return " ".join((self.name, *(parameter.element.usage for parameter in self.parameters)))

    def with_description(self, descr, /):
        return copy.replace(self, descr=descr)

    def with_permission(self, permission, /):
        return copy.replace(self, permission=permission)

    def takes(self, parameter, /):
        """
        Append a parameter, widening the composite type by one level.

        The current executor (if any) is discarded, since it was written for
        the previous composite type. The discard never fails; strict builders
        report it with a DiscardedExecutorWarning.
        """
        if not isinstance(parameter, Parameter):
            raise TypeError(f"takes() argument must be a parameter, not {type(parameter).__name__!r}")
        if self.strict and self.executor is not None:
            trigger(DiscardedExecutorWarning(
                f"executor of command {self.name!r} discarded by takes({parameter.key!r})",
                code=FaultCode.DISCARDED_EXECUTOR,
                title="discarded executor",
                hint="attach the executor with executes() after the last takes()",
                command=self.name,
            ))
        return copy.replace(self, parameters=(*self.parameters, parameter), executor=Unset)

    def executes(self, executor, /):
        """
        Attach the executor, replacing any previous one.

        The executor receives the composite value (see helmsman.reconstruction);
        destructure it with pattern matching:

            def teleport(arguments):
                match arguments:
                    case ((source, x), y): ...
        """
        if not callable(executor):
            raise TypeError("executes() argument must be callable")
        return copy.replace(self, executor=executor)

    def register(self, registrar, owner, /):
        """
        Register this command with a registrar.

        Contract
        - registrar: object with register(owner, spec, name).
        - owner: opaque identity of the registering party (plugin, module, ...).

        Raises
        - IllegalBuilderStateError: no executor is attached.
        - whatever the registrar raises (e.g., NameTakenError), unchanged.

        Returns
        - self, for optional reuse.
        """
        if self.executor is None:
            raise IllegalBuilderStateError(
                f"command {self.name!r} cannot be registered without an executor "
                f"(call executes() after the last takes())"
            )
        if not callable(getattr(registrar, "register", None)):
            raise TypeError("register() first argument must provide a register() method")

        spec = CommandSpec(
            descr=self.descr,
            permission=self.permission,
            elements=tuple(parameter.element for parameter in self.parameters),
            executor=reconstruction.compile(self.executor, self.parameters),
            usage=self.usage,
        )
        registrar.register(owner, spec, self.name)
        return self

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {
            "descr": self.descr,
            "permission": self.permission,
            "parameters": self.parameters,
            "executor": self.executor,
        }
        fields = {field: Unset if object is None else object for field, object in fields.items()}
        fields["strict"] = self.strict
        return type(self)(overrides.pop("name", self.name), **fields | overrides)

    def __eq__(self, other):
        if not isinstance(other, Builder):
            return NotImplemented
        return all(getattr(self, field) == getattr(other, field) for field in type(self).__introspectable__)

    def __hash__(self):
        return hash((self.name, self.parameters))


def command(name, /, *, strict=False):
    """
    Start a builder for a top-level command.

    The composite type of the returned builder is the caller identity alone:
    an executor attached right away receives the source as its only argument.
    With strict=True, every builder derived from it warns when takes() discards
    an executor.
    """
    return Builder(name, strict=strict)


__all__ = (
    "Builder",
    "command",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del BuilderType
