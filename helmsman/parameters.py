r"""
Helmsman parameter descriptors and parameter-type factories.

Overview
- Parameter[_T]: binds a display name to a parsing element producing values of
  type _T. The name is used both in usage strings and as the lookup key of the
  reconstructed value.
- Factories
  • string(name="string")       → Parameter[str]
  • double(name="double")       → Parameter[float]
  • integer(name="integer")     → Parameter[int]
  • boolean(name="boolean")     → Parameter[bool]
  • remaining(name="remaining") → Parameter[str] (every remaining token)

Introspection & representation
- ParameterType metaclass provides stable __repr__/__rich_repr__ and exposes the
  fields declared in __introspectable__ via read-only properties.
- Parameters are immutable (see utils.Frozen) and never reference the builder
  that holds them.

Validation highlights
- Names must match r"[^\W\d_][\w-]*" after trimming (a letter first, then
  letters/digits/underscores/hyphens); rich Text names are accepted.
- The element must expose a callable parse, a usage string and a key equal to
  the parameter key.

Quick example:
    >>> from helmsman.parameters import string, double
    >>> message = string("msg")
    >>> str(message)
    'msg'
"""
import functools
import operator
import re

from rich.text import Text

from . import elements
from .utils import *


class ParameterType(type):
    """
    Metaclass that turns parameter classes into introspectable descriptors.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
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
            - parameter(name='msg', key='msg', element=element(...))
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


def _sanitize_name(cls, name, /):
    """
    Internal: validate a parameter display name and return it trimmed.

    Raises
    - TypeError: if the name is neither a string nor rich Text.
    - ValueError: if the name is empty after trimming or is not identifier-like.
    """
    if not isinstance(name, str | Text):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    if isinstance(name, str):
        name = name.strip()
    if not str(name).strip():
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\W\d_][\w-]*", str(name)):
        raise ValueError(f"{cls.__typename__} 'name' must start with a letter and contain no spaces")
    return name


def _sanitize_element(cls, element, key, /):
    """
    Internal: check that an element honours the parsing-primitive contract.
    """
    if not callable(getattr(element, "parse", None)):
        raise TypeError(f"{cls.__typename__} 'element' must provide a callable parse()")
    if not isinstance(getattr(element, "usage", None), str):
        raise TypeError(f"{cls.__typename__} 'element' must provide a usage string")
    if getattr(element, "key", None) != key:
        raise ValueError(f"{cls.__typename__} 'element' key must match the parameter name {key!r}")


class Parameter[_T](Frozen, metaclass=ParameterType):
    """
    Named, typed command parameter.

    Parameter[_T] pairs a display name with the element that parses one value
    of type _T. It has no behaviour beyond identity and its string form: the
    builder collects parameters, the registrar runs their elements, and
    reconstruction reads values back by key.

    Properties
    - name: str | Text   display name (usage strings)
    - key: str           str(name), lookup key of the parsed value
    - element: Element   opaque parsing primitive
    """

    __introspectable__ = (
        "name",
        "key",
        "element",
    )

    def __new__(cls, name, element, /):
        name = _sanitize_name(cls, name)
        _sanitize_element(cls, element, key := str(name))

        with super().__new__(cls) as self:
            self._name = name
            self._key = key
            self._element = element
        return self

    def __str__(self):
        return self.key

    def __eq__(self, other):
        if not isinstance(other, Parameter):
            return NotImplemented
        return (self.key, self.element) == (other.key, other.element)

    def __hash__(self):
        return hash((self.key, self.element))


def string(name="string", /):
    """
    Parameter holding one token as-is.
    """
    return Parameter(name, elements.string(str(name).strip()))


def double(name="double", /):
    """
    Parameter holding one finite floating-point number.
    """
    return Parameter(name, elements.double(str(name).strip()))


def integer(name="integer", /):
    return Parameter(name, elements.integer(str(name).strip()))


def boolean(name="boolean", /):
    return Parameter(name, elements.boolean(str(name).strip()))


def remaining(name="remaining", /):
    """
    Parameter holding every remaining token joined by single spaces.

    Only meaningful as the last parameter of a command.
    """
    return Parameter(name, elements.remaining(str(name).strip()))


__all__ = (
    # Classes (specifications)
    "Parameter",

    # Factories
    "string",
    "double",
    "integer",
    "boolean",
    "remaining",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ParameterType
