"""
Helmsman reference parsing primitives.

An element is the unit that turns raw tokens into one typed value and stores it
in a parse context under its key. Builders never look inside an element; they
only hand elements to the registrar (in declaration order) and read the values
back by key during reconstruction.

Contract (what any replacement host must provide)
- key: str            lookup key of the produced value
- usage: str          usage token shown in help, e.g. "<msg>"
- parse(tokens, context) -> None
    consume tokens from the left of a deque and store the value in context[key].
    when no token is left, nothing is stored: absence is reported later by
    reconstruction, not here.

Factories
- string(key)     → one token, as-is
- double(key)     → one token, float
- integer(key)    → one token, int
- boolean(key)    → one token, true/false/yes/no/on/off/1/0
- remaining(key)  → every remaining token, joined by single spaces
"""
import math
import re

from .faults import FaultCode, UncastableValueError, trigger
from .utils import Frozen, Unset, mirror, rename


class Element[_T](Frozen):
    """
    Single-value parsing primitive.

    Parameters
    - key: str
      Lookup key of the produced value (non-empty, no whitespace).
    - type: Callable[[str], _T]
      Converter applied to the consumed token; ValueError/TypeError become an
      UncastableValueError fault.
    - variadic: bool (keyword-only)
      Consume every remaining token (joined by spaces) instead of a single one.
    - typename: str (keyword-only)
      Human label of the value type, used in fault messages.
    """

    key = mirror("key")
    type = mirror("type")
    variadic = mirror("variadic")
    typename = mirror("typename")

    def __new__(cls, key, type=str, /, *, variadic=False, typename=Unset):
        if not isinstance(key, str):
            raise TypeError("element 'key' must be a string")
        elif not re.fullmatch(r"\S+", key):
            raise ValueError("element 'key' must be a non-empty string without whitespace")
        if not callable(type):
            raise TypeError("element 'type' must be callable")

        with super().__new__(cls) as self:
            self._key = key
            self._type = type
            self._variadic = bool(variadic)
            self._typename = getattr(type, "__name__", "value") if typename is Unset else typename
        return self

    @property
    def usage(self):
        return f"<{self.key}...>" if self.variadic else f"<{self.key}>"

    def parse(self, tokens, context, /):
        """
        Consume tokens and store the converted value under self.key.
        """
        if not tokens:
            return
        if self.variadic:
            raw = " ".join(tokens)
            tokens.clear()
        else:
            raw = tokens.popleft()
        try:
            context[self.key] = self.type(raw)
        except (ValueError, TypeError):
            trigger(UncastableValueError(
                f"cannot read {raw!r} as {self.typename} for parameter {self.key!r}",
                code=FaultCode.UNCASTABLE_VALUE,
                title="uncastable value",
                hint=f"provide a valid {self.typename} for {self.usage}",
                key=self.key,
                token=raw,
            ))

    def __repr__(self):
        return f"element(key={self.key!r}, type={self.typename!r}, variadic={self.variadic!r})"

    def __eq__(self, other):
        if not isinstance(other, Element):
            return NotImplemented
        return (self.key, self.type, self.variadic) == (other.key, other.type, other.variadic)

    def __hash__(self):
        return hash((self.key, self.type, self.variadic))


@rename("double")
def _double(value, /):
    # finite numbers only; "nan"/"inf" are not user-facing numbers
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number {value!r}")
    return number


@rename("boolean")
def _boolean(value, /):
    lower = value.lower()
    if lower in ("true", "yes", "1", "on"):
        return True
    elif lower in ("false", "no", "0", "off"):
        return False
    raise ValueError(f"Cannot convert {value!r} to bool")


def string(key, /):
    return Element(key, str, typename="string")


def double(key, /):
    return Element(key, _double, typename="double")


def integer(key, /):
    return Element(key, int, typename="integer")


def boolean(key, /):
    return Element(key, _boolean, typename="boolean")


def remaining(key, /):
    return Element(key, str, variadic=True, typename="string")


__all__ = (
    "Element",
    "string",
    "double",
    "integer",
    "boolean",
    "remaining",
)
