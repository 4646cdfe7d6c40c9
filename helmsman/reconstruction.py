"""
Helmsman argument reconstruction.

This is the run-time counterpart of Builder.takes(): it rebuilds, from a loose
lookup of parsed values, the nested-pair composite value that the executor of a
builder was written against.

Shape (n = number of declared parameters, v1..vn in declaration order)
- n == 0 → source
- n == 1 → (source, v1)
- n >= 2 → ((source, v1), v2) ... a left fold of pairs

This is the only place where loosely typed values meet statically typed
executors, so the fold must stay in lockstep with the widening performed by
Builder.takes() (Builder[_A] → Builder[tuple[_A, _B]]).
"""
import functools

from .faults import FaultCode, MissingArgumentError, trigger
from .utils import Unset, ordinal, rename


def reconstruct(source, keys, lookup, /):
    """
    Rebuild the composite argument value for an executor.

    Parameters
    - source: any
      Caller identity; always the innermost element of the composite.
    - keys: Sequence[str]
      Parameter lookup keys, in declaration order.
    - lookup: Callable[[str], Any]
      Returns the parsed value for a key, or Unset when there is none.

    Returns
    - the composite value (see module docstring for its shape).

    Raises
    - MissingArgumentError: when at least one key resolves to Unset. The fault
      lists every absent parameter with its position.
    """
    values = [lookup(key) for key in keys]

    if missing := [(index, key) for index, key in enumerate(keys, 1) if values[index - 1] is Unset]:
        names = ", ".join(f"{key!r} ({ordinal(index)} position)" for index, key in missing)
        trigger(MissingArgumentError(
            f"missing value for {names}",
            code=FaultCode.MISSING_ARGUMENT,
            title="missing argument",
            hint=f"expected {len(keys)} argument(s) but got {len(keys) - len(missing)}",
            missing=tuple(key for _, key in missing),
        ))

    return functools.reduce(lambda composite, value: (composite, value), values, source)


def compile(executor, parameters, /):
    """
    Wrap an executor into the callable a registrar invokes.

    Parameters
    - executor: Callable[[composite], outcome]
    - parameters: Sequence[Parameter] in declaration order.

    Returns
    - execute(source, context) -> outcome
      context is a Mapping[str, Any] of parsed values keyed by parameter key.
      The executor's outcome is returned unchanged; faults propagate.
    """
    if not callable(executor):
        raise TypeError("compile() executor must be callable")
    keys = tuple(parameter.key for parameter in parameters)

    @rename("execute")
    def execute(source, context, /):
        return executor(reconstruct(source, keys, lambda key: context.get(key, Unset)))

    execute.__doc__ = f"Compiled executor for parameters {keys!r}."
    return execute


__all__ = (
    "reconstruct",
    "compile",
)
