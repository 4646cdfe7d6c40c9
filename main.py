import sys

from rich.console import Console

from helmsman import *

__prog__ = "helmsman"
__docs__ = {
    FaultCode.MISSING_ARGUMENT: "every declared parameter needs a value",
}

registry = Registry(shell=True, fancy=True)


def teleport(arguments):
    (source, x), y = arguments
    return Result.succeeded(f"{source} moved to ({x}, {y})")


def say(arguments):
    source, message = arguments
    return Result.succeeded(f"<{source}> {message}")


command("tp").with_description("Teleports the caller").takes(double("x")).takes(double("y")).executes(teleport).register(registry, __prog__)
command("say").with_description("Broadcasts a message").takes(remaining("message")).executes(say).register(registry, __prog__)


if __name__ == '__main__':
    console = Console()
    if len(sys.argv) < 2:
        console.print(registry)
    elif outcome := registry.dispatch("console", sys.argv[1:]):
        console.print(outcome.payload)
