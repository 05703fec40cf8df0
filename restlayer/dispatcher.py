from __future__ import annotations

from typing import Any
from typing import Callable
from typing import Dict
from typing import TypeVar

from multipledispatch.dispatcher import Dispatcher

F = TypeVar('F', bound=Callable[..., Any])

commands: Dict[str, Command] = {}


def command(name: str = None) -> Callable[[F], Command]:
    """Turn a function into a generic command.

    Only name and docstring of the decorated function are used,
    implementations are added per argument types with `Command.register`.
    """

    def _(func: F) -> Command:
        cmd_name = name or func.__name__
        if cmd_name in commands:
            raise ValueError(f"Command {cmd_name!r} is already defined.")
        commands[cmd_name] = Command(cmd_name, doc=func.__doc__)
        return commands[cmd_name]

    return _


class Command(Dispatcher):
    """Generic function dispatched on types of positional arguments.

        @commands.reverse.register(DataMapper, dict)
        def reverse(mapper, data, *, seen):
            ...

    A tuple in place of a type registers the implementation for each type
    in it.
    """

    def register(self, *types) -> Callable[[F], Command]:
        if not types:
            raise TypeError(f"Argument types are required to register {self.name!r}.")

        def _(func: F) -> Command:
            self.add(types, func)
            return self

        return _
