"""Helpers for running async code from click commands."""

import asyncio
import functools
from typing import Any, Callable, Coroutine


def async_command(func: Callable[..., Coroutine[Any, Any, Any]]) -> Callable[..., Any]:
    """
    Run an async click command callback to completion.

    Example:
        @click.command()
        @async_command
        async def status():
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(func(*args, **kwargs))

    return wrapper
