"""
Result values returned by command functions.

Command functions never exit the process. They return ``Success`` or
``Failure`` and the CLI dispatcher decides the exit status.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from loguru import logger

from yoto_cli.api.exceptions import YotoApiError
from yoto_cli.errors import CommandError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    message: str
    exit_code: int = 1
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]


async def capture(awaitable: Awaitable[T]) -> Result[T]:
    """Await ``awaitable`` and fold known errors into a ``Failure``."""
    try:
        return Success(await awaitable)
    except CommandError as e:
        logger.debug(f"Command failed: {e!r}")
        return Failure(str(e), e.exit_code, e)
    except YotoApiError as e:
        logger.debug(f"API call failed: {e!r}")
        return Failure(str(e), 1, e)


def returns_result(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[Result[T]]]:
    """Decorate an async command so it returns a ``Result`` instead of raising."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Result[T]:
        return await capture(func(*args, **kwargs))

    return wrapper
