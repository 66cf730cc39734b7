"""All-settled fan-out for concurrently pending coroutines."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Settled(Generic[T]):
    """Outcome of one awaitable: either a value or the exception it raised."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> str:
        if self.error is None:
            return ""
        return str(self.error) or self.error.__class__.__name__


async def gather_settled(*aws: Awaitable[T]) -> List[Settled[T]]:
    """Await everything, never raise; outcomes come back in argument order.

    Cancellation of the caller still propagates.
    """
    outcomes: List[Any] = await asyncio.gather(*aws, return_exceptions=True)
    settled: List[Settled[T]] = []
    for outcome in outcomes:
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            settled.append(Settled(error=outcome))
        else:
            settled.append(Settled(value=outcome))
    return settled
