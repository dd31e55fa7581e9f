from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

__all__ = ["Settled", "settle_all"]

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Settled(Generic[T]):
    """Outcome of one member of a batch: either ``value`` or ``error``."""

    key: str
    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _settle(key: str, call: Callable[[str], Awaitable[T]]) -> Settled[T]:
    try:
        value = await call(key)
    except asyncio.CancelledError:
        raise
    except Exception as exc:  # noqa: BLE001
        return Settled(key=key, error=str(exc) or type(exc).__name__)
    return Settled(key=key, value=value)


async def settle_all(
    keys: Sequence[str], call: Callable[[str], Awaitable[T]]
) -> list[Settled[T]]:
    """Run ``call`` for every key concurrently and wait for all of them.

    Results keep the order of ``keys``. A failing member yields a
    :class:`Settled` carrying its error message instead of raising.
    """

    return list(await asyncio.gather(*(_settle(key, call) for key in keys)))
