"""
Side Effect Channel
-------------------
Error channel for best-effort work that runs alongside a primary operation:
audit rows, WebSocket broadcasts and event notifications.

An outcome is logged and kept in a bounded history so callers and tests can
inspect it, but it is never handed back to whoever triggered the primary
operation, and a failure never propagates.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Deque, List, Optional, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass(frozen=True)
class SideEffectOutcome:
    """Result of one best-effort side effect."""

    name: str
    ok: bool
    error: Optional[str] = None
    recorded_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class SideEffectChannel:
    """Collects outcomes of best-effort side effects."""

    def __init__(self, history_size: int = 500):
        self._history: Deque[SideEffectOutcome] = deque(maxlen=history_size)

    def record_success(self, name: str) -> SideEffectOutcome:
        outcome = SideEffectOutcome(name=name, ok=True)
        self._history.append(outcome)
        logger.debug(f"Side effect '{name}' completed")
        return outcome

    def record_failure(self, name: str, error: BaseException) -> SideEffectOutcome:
        outcome = SideEffectOutcome(
            name=name, ok=False, error=f"{type(error).__name__}: {error}"
        )
        self._history.append(outcome)
        logger.error(f"Side effect '{name}' failed: {outcome.error}")
        return outcome

    async def run(self, name: str, awaitable: Awaitable[T]) -> Optional[T]:
        """
        Await a side effect, recording its outcome.

        Returns the awaited value on success and None on failure; the
        exception itself only travels through the channel.
        """
        try:
            result = await awaitable
        except Exception as error:
            self.record_failure(name, error)
            return None
        self.record_success(name)
        return result

    @property
    def history(self) -> List[SideEffectOutcome]:
        return list(self._history)

    @property
    def failures(self) -> List[SideEffectOutcome]:
        return [outcome for outcome in self._history if not outcome.ok]

    def clear(self) -> None:
        self._history.clear()


# Process-wide channel used when no explicit channel is injected
side_effects = SideEffectChannel()
