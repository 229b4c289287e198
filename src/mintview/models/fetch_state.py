"""Fetch state - observable lifecycle of a data fetcher.

Each fetcher (recent mints, owned tokens) owns one ``FetchStore``. A fetch call
goes through exactly one ``begin`` and then one ``succeed`` or ``fail``:

    IDLE ──begin──▶ LOADING ──succeed──▶ SUCCESS(data)
                        │
                        └────fail─────▶ FAILURE(error, previous data kept)

``begin`` hands out a generation number. Completions carrying an older generation
than the latest ``begin`` are discarded, so when two refetches overlap the most
recently started one wins no matter which finishes first.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class FetchStatus(str, Enum):
    """Fetcher lifecycle status."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class FetchState(Generic[T]):
    """Immutable snapshot published to subscribers."""

    status: FetchStatus = FetchStatus.IDLE
    data: list[T] = field(default_factory=list)
    error: Optional[str] = None
    generation: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status == FetchStatus.LOADING


Subscriber = Callable[[FetchState[T]], None]


class FetchStore(Generic[T]):
    """Holds the current FetchState and notifies subscribers on every change."""

    def __init__(self, name: str):
        self.name = name
        self._state: FetchState[T] = FetchState()
        self._generation = 0
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> FetchState[T]:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def begin(self, clear: bool = False) -> int:
        """Enter LOADING and return the generation for this call.

        Data from the previous successful call stays visible while loading unless
        ``clear`` is set (the caller switched to a different subject).
        """
        self._generation += 1
        self._set(
            FetchState(
                status=FetchStatus.LOADING,
                data=[] if clear else self._state.data,
                generation=self._generation,
            )
        )
        return self._generation

    def succeed(self, generation: int, data: list[T]) -> bool:
        """Replace data wholesale. Returns False if the completion was stale."""
        if self._is_stale(generation, "succeed"):
            return False
        self._set(FetchState(status=FetchStatus.SUCCESS, data=list(data), generation=generation))
        return True

    def fail(self, generation: int, error: str) -> bool:
        """Record an error, keeping previous data. Returns False if stale."""
        if self._is_stale(generation, "fail"):
            return False
        self._set(
            replace(self._state, status=FetchStatus.FAILURE, error=error, generation=generation)
        )
        return True

    def _is_stale(self, generation: int, outcome: str) -> bool:
        if generation == self._generation:
            return False
        logger.info(
            "fetch_state.stale_completion_discarded",
            store=self.name,
            outcome=outcome,
            generation=generation,
            latest_generation=self._generation,
        )
        return True

    def _set(self, state: FetchState[T]) -> None:
        self._state = state
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception as e:
                # One broken subscriber must not block the others
                logger.error(
                    "fetch_state.subscriber_error",
                    store=self.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
