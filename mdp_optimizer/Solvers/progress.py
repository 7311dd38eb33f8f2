"""Progress reporting and cooperative cancellation for solvers.

Solvers publish a ProgressEvent after every iteration or episode. Events
carry copied snapshots, so listeners never observe a half-updated value
function, and nothing a listener does can feed back into the algorithm.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Union
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """Snapshot of a solver after one iteration or episode."""
    method: str
    iteration: int
    delta: float
    value_function: Mapping[Any, float]
    policy: Mapping[Any, Any]


class ProgressListener(ABC):
    """Receiver of solver progress events.

    on_progress is called synchronously from the solver loop and must
    return promptly.
    """

    @abstractmethod
    def on_progress(self, event: ProgressEvent) -> None:
        pass


class ProgressChannel(ProgressListener):
    """Bounded, non-blocking buffer of progress events.

    When full, the oldest event is discarded so a slow consumer never
    stalls the solver. Consumers call drain() whenever convenient.
    """

    def __init__(self, maxsize: int = 1000):
        if maxsize <= 0:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        self.maxsize = maxsize
        self.dropped = 0
        self._events: Deque[ProgressEvent] = deque(maxlen=maxsize)

    def on_progress(self, event: ProgressEvent) -> None:
        if len(self._events) == self.maxsize:
            self.dropped += 1
        self._events.append(event)

    def drain(self) -> List[ProgressEvent]:
        """Remove and return all buffered events, oldest first."""
        events = list(self._events)
        self._events.clear()
        return events

    def __len__(self) -> int:
        return len(self._events)


class CallbackListener(ProgressListener):
    """Adapter for a plain callable(event).

    Exceptions raised by the callback are logged and otherwise ignored.
    """

    def __init__(self, callback: Callable[[ProgressEvent], Any]):
        self.callback = callback
        self.errors = 0

    def on_progress(self, event: ProgressEvent) -> None:
        try:
            self.callback(event)
        except Exception as exc:
            self.errors += 1
            logger.warning("Progress callback failed for %s iteration %d: %s",
                           event.method, event.iteration, exc)


ProgressLike = Union[None, ProgressListener, Callable[[ProgressEvent], Any]]


def as_listener(progress: ProgressLike) -> Optional[ProgressListener]:
    if progress is None or isinstance(progress, ProgressListener):
        return progress
    if callable(progress):
        return CallbackListener(progress)
    raise TypeError(f"Expected a ProgressListener or callable, got {type(progress).__name__}")


class CancellationToken:
    """Cooperative cancellation flag checked at iteration boundaries."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ProgressReporter:
    """Per-run helper bundling the listener, method name and cancel token."""

    def __init__(
        self,
        method: str,
        progress: ProgressLike = None,
        cancel_token: Optional[CancellationToken] = None,
    ):
        self.method = method
        self.listener = as_listener(progress)
        self.cancel_token = cancel_token

    @property
    def active(self) -> bool:
        """True when someone is listening, so snapshots are worth building."""
        return self.listener is not None

    def publish(
        self,
        iteration: int,
        delta: float,
        value_function: Dict[Any, float],
        policy: Dict[Any, Any],
    ) -> None:
        if self.listener is None:
            return
        self.listener.on_progress(ProgressEvent(
            method=self.method,
            iteration=iteration,
            delta=float(delta),
            value_function=dict(value_function),
            policy=dict(policy),
        ))

    def should_stop(self) -> bool:
        return self.cancel_token is not None and self.cancel_token.cancelled
