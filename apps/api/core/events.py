"""
Domain event plumbing.

Two registries with deliberately different failure semantics:

- DomainEventDispatcher: synchronous, runs inside the open transaction.
  Handlers read and write the same rows as the caller, so the first error
  aborts dispatch and rolls the whole unit of work back.
- EventBus: runs after commit. Handler failures are logged and never undo
  the committed state; handlers guard their side effects with the
  idempotency log (services.workout.idempotency.try_process).

Both registries are written once at startup and only read afterwards.
"""
import logging
import threading
from typing import Callable, Dict, Iterable, List, Protocol

logger = logging.getLogger(__name__)


class DomainEvent(Protocol):
    """Anything with an ``event_type`` and an ``event_id``."""

    event_id: str

    @property
    def event_type(self) -> str: ...


Handler = Callable[[DomainEvent], None]


class DomainEventDispatcher:
    """
    In-process synchronous handler registry keyed by event type.

    Example:
        dispatcher.register("workout_set.status_changed", on_set_status_changed)
        dispatcher.dispatch([WorkoutSetStatusChanged(...)])
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = threading.Lock()

    def register(self, event_type: str, handler: Handler) -> None:
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Registered sync handler for event: {event_type}")

    def handlers_for(self, event_type: str) -> List[Handler]:
        with self._lock:
            return list(self._handlers.get(event_type, ()))

    def dispatch(self, events: Iterable[DomainEvent]) -> None:
        """
        Invoke handlers sequentially in registration order.

        Fails fast: the first handler exception propagates to the caller.
        """
        for event in events:
            for handler in self.handlers_for(event.event_type):
                handler(event)


class EventBus:
    """
    Minimal in-process topic bus for post-commit delivery.

    Handlers run sequentially in the publisher's thread. A failing handler is
    logged and the remaining handlers still run.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Handler) -> None:
        """
        Subscribe a handler function to an event type.

        Args:
            event_type: Name of the event (e.g., 'workout.completed')
            handler: Callable receiving the event
        """
        with self._lock:
            self._subscribers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to event: {event_type}")

    def publish(self, *events: DomainEvent) -> None:
        for event in events:
            with self._lock:
                handlers = list(self._subscribers.get(event.event_type, ()))
            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Error in event handler for {event.event_type}: {e}",
                        exc_info=True,
                        extra={
                            "extra_fields": {
                                "event_type": event.event_type,
                                "event_id": getattr(event, "event_id", None),
                                "handler": getattr(handler, "__name__", repr(handler)),
                            }
                        },
                    )
