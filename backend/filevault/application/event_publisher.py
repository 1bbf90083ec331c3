"""
Event Publisher

Application service for publishing domain events to registered handlers.
"""

import logging
from threading import Lock
from typing import Callable, Dict, List, Type

from ..domain.events import DomainEvent

logger = logging.getLogger(__name__)


class EventPublisher:
    """
    Dispatches domain events to registered handlers.

    A handler subscribed to an event class also receives events of its
    subclasses, so a handler on DomainEvent sees everything. Handler
    exceptions are logged and never reach the publisher's caller.

    Thread-safe for concurrent event publishing.
    """

    def __init__(self):
        """Initialize EventPublisher with empty handler registry."""
        self._handlers: Dict[Type[DomainEvent], List[Callable[[DomainEvent], None]]] = {}
        self._lock = Lock()

    def subscribe(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ) -> None:
        """
        Register a handler for an event type and its subclasses.

        Example:
            publisher = EventPublisher()
            publisher.subscribe(ShareLinkRevokedEvent, audit_revocation)
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            logger.debug(
                f"Registered handler {getattr(handler, '__name__', repr(handler))} "
                f"for {event_type.__name__}"
            )

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event to all matching handlers synchronously.

        Args:
            event: The domain event to publish
        """
        event_type = type(event)

        with self._lock:
            handlers = [
                handler
                for klass in event_type.__mro__
                for handler in self._handlers.get(klass, [])
            ]

        if not handlers:
            logger.debug(f"No handlers registered for {event_type.__name__}")
            return

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # Side effects must not break the operation that raised the event
                logger.error(
                    f"Error in handler {getattr(handler, '__name__', repr(handler))} "
                    f"for {event_type.__name__}: {e}",
                    exc_info=True
                )
