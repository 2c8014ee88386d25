# MIT License
# Copyright (c) 2025 Hashborn

"""
Event system for runtime lifecycle events.

Provides a simple pub/sub mechanism for extrinsic and block events.

Events emitted by the runtime:
- extrinsic_applied: block_number, index, caller, pallet
- extrinsic_failed: block_number, index, caller, pallet, error
- block_executed: block_number, extrinsics, failed
"""
from typing import Dict, List, Callable, Any
import logging

logger = logging.getLogger(__name__)

EXTRINSIC_APPLIED = "extrinsic_applied"
EXTRINSIC_FAILED = "extrinsic_failed"
BLOCK_EXECUTED = "block_executed"


class EventBus:
    """
    Simple event bus for runtime events.

    Events are delivered synchronously, in subscription order.
    """

    def __init__(self):
        self.listeners: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: Event name (e.g., 'extrinsic_failed')
            callback: Function to call with the event data as keyword arguments
        """
        if event_type not in self.listeners:
            self.listeners[event_type] = []

        self.listeners[event_type].append(callback)
        logger.debug(f"Subscribed to event: {event_type}")

    def unsubscribe(self, event_type: str, callback: Callable) -> None:
        if event_type in self.listeners:
            try:
                self.listeners[event_type].remove(callback)
                logger.debug(f"Unsubscribed from event: {event_type}")
            except ValueError:
                logger.warning(f"Callback not found for event: {event_type}")

    def emit(self, event_type: str, **data: Any) -> None:
        """
        Emit an event to all subscribers.

        A listener that raises is logged and skipped; the remaining
        listeners still run.
        """
        listeners = self.listeners.get(event_type, [])

        if not listeners:
            return

        logger.debug(f"Emitting event: {event_type} to {len(listeners)} listener(s)")

        for callback in list(listeners):
            try:
                callback(**data)
            except Exception as e:
                logger.error(f"Error in event callback for {event_type}: {e}", exc_info=True)

    def clear(self, event_type: str = None) -> None:
        """Clear listeners for one event type, or all listeners if no type is given."""
        if event_type:
            self.listeners.pop(event_type, None)
            logger.debug(f"Cleared listeners for event: {event_type}")
        else:
            self.listeners.clear()
            logger.debug("Cleared all event listeners")
