"""
Event System for the product API client

Lightweight event emitter that keeps request logging out of the HTTP code.
The client emits structured events; whoever cares (console, a logger,
a test) subscribes.

Events:
    - request_log: Request about to be sent
        {timestamp, method, url, headers (API key masked), params?, body?}
    - response_log: 2xx response received
        {timestamp, duration_ms, status, size_bytes, data}
    - error_log: Request failed
        {timestamp, duration_ms, kind, status, error, message}

Usage:
    api = ProductApi(api_key)
    api.on("error_log", lambda e: print(f"{e['kind']}: {e['message']}"))

    @api.on("response_log")
    def track(e):
        timings.append(e["duration_ms"])
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventEmitter:
    """
    Mixin class that provides event emission and subscription.

    Supports multiple subscribers per event and wildcard ("*") subscriptions.
    Handler errors are logged and never reach the code that emitted.
    """

    def __init_events__(self):
        """Initialize event storage. Call this in your __init__ if using as mixin."""
        if not hasattr(self, '_event_handlers'):
            self._event_handlers: dict[str, list[Callable]] = {}

    def on(self, event: str, handler: Callable[[dict[str, Any]], None] = None) -> Callable:
        """
        Subscribe to an event.

        Args:
            event: Event name (e.g., "request_log") or "*" for all events
            handler: Callback that receives the event data dict (optional for decorator use)

        Returns:
            The handler (for later removal), or a decorator if handler is None
        """
        self.__init_events__()
        handlers = self._event_handlers.setdefault(event, [])

        if handler is None:
            def decorator(fn: Callable[[dict[str, Any]], None]) -> Callable:
                handlers.append(fn)
                return fn
            return decorator

        handlers.append(handler)
        return handler

    def off(self, event: str, handler: Callable = None):
        """
        Unsubscribe from an event.

        Args:
            event: Event name
            handler: Specific handler to remove, or None to remove all
        """
        self.__init_events__()
        if event not in self._event_handlers:
            return
        if handler is None:
            self._event_handlers[event] = []
        else:
            self._event_handlers[event] = [h for h in self._event_handlers[event] if h != handler]

    def emit(self, event: str, data: dict[str, Any] = None):
        """
        Emit an event to all subscribers.

        Events are delivered synchronously, specific handlers first, then
        wildcard handlers.
        """
        self.__init_events__()
        data = data or {}
        data['_event'] = event

        handlers = self._event_handlers.get(event, []) + self._event_handlers.get('*', [])
        for handler in handlers:
            try:
                handler(data)
            except Exception:
                logger.debug("Handler for %s event failed", event, exc_info=True)

    def once(self, event: str, handler: Callable[[dict[str, Any]], None]) -> Callable:
        """
        Subscribe to an event for a single emission only.

        Returns:
            Wrapper handler (for removal if needed)
        """
        def wrapper(data):
            self.off(event, wrapper)
            handler(data)

        return self.on(event, wrapper)
