"""
Change notification for abbreviation maps.

Coarse grained: listeners are told "something changed" and re-fetch the
snapshot they need. Subscriptions are explicit handles; an observer that
switches targets must unsubscribe from the old map before subscribing to the
new one.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict

logger = logging.getLogger(__name__)

Listener = Callable[[], None]

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class Subscription:
    """Handle returned by ChangeNotifier.subscribe()."""

    id: int = field(default_factory=lambda: next(_handle_ids))
    listener: Listener = field(default=None, compare=False, repr=False)


class ChangeNotifier:
    """Synchronous publish/subscribe with handle-based unsubscribe.

    Usage::

        notifier = ChangeNotifier()
        handle = notifier.subscribe(view.refresh)
        notifier.notify()          # calls view.refresh()
        notifier.unsubscribe(handle)
    """

    def __init__(self) -> None:
        self._listeners: Dict[int, Subscription] = {}

    def subscribe(self, listener: Listener) -> Subscription:
        """Register a zero-argument listener. Returns its handle."""
        if not callable(listener):
            raise TypeError("listener must be callable")
        handle = Subscription(listener=listener)
        self._listeners[handle.id] = handle
        return handle

    def unsubscribe(self, handle: Subscription) -> bool:
        """Remove a subscription. Returns False if it was not registered."""
        return self._listeners.pop(handle.id, None) is not None

    def notify(self) -> None:
        """Invoke every current listener in subscription order."""
        # Copy: listeners may unsubscribe themselves while being notified
        for handle in list(self._listeners.values()):
            try:
                handle.listener()
            except Exception:
                logger.exception("Change listener %s failed", handle.id)

    def clear(self) -> None:
        """Drop all subscriptions."""
        self._listeners.clear()

    def __contains__(self, handle: Subscription) -> bool:
        return handle.id in self._listeners

    def __len__(self) -> int:
        return len(self._listeners)
