"""Selector-based change notification.

A subscriber picks the slice of state it cares about with a selector; it is
called again only when that slice changes by value. Deliveries happen
synchronously, in the order states are published.
"""

from __future__ import annotations

import logging
import operator
import threading
from collections import deque
from typing import Any, Callable, Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")

Selector = Callable[[Any], Any]
Listener = Callable[[Any, Any], None]
Equality = Callable[[Any, Any], bool]


def _identity(state: Any) -> Any:
    return state


def shallow_equal(a: Any, b: Any) -> bool:
    """Equal when both are sequences whose elements are identical, or a == b."""
    if a is b:
        return True
    if isinstance(a, Sequence) and isinstance(b, Sequence) and not isinstance(a, str):
        return len(a) == len(b) and all(x is y for x, y in zip(a, b))
    return a == b


class Subscription:
    """Handle returned by Observable.subscribe()."""

    def __init__(
        self,
        owner: Observable,
        listener: Listener,
        selector: Selector,
        equality: Equality,
        initial: Any,
    ) -> None:
        self._owner = owner
        self._listener = listener
        self._selector = selector
        self._equality = equality
        self._last = initial
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._owner._remove(self)

    def _deliver(self, state: Any) -> None:
        try:
            selected = self._selector(state)
        except Exception as exc:
            logger.error("Selector %r failed: %s", self._selector, exc)
            return
        if self._equality(selected, self._last):
            return
        previous, self._last = self._last, selected
        try:
            self._listener(selected, previous)
        except Exception as exc:
            logger.error("Listener %r failed: %s", self._listener, exc)


class Observable(Generic[S]):
    """Mixin publishing successive state snapshots to subscriptions."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._subscriptions_lock = threading.Lock()
        self._pending: deque = deque()
        self._delivering = False

    def _current_state(self) -> S:
        raise NotImplementedError

    def subscribe(
        self,
        listener: Listener,
        selector: Selector | None = None,
        equality: Equality = operator.eq,
    ) -> Subscription:
        """Call ``listener(selected, previous)`` whenever the selected value changes.

        For selectors that build a new list or tuple on every call, pass
        ``equality=shallow_equal`` so unchanged elements do not notify.
        """
        selector = selector or _identity
        subscription = Subscription(
            self, listener, selector, equality, selector(self._current_state()),
        )
        with self._subscriptions_lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._subscriptions_lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _publish(self, state: S) -> None:
        """Deliver ``state`` to every subscription, in publish order.

        A publish triggered from inside a listener is queued and delivered
        once the current state has reached every subscription.
        """
        with self._subscriptions_lock:
            self._pending.append(state)
            if self._delivering:
                return
            self._delivering = True
        try:
            while True:
                with self._subscriptions_lock:
                    if not self._pending:
                        self._delivering = False
                        return
                    current = self._pending.popleft()
                    subscriptions = list(self._subscriptions)
                for subscription in subscriptions:
                    if subscription.active:
                        subscription._deliver(current)
        except BaseException:
            with self._subscriptions_lock:
                self._pending.clear()
                self._delivering = False
            raise
