# aimp/runtime/motion.py
# Version: 1.0.0
# Push-based reduced-motion preference source with explicit subscriptions.
#
# The host environment (browser bridge, desktop settings watcher, test)
# calls set_preference() whenever the user's reduced-motion setting changes.
# Listeners are notified synchronously, in subscription order, only when the
# value actually changes. Listener exceptions propagate to the caller of
# set_preference().

from __future__ import annotations

from typing import Callable, List, Optional

from aimp.core.domain import MotionPreference

MotionListener = Callable[[MotionPreference], None]


class Subscription:
    """Handle returned by MotionPreferenceSource.subscribe(). cancel() is idempotent."""

    def __init__(self, source: "MotionPreferenceSource", listener: MotionListener) -> None:
        self._source: Optional[MotionPreferenceSource] = source
        self._listener = listener

    @property
    def active(self) -> bool:
        return self._source is not None

    def cancel(self) -> None:
        if self._source is None:
            return
        self._source._remove(self._listener)
        self._source = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()


class MotionPreferenceSource:

    def __init__(self, initial: MotionPreference = MotionPreference()) -> None:
        self._current = initial
        self._listeners: List[MotionListener] = []

    @property
    def current(self) -> MotionPreference:
        return self._current

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: MotionListener) -> Subscription:
        """Register a listener. Subscribing the same callable twice is a no-op."""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def set_preference(self, preference: MotionPreference) -> bool:
        """Publish a new preference. Returns True if listeners were notified."""
        if preference == self._current:
            return False
        self._current = preference
        for listener in list(self._listeners):
            listener(preference)
        return True

    def set_reduce_motion(self, reduce_motion: bool) -> bool:
        return self.set_preference(MotionPreference(reduce_motion=bool(reduce_motion)))

    def _remove(self, listener: MotionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


__all__ = [
    "MotionListener",
    "Subscription",
    "MotionPreferenceSource",
]
