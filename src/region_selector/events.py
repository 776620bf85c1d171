from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True, slots=True)
class PropertyChange:
    """One observable change of a model property."""

    name: str
    old_value: Any
    new_value: Any


Listener = Callable[[PropertyChange], None]
Dispatcher = Callable[[Callable[[], None]], None]


class ChangeNotifier:
    """Registry of property-change listeners scoped to a single model.

    Listeners subscribe to one topic (property name) or, with `name=None`, to
    every topic. Delivery is synchronous and in firing order unless a
    `dispatcher` is supplied, in which case each delivery is handed to it
    (e.g. to marshal onto a GUI thread); the dispatcher must preserve order.
    """

    def __init__(self, source: Any = None, dispatcher: Dispatcher | None = None) -> None:
        self._source = source
        self._dispatcher = dispatcher
        self._lock = threading.RLock()
        self._listeners: dict[str | None, list[Listener]] = {}

    @property
    def dispatcher(self) -> Dispatcher | None:
        return self._dispatcher

    def subscribe(self, listener: Listener, name: str | None = None) -> None:
        with self._lock:
            self._listeners.setdefault(name, []).append(listener)

    def unsubscribe(self, listener: Listener, name: str | None = None) -> None:
        with self._lock:
            listeners = self._listeners.get(name)
            if not listeners or listener not in listeners:
                return
            listeners.remove(listener)
            if not listeners:
                del self._listeners[name]

    def listeners(self, name: str | None = None) -> list[Listener]:
        with self._lock:
            return list(self._listeners.get(name, ()))

    def fire(self, name: str, old_value: Any, new_value: Any) -> None:
        event = PropertyChange(name=name, old_value=old_value, new_value=new_value)
        with self._lock:
            targets = list(self._listeners.get(name, ())) + list(self._listeners.get(None, ()))
            if not targets:
                return
            if self._dispatcher is None:
                for listener in targets:
                    listener(event)
            else:
                self._dispatcher(lambda: _deliver(targets, event))


def _deliver(targets: list[Listener], event: PropertyChange) -> None:
    for listener in targets:
        listener(event)
