"""Minimal reactive state container.

A Store holds one immutable state value (a frozen dataclass) plus a set of
pure action functions. Each action receives the current state and returns a
new one; the store swaps it in and notifies subscribers exactly once.

State and behaviour are exposed through separate accessors:

    store = Store(AgentStoreState(), AGENT_ACTIONS)
    store.get_state().agents        # data snapshot
    store.actions.select_agent("a") # bound action

Stores are plain instances owned by whoever creates them. There is no
module-level registry, so tests can build isolated stores per case.
"""

from __future__ import annotations

import dataclasses
from types import SimpleNamespace
from typing import Any, Callable, Generic, TypeVar

S = TypeVar("S")

Listener = Callable[[Any], None]
Action = Callable[..., Any]


class Store(Generic[S]):
    """Generic subscribe/notify container over an immutable state value."""

    def __init__(self, initial: S, actions: dict[str, Action] | None = None) -> None:
        self._state = initial
        self._listeners: list[tuple[object, Listener]] = []
        self._actions = SimpleNamespace(
            **{name: self._bind(fn) for name, fn in (actions or {}).items()}
        )

    def get_state(self) -> S:
        """Return the current state snapshot."""
        return self._state

    @property
    def actions(self) -> SimpleNamespace:
        """Return the bound action set."""
        return self._actions

    def set_state(self, **changes: Any) -> None:
        """Shallow-merge ``changes`` into the state and notify subscribers."""
        self._state = dataclasses.replace(self._state, **changes)
        self.notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a function that removes it.

        The same callable may be subscribed more than once; each unsubscribe
        removes only the registration it was returned for.
        """
        token = object()
        self._listeners.append((token, listener))

        def unsubscribe() -> None:
            self._listeners = [(t, fn) for t, fn in self._listeners if t is not token]

        return unsubscribe

    def notify(self) -> None:
        """Call every listener, in subscription order, with the current state."""
        state = self._state
        for _, listener in list(self._listeners):
            listener(state)

    def _bind(self, fn: Action) -> Callable[..., S]:
        def bound(*args: Any, **kwargs: Any) -> S:
            self._state = fn(self._state, *args, **kwargs)
            self.notify()
            return self._state

        bound.__name__ = fn.__name__
        bound.__doc__ = fn.__doc__
        return bound
