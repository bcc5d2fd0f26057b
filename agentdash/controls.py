"""Outbound control requests (pause/resume/cancel/retry).

The dispatcher decides whether a control may be sent, hands a ControlIntent
to a sender callable (the collaborator that talks to the real process), and
then either:

- optimistic mode: applies the transition to the agent store once the sender
  has accepted the intent, or
- confirmed mode (default): marks the agent as transitioning and waits for
  ``confirm()`` or ``reject()`` from the collaborator.

While an agent is transitioning further requests for it are ignored.

Usage:
    dispatcher = ControlDispatcher(agent_store, sender=send_to_backend)
    intent = dispatcher.request("agent-1", "pause")
    ...
    dispatcher.confirm("agent-1", "paused")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from .agents import CONTROL_TARGETS, can_transition, is_control_enabled, utcnow
from .store import Store
from .stores import AgentStoreState, get_agent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControlIntent:
    """A request for the collaborator to move an agent to ``to_status``."""

    agent_id: str
    control: str
    to_status: str
    requested_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.control,
            "entity_id": self.agent_id,
            "payload": {"status": self.to_status},
            "requested_at": self.requested_at.isoformat(),
        }


IntentSender = Callable[[ControlIntent], None]


class ControlDispatcher:
    """Gatekeeper between user controls and the agent store."""

    def __init__(
        self,
        store: Store[AgentStoreState],
        sender: IntentSender | None = None,
        *,
        optimistic: bool = False,
    ) -> None:
        self._store = store
        self._sender = sender
        self.optimistic = optimistic

    def is_enabled(self, agent_id: str, control: str) -> bool:
        """True if ``control`` may be sent for ``agent_id`` right now."""
        state = self._store.get_state()
        agent = get_agent(state, agent_id)
        if agent is None or agent_id in state.transitioning:
            return False
        return is_control_enabled(agent.status, control)

    def request(
        self,
        agent_id: str,
        control: str,
        now: datetime | None = None,
    ) -> ControlIntent | None:
        """Emit an intent for ``control`` if it is currently enabled.

        Returns:
            The emitted intent, or None when the control was ignored.
        """
        if not self.is_enabled(agent_id, control):
            logger.debug("Ignoring %s for agent %s: control not enabled", control, agent_id)
            return None

        intent = ControlIntent(
            agent_id=agent_id,
            control=control,
            to_status=CONTROL_TARGETS[control],
            requested_at=now or utcnow(),
        )
        logger.info("Requesting %s for agent %s", control, agent_id)

        actions = self._store.actions
        if not self.optimistic:
            actions.mark_transitioning(agent_id)

        if self._sender is not None:
            try:
                self._sender(intent)
            except Exception:
                # Sender failed: nothing will confirm this request
                if not self.optimistic:
                    actions.clear_transitioning(agent_id)
                raise

        if self.optimistic:
            actions.apply_control(agent_id, control, now=intent.requested_at)
        return intent

    def confirm(self, agent_id: str, to_status: str, now: datetime | None = None) -> bool:
        """Apply a transition the collaborator reports as done.

        Returns:
            True if the agent changed status.
        """
        state = self._store.get_state()
        agent = get_agent(state, agent_id)
        if agent is None:
            return False

        changed = can_transition(agent.status, to_status)
        if changed:
            logger.info("Agent %s confirmed %s -> %s", agent_id, agent.status, to_status)
        self._store.actions.confirm_transition(agent_id, to_status, now=now)
        return changed

    def reject(self, agent_id: str) -> None:
        """Drop a pending request; the agent keeps its current status."""
        logger.info("Control request for agent %s rejected", agent_id)
        self._store.actions.clear_transitioning(agent_id)
