"""Validated transition graph for unit lifecycles.

The graph maps each state to the actions leaving it. An action names its
target state, an optional effect that computes the next value of whatever
the machine governs, and an optional delay after which the transition is
due. The machine itself holds no current state: callers pass the state they
read, which lets one machine serve every unit in the fleet while each unit's
state stays in the registry.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from ambusim.errors import InvalidTransition
from ambusim.unit import Time

State = TypeVar("State", bound=Enum)
"""Type variable for state enumerations."""

ActionFn = Callable[..., Any]
"""Effect executed when an action fires; receives the caller's arguments."""


@dataclass(frozen=True)
class Action(Generic[State]):
    """A transition to ``state`` with an optional effect and delay.

    Attributes:
        state: Target state of the transition.
        effect: Function computing the transition's result, if any.
        delay: Time that must pass in the source state before the
            transition fires on its own. ``None`` for externally triggered
            transitions.
    """

    state: State
    effect: ActionFn | None = None
    delay: Time | None = None

    def __call__(self, *args, **kwargs) -> Any:
        """Execute the effect, returning its result or None."""
        if self.effect:
            return self.effect(*args, **kwargs)
        return None

    @property
    def timed(self) -> bool:
        return self.delay is not None


StateGraph = dict[State, tuple[Action[State], ...]]


class StateMachine(Generic[State]):
    """Finite state machine that validates transitions against a graph.

    Attributes:
        _allowed: Mapping from each state to the actions leaving it.
    """

    _allowed: StateGraph

    def __init__(self, nodes_graph: StateGraph):
        self._allowed = nodes_graph

    def request_transition(self, current: State, next_state: State, *args, **kwargs) -> Any:
        """Validate ``current -> next_state`` and run the action's effect.

        Returns:
            The result of the action's effect, or None without an effect.

        Raises:
            InvalidTransition: If the graph has no such edge.
        """
        action = self._validate_transition(current, next_state)
        return action(*args, **kwargs)

    def actions_from(self, state: State) -> tuple[Action[State], ...]:
        return self._allowed.get(state, ())

    def timed_action(self, state: State) -> Action[State] | None:
        """Return the action that fires on its own after a delay, if any."""
        for action in self.actions_from(state):
            if action.timed:
                return action
        return None

    def state_list(self) -> list[State]:
        """All states appearing in the graph, sources first."""
        states: list[State] = list(self._allowed)
        for actions in self._allowed.values():
            for action in actions:
                if action.state not in states:
                    states.append(action.state)
        return states

    def _validate_transition(self, frm: State, to: State) -> Action[State]:
        for action in self.actions_from(frm):
            if action.state == to:
                return action

        msg = f"Illegal transition {frm.name} → {to.name}"
        raise InvalidTransition(msg)
