"""State management for unit lifecycles.

Exports:
    StateMachine: Transition validation over a state graph
    State: Type variable for state enumerations
    Action: Transition with optional effect and delay
    StateGraph: Type alias for transition graphs
    ActionFn: Type alias for action effects
"""

from .state_machine import Action, ActionFn, State, StateGraph, StateMachine

__all__ = ["StateMachine", "State", "Action", "StateGraph", "ActionFn"]
