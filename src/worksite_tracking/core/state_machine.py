from __future__ import annotations

from enum import Enum
from typing import Mapping, TypeVar

from .exceptions import InvalidStateTransitionError

S = TypeVar("S", bound=Enum)
A = TypeVar("A", bound=Enum)


def next_state(table: Mapping[tuple[S, A], S], current: S, action: A) -> S:
    """Look up the target state for (current, action) in a transition table.

    Raises InvalidStateTransitionError naming both when the pair is absent.
    """

    try:
        return table[(current, action)]
    except KeyError:
        raise InvalidStateTransitionError(current_state=current.value, action=action.value) from None


def allowed_actions(table: Mapping[tuple[S, A], S], current: S) -> list[A]:
    return [action for (state, action) in table if state == current]
