from __future__ import annotations

__all__ = [
    "AdapterPropagator",
    "DifferentialEffect",
]

import logging
from typing import TYPE_CHECKING, Protocol, override

from zonalprop.errors import NonResettableStateError
from zonalprop.propagation import BoundedPropagator

if TYPE_CHECKING:
    import numpy as np

    from zonalprop.propagation import SpacecraftState

logger = logging.getLogger(__name__)


class DifferentialEffect(Protocol):
    """Small correction applied on top of a reference trajectory (maneuver, perturbation change...)."""

    def apply(self, state: SpacecraftState) -> SpacecraftState: ...


class AdapterPropagator(BoundedPropagator):
    """Bounded propagator adding differential effects to a reference ephemeris.

    States come from the reference, then go through the registered effects in registration order. Each effect
    decides on its own which dates it applies to.

    Additional states managed by the reference are not managed by the adapter: they are still present in the
    returned states, as plain data coming from the reference. Only providers added to the adapter itself are
    managed, and they are evaluated after every effect has been applied.
    """

    def __init__(self, reference: BoundedPropagator) -> None:
        super().__init__(reference.attitude_provider)
        self._reference = reference
        self._effects: list[DifferentialEffect] = []

    @property
    def reference(self) -> BoundedPropagator:
        return self._reference

    def add_effect(self, effect: DifferentialEffect) -> None:
        self._effects.append(effect)

    @property
    def effects(self) -> tuple[DifferentialEffect, ...]:
        return tuple(self._effects)

    @property
    @override
    def min_date(self) -> np.datetime64:
        return self._reference.min_date

    @property
    @override
    def max_date(self) -> np.datetime64:
        return self._reference.max_date

    @property
    @override
    def initial_state(self) -> SpacecraftState:
        return self.state_at(self._reference.initial_state.date)

    @override
    def reset_initial_state(self, state: SpacecraftState) -> None:
        msg = "the state of an adapter propagator cannot be reset, add a differential effect instead"
        raise NonResettableStateError(msg)

    @override
    def reset_intermediate_state(self, state: SpacecraftState, forward: bool) -> None:  # noqa: FBT001
        msg = "the state of an adapter propagator cannot be reset, add a differential effect instead"
        raise NonResettableStateError(msg)

    @override
    def _compute_state(self, date: np.datetime64) -> SpacecraftState:
        state = self._reference.state_at(date)
        for effect in self._effects:
            state = effect.apply(state)
        return state
