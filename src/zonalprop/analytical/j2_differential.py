from __future__ import annotations

__all__ = ["J2DifferentialEffect"]

import logging
import math
from dataclasses import replace
from typing import TYPE_CHECKING, Self

from zonalprop.orbits import convert_orbit, keplerian_mean_motion, orbit_type_of, to_keplerian
from zonalprop.utils.time import seconds_between

if TYPE_CHECKING:
    from zonalprop.gravity import ZonalGravityField
    from zonalprop.orbits import Orbit
    from zonalprop.propagation import SpacecraftState

    from .adapter import DifferentialEffect

logger = logging.getLogger(__name__)

# Offset used to evaluate a direct effect just after its own activation date.
_EFFECT_PROBE_OFFSET = 0.001  # [s]


class J2DifferentialEffect:
    """Secular drift of perigee and node caused by a change of orbit under J2.

    A maneuver (or any direct effect) changes a, e and i slightly, hence the J2 drift rates of the perigee
    argument and of the node. This effect adds the accumulated difference between the rates of the changed orbit
    (`orbit1`) and of the reference orbit (`orbit0`), counted from the reference date.
    """

    def __init__(
        self,
        orbit0: Orbit,
        orbit1: Orbit,
        apply_before: bool,  # noqa: FBT001
        field: ZonalGravityField,
    ) -> None:
        self.reference_date = orbit0.date
        self.apply_before = apply_before
        pa_dot0, raan_dot0 = _j2_rates(orbit0, field)
        pa_dot1, raan_dot1 = _j2_rates(orbit1, field)
        self.d_pa_dot = pa_dot1 - pa_dot0
        self.d_raan_dot = raan_dot1 - raan_dot0

    @classmethod
    def from_effect(
        cls,
        state: SpacecraftState,
        direct_effect: DifferentialEffect,
        apply_before: bool,  # noqa: FBT001
        field: ZonalGravityField,
    ) -> Self:
        """Build the effect matching `direct_effect` applied at the date of `state`.

        The direct effect is evaluated slightly after the reference date so that effects active strictly after
        their date are taken into account, and the result is shifted back to the reference date.
        """
        shifted = state.shifted_by(_EFFECT_PROBE_OFFSET)
        updated = direct_effect.apply(shifted).shifted_by(-_EFFECT_PROBE_OFFSET)
        return cls(state.orbit, updated.orbit, apply_before, field)

    def apply(self, state: SpacecraftState) -> SpacecraftState:
        dt = seconds_between(state.date, self.reference_date)
        if dt <= 0.0 and not self.apply_before:
            return state
        kep = to_keplerian(state.orbit)
        drifted = replace(kep, pa=kep.pa + self.d_pa_dot * dt, raan=kep.raan + self.d_raan_dot * dt)
        return state.with_orbit(convert_orbit(drifted, orbit_type_of(state.orbit)))


def _j2_rates(orbit: Orbit, field: ZonalGravityField) -> tuple[float, float]:
    kep = to_keplerian(orbit)
    ratio = field.reference_radius / kep.p
    k = 1.5 * keplerian_mean_motion(kep) * field.jn(2) * ratio * ratio
    sin_i = math.sin(kep.i)
    return k * (2.0 - 2.5 * sin_i * sin_i), -k * math.cos(kep.i)
