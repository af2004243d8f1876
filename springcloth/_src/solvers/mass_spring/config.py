# SPDX-FileCopyrightText: Copyright (c) 2025 The SpringCloth Developers
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Provides types for holding the parameters of a mass-spring cloth step.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field
from enum import IntEnum

import warp as wp

from ...core.types import AIR_DENSITY, GRAVITY_ACCEL, Vec3, vec3

###
# Module interface
###

__all__ = [
    "IntegrationMode",
    "MassSpringConfig",
    "MassSpringParams",
    "SpringFamilyConfig",
    "SpringFamilyParams",
]


###
# Types
###


class IntegrationMode(IntEnum):
    """Time integration scheme of the integration stage."""

    EULER = 0
    """Explicit (symplectic) Euler: the position is advanced with the pre-step velocity."""

    LEAPFROG = 1
    """Leapfrog: the velocity is advanced first and the position uses the new velocity."""


@wp.struct
class SpringFamilyParams:
    """
    A Warp struct to hold on-device parameters of one spring family.
    """

    rest_length: wp.float32
    stiffness: wp.float32
    damping: wp.float32
    influence: wp.float32


@wp.struct
class MassSpringParams:
    """
    A Warp struct to hold on-device parameters of a mass-spring step.
    """

    mass: wp.float32
    cor: wp.float32
    dt: wp.float32
    integration_mode: wp.int32
    gravity: wp.vec3
    wind: wp.vec3
    wind_influence: wp.float32
    drag_coefficient: wp.float32
    air_density: wp.float32
    collision_offset: wp.float32
    parallel: SpringFamilyParams
    diagonal: SpringFamilyParams
    bending: SpringFamilyParams


@dataclass(frozen=True)
class SpringFamilyConfig:
    """
    Host-side parameters of one spring family (parallel, diagonal or bending).
    """

    rest_length: float = 0.0
    """Rest length of the springs [m]. Must be non-negative."""

    stiffness: float = 0.0
    """Stiffness coefficient ``ks`` [N/m]. Must be non-negative."""

    damping: float = 0.0
    """Damping coefficient ``kd`` [N s/m]. Must be non-negative."""

    influence: float = 1.0
    """
    Scale applied to the summed family force.\n
    Clamped to `[0, 1]` on device; `0` disables the family without changing its rest parameters.
    """

    def __post_init__(self) -> None:
        self.check_values()

    def check_values(self) -> None:
        if self.rest_length < 0.0:
            raise ValueError(f"Invalid rest_length: {self.rest_length}. Must be non-negative.")
        if self.stiffness < 0.0:
            raise ValueError(f"Invalid stiffness: {self.stiffness}. Must be non-negative.")
        if self.damping < 0.0:
            raise ValueError(f"Invalid damping: {self.damping}. Must be non-negative.")

    @property
    def enabled(self) -> bool:
        return self.influence > 0.0 and self.stiffness > 0.0

    def to_struct(self) -> SpringFamilyParams:
        params = SpringFamilyParams()
        params.rest_length = wp.float32(self.rest_length)
        params.stiffness = wp.float32(self.stiffness)
        params.damping = wp.float32(self.damping)
        params.influence = wp.float32(self.influence)
        return params


@dataclass(frozen=True)
class MassSpringConfig:
    """
    A data container to hold the host-side, read-only parameters of a mass-spring step.

    An instance is passed to every :meth:`SolverMassSpring.step` call and converted to a
    :class:`MassSpringParams` struct for on-device use. Use :func:`dataclasses.replace`
    to derive a modified configuration.
    """

    mass: float = 1.0
    """Mass of every particle [kg]. Must be positive."""

    cor: float = 0.5
    """Coefficient of restitution of collisions. Clamped to `[0, 1]` on device."""

    dt: float = 1.0 / 600.0
    """Time step [s]. Must be positive and finite."""

    integration_mode: IntegrationMode = IntegrationMode.EULER
    """Time integration scheme."""

    wind: Vec3 = (0.0, 0.0, 0.0)
    """Ambient wind velocity [m/s]."""

    wind_influence: float = 1.0
    """Scale applied to the drag force. Clamped to `[0, 1]` on device."""

    drag_coefficient: float = 1.0
    """Drag coefficient of the quadratic drag law. Must be non-negative."""

    parallel: SpringFamilyConfig = field(default_factory=SpringFamilyConfig)
    """Springs to the 4-neighborhood (one row or one column apart)."""

    diagonal: SpringFamilyConfig = field(default_factory=SpringFamilyConfig)
    """Springs to the 4 diagonal neighbors."""

    bending: SpringFamilyConfig = field(default_factory=SpringFamilyConfig)
    """Springs to the 4 neighbors two steps apart along the diagonals."""

    gravity: Vec3 = (0.0, -GRAVITY_ACCEL, 0.0)
    """Gravitational acceleration [m/s^2]."""

    air_density: float = AIR_DENSITY
    """Density of the air used by the drag law [kg/m^3]. Must be non-negative."""

    collision_offset: float = 0.05
    """Distance by which sphere colliders are inflated for the collision test [m]. Must be non-negative."""

    def __post_init__(self) -> None:
        """
        Performs validation checks on the configuration values after initialization.
        """
        self.check_values()
        self.check_stability()

    @classmethod
    def from_cell_size(
        cls,
        cell_size: float,
        stiffness: tuple[float, float, float] = (1000.0, 1000.0, 100.0),
        damping: tuple[float, float, float] = (1.0, 1.0, 0.1),
        **kwargs,
    ) -> MassSpringConfig:
        """
        Creates a configuration whose rest lengths match an undeformed grid with spacing ``cell_size``.

        Args:
            cell_size: Rest distance between two adjacent particles.
            stiffness: Stiffness of the parallel, diagonal and bending families.
            damping: Damping of the parallel, diagonal and bending families.
            **kwargs: Remaining :class:`MassSpringConfig` fields.
        """
        if cell_size <= 0.0:
            raise ValueError(f"Invalid cell_size: {cell_size}. Must be positive.")
        diagonal = cell_size * math.sqrt(2.0)
        # stability is checked once more below, attributed to the caller of this method
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            config = cls(
                parallel=SpringFamilyConfig(cell_size, stiffness[0], damping[0]),
                diagonal=SpringFamilyConfig(diagonal, stiffness[1], damping[1]),
                bending=SpringFamilyConfig(2.0 * diagonal, stiffness[2], damping[2]),
                **kwargs,
            )
        config.check_stability(stacklevel=3)
        return config

    def check_values(self) -> None:
        """
        Validates configuration values.
        """
        if not self.mass > 0.0:
            raise ValueError(f"Invalid mass: {self.mass}. Must be positive.")
        if not (self.dt > 0.0 and math.isfinite(self.dt)):
            raise ValueError(f"Invalid dt: {self.dt}. Must be positive and finite.")
        if self.drag_coefficient < 0.0:
            raise ValueError(f"Invalid drag_coefficient: {self.drag_coefficient}. Must be non-negative.")
        if self.air_density < 0.0:
            raise ValueError(f"Invalid air_density: {self.air_density}. Must be non-negative.")
        if self.collision_offset < 0.0:
            raise ValueError(f"Invalid collision_offset: {self.collision_offset}. Must be non-negative.")
        if self.integration_mode not in IntegrationMode.__members__.values():
            raise ValueError(f"Invalid integration_mode: {self.integration_mode}.")
        vec3(self.wind)
        vec3(self.gravity)

    def check_stability(self, stacklevel: int = 4) -> None:
        """
        Warns if ``dt`` exceeds the explicit stability estimate ``2 * sqrt(mass / stiffness)``
        of any enabled spring family.

        Args:
            stacklevel: Passed to :func:`warnings.warn`. The default attributes the warning
                to the code constructing the configuration.
        """
        for name in ("parallel", "diagonal", "bending"):
            family: SpringFamilyConfig = getattr(self, name)
            if not family.enabled:
                continue
            dt_max = 2.0 * math.sqrt(self.mass / family.stiffness)
            if self.dt > dt_max:
                warnings.warn(
                    f"Time step {self.dt:.6g} s exceeds the stability estimate {dt_max:.6g} s "
                    f"of the {name} springs; the explicit integration may diverge.",
                    stacklevel=stacklevel,
                )

    def to_struct(self) -> MassSpringParams:
        """
        Converts the host-side configuration to a :class:`MassSpringParams` struct for on-device use.
        """
        params = MassSpringParams()
        params.mass = wp.float32(self.mass)
        params.cor = wp.float32(self.cor)
        params.dt = wp.float32(self.dt)
        params.integration_mode = wp.int32(int(self.integration_mode))
        params.gravity = vec3(self.gravity)
        params.wind = vec3(self.wind)
        params.wind_influence = wp.float32(self.wind_influence)
        params.drag_coefficient = wp.float32(self.drag_coefficient)
        params.air_density = wp.float32(self.air_density)
        params.collision_offset = wp.float32(self.collision_offset)
        params.parallel = self.parallel.to_struct()
        params.diagonal = self.diagonal.to_struct()
        params.bending = self.bending.to_struct()
        return params
