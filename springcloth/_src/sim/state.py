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

from __future__ import annotations

import warp as wp


class State:
    """
    Represents the time-varying state of a cloth :class:`Model`.

    The State object holds the per-particle quantities that change during simulation:
    positions, velocities and the force accumulator. The solver mutates positions and
    velocities in place; the force accumulator must be reset with :meth:`clear_forces`
    once per step before the force stages run.

    State objects are typically created via :meth:`springcloth.Model.state()`.
    """

    def __init__(self) -> None:
        """
        Initialize an empty State object.
        To ensure that the attributes are properly allocated create the State object via
        :meth:`springcloth.Model.state` instead.
        """

        self.particle_q: wp.array | None = None
        """3D positions of particles, shape (particle_count,), dtype :class:`vec3`."""

        self.particle_qd: wp.array | None = None
        """3D velocities of particles, shape (particle_count,), dtype :class:`vec3`."""

        self.particle_f: wp.array | None = None
        """3D force accumulator of particles, shape (particle_count,), dtype :class:`vec3`."""

    def clear_forces(self) -> None:
        """
        Reset the particle force accumulator to zero.

        The solver relies on this being called once per step before
        :meth:`SolverMassSpring.step` and does not do it on its own.
        """
        with wp.ScopedTimer("clear_forces", False):
            if self.particle_count:
                self.particle_f.zero_()

    def assign(self, other: State) -> None:
        """
        Copies the array attributes of another State object into this one.

        Args:
            other: The source state. Must have the same particle count.

        Raises:
            ValueError: If the particle counts of the two states differ.
        """
        if other.particle_count != self.particle_count:
            raise ValueError(
                f"Cannot assign a state with {other.particle_count} particles to a state with {self.particle_count}"
            )
        for name in ("particle_q", "particle_qd", "particle_f"):
            src = getattr(other, name)
            dst = getattr(self, name)
            if src is not None and dst is not None:
                dst.assign(src)

    @property
    def requires_grad(self) -> bool:
        """Indicates whether the state arrays have gradient computation enabled."""
        if self.particle_q:
            return self.particle_q.requires_grad
        return False

    @property
    def particle_count(self) -> int:
        """The number of particles represented in the state."""
        return len(self.particle_q) if self.particle_q is not None else 0
