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

from ...geometry import Colliders
from ...sim import Model, State
from ...utils import msg
from ..solver import SolverBase
from .config import MassSpringConfig, MassSpringParams
from .kernels import (
    eval_drag_forces_kernel,
    eval_spring_forces_kernel,
    integrate_particles_kernel,
)


class SolverMassSpring(SolverBase):
    """An explicit mass-spring cloth solver for a square particle grid.

    One :meth:`step` runs three stages over the whole grid, each as a single
    data-parallel kernel launch:

    1. **Spring forces**: every particle accumulates the damped spring forces of its
       parallel, diagonal and bending neighbors. Springs are derived from grid offsets,
       no edge list is stored.
    2. **Drag forces**: every triangle computes a quadratic aerodynamic drag force from
       its velocity relative to the wind and adds a third of it to each of its vertices
       with atomic adds.
    3. **Integration**: every unrestrained particle integrates gravity plus the
       accumulated force with explicit Euler or leapfrog, then resolves its motion
       segment against the sphere colliders and reflects its velocity on impact.

    Kernels launched on the same device stream execute in order, which provides the
    barrier between the stages.

    The force accumulator is not reset by the solver; call :meth:`State.clear_forces`
    before every step.

    Example:

    .. code-block:: python

        solver = springcloth.solvers.SolverMassSpring(model)
        config = springcloth.solvers.MassSpringConfig.from_cell_size(0.05, dt=1.0 / 600.0)

        for _ in range(num_steps):
            state.clear_forces()
            solver.step(state, colliders, config)
    """

    def __init__(self, model: Model, verbose: bool = False):
        """
        Args:
            model: The cloth model to simulate.
            verbose: If True, time every stage with :class:`warp.ScopedTimer`.
        """
        super().__init__(model=model)
        self.verbose = verbose

        # an empty collider set for steps without colliders
        self._no_colliders = Colliders(self.device)

        msg.debug(
            f"SolverMassSpring: dim={model.dim}, particles={model.particle_count}, "
            f"triangles={model.tri_count}, device={self.device}"
        )

    @staticmethod
    def _params(config: MassSpringConfig | MassSpringParams) -> MassSpringParams:
        if isinstance(config, MassSpringConfig):
            return config.to_struct()
        return config

    def eval_spring_forces(self, state: State, config: MassSpringConfig | MassSpringParams):
        """Accumulates the forces of the three spring families into ``state.particle_f``."""
        model = self.model
        with wp.ScopedTimer("eval_spring_forces", active=self.verbose):
            wp.launch(
                kernel=eval_spring_forces_kernel,
                dim=model.particle_count,
                inputs=[model.dim, state.particle_q, state.particle_qd, self._params(config)],
                outputs=[state.particle_f],
                device=self.device,
            )

    def eval_drag_forces(self, state: State, config: MassSpringConfig | MassSpringParams):
        """Accumulates the aerodynamic drag of every triangle into ``state.particle_f``."""
        model = self.model
        if not model.tri_count:
            return
        with wp.ScopedTimer("eval_drag_forces", active=self.verbose):
            wp.launch(
                kernel=eval_drag_forces_kernel,
                dim=model.tri_count,
                inputs=[model.tri_indices, state.particle_q, state.particle_qd, self._params(config)],
                outputs=[state.particle_f],
                device=self.device,
            )

    def integrate(
        self, state: State, colliders: Colliders | None, config: MassSpringConfig | MassSpringParams
    ):
        """Advances positions and velocities of unrestrained particles and resolves sphere collisions."""
        model = self.model
        if colliders is None:
            colliders = self._no_colliders
        with wp.ScopedTimer("integrate", active=self.verbose):
            wp.launch(
                kernel=integrate_particles_kernel,
                dim=model.particle_count,
                inputs=[
                    model.particle_restrained,
                    state.particle_f,
                    colliders.sphere_center,
                    colliders.sphere_radius,
                    self._params(config),
                ],
                outputs=[state.particle_q, state.particle_qd],
                device=self.device,
            )

    def step(self, state: State, colliders: Colliders | None, config: MassSpringConfig | MassSpringParams):
        """
        Simulate the cloth for one time step of ``config.dt`` in place.

        Args:
            state: The state to advance. Its force accumulator must have been cleared.
            colliders: The sphere colliders to resolve against, or None.
            config: The read-only parameters of this step.
        """
        self.validate_inputs(state, colliders)
        if not self.model.particle_count:
            return

        params = self._params(config)
        self.eval_spring_forces(state, params)
        self.eval_drag_forces(state, params)
        self.integrate(state, colliders, params)
