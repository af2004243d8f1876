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

from ..geometry import Colliders
from ..sim import Model, State


class SolverBase:
    """Generic base class for cloth solvers.

    A solver advances a :class:`State` of a :class:`Model` by one time step. Parameters
    are passed explicitly to every :meth:`step` call and are never stored on the solver.
    """

    def __init__(self, model: Model):
        self.model = model

    @property
    def device(self) -> wp.Device:
        """
        Get the device used by the solver.

        Returns:
            wp.Device: The device used by the solver.
        """
        return self.model.device

    def validate_inputs(self, state: State, colliders: Colliders | None):
        """Checks that the state and colliders match the model the solver was created for."""
        if state.particle_count != self.model.particle_count:
            raise ValueError(
                f"State has {state.particle_count} particles but the model has {self.model.particle_count}"
            )
        if colliders is not None and colliders.device != self.device:
            raise ValueError(f"Colliders live on {colliders.device} but the solver runs on {self.device}")

    def step(self, state: State, colliders: Colliders | None, config) -> None:
        """
        Simulate the model for one time step in place.

        Args:
            state: The state to advance. Positions and velocities are updated in place.
            colliders: The colliders to resolve against, or None.
            config: The solver-specific parameter set for this step.
        """
        raise NotImplementedError()
