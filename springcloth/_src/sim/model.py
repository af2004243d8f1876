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

"""Implementation of the cloth Model class."""

from __future__ import annotations

import warp as wp

from ..core.types import Devicelike
from .state import State


class Model:
    """
    Represents the static (non-time-varying) definition of a cloth grid.

    The Model stores the grid dimension, the initial particle configuration, the
    restrained flags and the triangle topology used by the drag stage. Springs are
    not stored: they are derived on the fly from grid-adjacency offsets of ``dim``.

    Note:
        It is strongly recommended to use the :class:`ClothBuilder` to construct a Model.
        Direct instantiation and manual population of Model fields is possible but discouraged.
    """

    def __init__(self, device: Devicelike | None = None):
        """
        Initialize a Model object.

        Args:
            device (wp.Device, optional): Device on which the Model's data will be allocated.
        """
        self.requires_grad: bool = False
        """Whether the model was finalized (see :meth:`ClothBuilder.finalize`) with gradient computation enabled."""

        self.dim: int = 0
        """Number of particles along each side of the square grid."""
        self.particle_count: int = 0
        """Total number of particles, equal to ``dim * dim``."""
        self.tri_count: int = 0
        """Total number of triangles used by the drag stage."""

        self.particle_q: wp.array | None = None
        """Initial particle positions, shape [particle_count], vec3."""
        self.particle_qd: wp.array | None = None
        """Initial particle velocities, shape [particle_count], vec3."""
        self.particle_restrained: wp.array | None = None
        """Restrained flag per particle (non-zero = fixed in space), shape [particle_count], int32."""
        self.tri_indices: wp.array | None = None
        """Triangle vertex indices, shape [tri_count, 3], int32."""

        self.device: wp.Device = wp.get_device(device)
        """Device on which the Model was allocated."""

    def state(self, requires_grad: bool | None = None) -> State:
        """
        Create and return a new :class:`State` object for this model.

        The returned state is initialized with the initial configuration from the model
        description and a zeroed force accumulator.

        Args:
            requires_grad (bool, optional): Whether the state variables should have `requires_grad` enabled.
                If None, uses the model's :attr:`requires_grad` setting.

        Returns:
            State: The state object
        """
        s = State()
        if requires_grad is None:
            requires_grad = self.requires_grad

        if self.particle_count:
            s.particle_q = wp.clone(self.particle_q, requires_grad=requires_grad)
            s.particle_qd = wp.clone(self.particle_qd, requires_grad=requires_grad)
            s.particle_f = wp.zeros_like(self.particle_qd, requires_grad=requires_grad)

        return s

    def restrained_indices(self) -> list[int]:
        """Returns the linear indices of all restrained particles."""
        if not self.particle_count:
            return []
        return [int(i) for i in self.particle_restrained.numpy().nonzero()[0]]
