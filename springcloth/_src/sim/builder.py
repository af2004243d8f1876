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

"""A module for building cloth grid models."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
import warp as wp

from ..core.types import Devicelike, Vec3, vec3
from ..utils import msg
from .grid import to_1d
from .model import Model


class ClothBuilder:
    """A helper class for building a square mass-spring cloth grid.

    The builder collects the particle grid, the restrained particles and the triangle
    topology on the host and transfers them to a device in :meth:`finalize`.

    Example:

    .. code-block:: python

        import springcloth

        builder = springcloth.ClothBuilder()
        builder.add_cloth_grid(dim=32, cell_size=0.05, pos=(-0.8, 1.5, -0.8), fix_top=True)
        model = builder.finalize(device="cuda:0")

        state = model.state()

    Note:
        Springs are not materialized by the builder. The solver derives parallel, diagonal
        and bending springs from the grid dimension on the fly.
    """

    def __init__(self):
        self.dim: int = 0
        self.particle_q: list[wp.vec3] = []
        self.particle_qd: list[wp.vec3] = []
        self.particle_restrained: list[bool] = []
        self.tri_indices: list[tuple[int, int, int]] = []

    @property
    def particle_count(self) -> int:
        return len(self.particle_q)

    @property
    def tri_count(self) -> int:
        return len(self.tri_indices)

    def add_cloth_grid(
        self,
        dim: int,
        cell_size: float,
        pos: Vec3 = (0.0, 0.0, 0.0),
        vel: Vec3 = (0.0, 0.0, 0.0),
        vertical: bool = False,
        reverse_winding: bool = False,
        fix_left: bool = False,
        fix_right: bool = False,
        fix_top: bool = False,
        fix_bottom: bool = False,
    ):
        """Helper to create a regular square cloth grid of ``dim x dim`` particles.

        Particle ``(col, row)`` receives the linear index ``row * dim + col``. Each grid cell
        is split into two triangles for the drag stage.

        Args:
            dim: The number of particles along each side of the grid
            cell_size: The rest distance between two adjacent particles
            pos: The world position of particle ``(0, 0)``
            vel: The initial velocity of all particles
            vertical: If True, rows extend along -y (a hanging curtain), otherwise along +z (a horizontal sheet)
            reverse_winding: Flip the winding of the triangles, and with it the drag normals
            fix_left: Restrain the particles of column 0
            fix_right: Restrain the particles of column ``dim - 1``
            fix_top: Restrain the particles of row 0
            fix_bottom: Restrain the particles of row ``dim - 1``
        """
        if self.dim:
            raise ValueError("ClothBuilder holds a single grid; add_cloth_grid() was already called")
        if dim < 1:
            raise ValueError(f"Grid dimension must be at least 1, got {dim}")
        if cell_size <= 0.0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")

        origin = vec3(pos)
        velocity = vec3(vel)
        if vertical:
            row_axis = wp.vec3(0.0, -1.0, 0.0)
        else:
            row_axis = wp.vec3(0.0, 0.0, 1.0)
        col_axis = wp.vec3(1.0, 0.0, 0.0)

        self.dim = dim
        for row in range(dim):
            for col in range(dim):
                self.particle_q.append(origin + col_axis * (col * cell_size) + row_axis * (row * cell_size))
                self.particle_qd.append(velocity)
                self.particle_restrained.append(
                    (col == 0 and fix_left)
                    or (col == dim - 1 and fix_right)
                    or (row == 0 and fix_top)
                    or (row == dim - 1 and fix_bottom)
                )

        for row in range(1, dim):
            for col in range(1, dim):
                v0 = to_1d(col - 1, row - 1, dim)
                v1 = to_1d(col, row - 1, dim)
                v2 = to_1d(col, row, dim)
                v3 = to_1d(col - 1, row, dim)
                if reverse_winding:
                    self.tri_indices.append((v0, v1, v2))
                    self.tri_indices.append((v0, v2, v3))
                else:
                    self.tri_indices.append((v0, v2, v1))
                    self.tri_indices.append((v0, v3, v2))

    def restrain(self, indices: Iterable[int], restrained: bool = True):
        """Sets the restrained flag of the given particles.

        Args:
            indices: Linear particle indices
            restrained: If True the particles are fixed in space, otherwise they are released
        """
        for i in indices:
            if i < 0 or i >= self.particle_count:
                raise ValueError(f"Particle index {i} is out of range [0, {self.particle_count})")
            self.particle_restrained[i] = restrained

    def set_triangles(self, indices: Sequence[Sequence[int]] | np.ndarray):
        """Replaces the generated triangulation with an externally supplied one.

        Args:
            indices: Triangle vertex indices, one ``(i, j, k)`` triple per triangle
        """
        tris = np.asarray(indices, dtype=np.int32).reshape(-1, 3)
        if tris.size and (tris.min() < 0 or tris.max() >= self.particle_count):
            raise ValueError(
                f"Triangle indices must lie in [0, {self.particle_count}), got [{tris.min()}, {tris.max()}]"
            )
        self.tri_indices = [tuple(int(v) for v in t) for t in tris]

    def finalize(self, device: Devicelike | None = None, requires_grad: bool = False) -> Model:
        """
        Finalize the builder and create a concrete :class:`Model` for simulation.

        Args:
            device: The simulation device to use (e.g., 'cpu', 'cuda'). If None, uses the current Warp device.
            requires_grad: If True, enables gradient computation for the model arrays.

        Returns:
            Model: A Model object containing the grid data on the specified device.
        """
        if not self.dim:
            raise ValueError("Cannot finalize an empty ClothBuilder; call add_cloth_grid() first")

        m = Model(device)
        m.requires_grad = requires_grad
        m.dim = self.dim
        m.particle_count = self.particle_count
        m.tri_count = self.tri_count

        with wp.ScopedDevice(device):
            m.particle_q = wp.array(self.particle_q, dtype=wp.vec3, requires_grad=requires_grad)
            m.particle_qd = wp.array(self.particle_qd, dtype=wp.vec3, requires_grad=requires_grad)
            m.particle_restrained = wp.array(
                np.asarray(self.particle_restrained, dtype=np.int32), dtype=wp.int32
            )
            m.tri_indices = wp.array(
                np.asarray(self.tri_indices, dtype=np.int32).reshape(-1, 3), dtype=wp.int32
            )

        msg.debug(
            f"Finalized cloth model: dim={m.dim}, particles={m.particle_count}, "
            f"triangles={m.tri_count}, restrained={sum(self.particle_restrained)}, device={m.device}"
        )
        return m
