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

"""Sphere colliders the cloth is resolved against."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import warp as wp

from ..core.types import Devicelike, Vec3


@dataclass(frozen=True)
class SphereCollider:
    """A rigid sphere, immovable from the cloth's perspective."""

    center: Vec3
    radius: float

    def __post_init__(self):
        if self.radius < 0.0:
            raise ValueError(f"Sphere radius must be non-negative, got {self.radius}")


class Colliders:
    """
    Device-side set of sphere colliders.

    The set is owned by the caller and may be refreshed between steps with
    :meth:`update`; it is read-only for the duration of a step. Colliders are tested
    in the order in which they were given.
    """

    def __init__(self, device: Devicelike | None = None):
        self.device: wp.Device = wp.get_device(device)

        self.sphere_center: wp.array = wp.zeros(0, dtype=wp.vec3, device=self.device)
        """Sphere centers, shape (count,), dtype :class:`vec3`."""

        self.sphere_radius: wp.array = wp.zeros(0, dtype=wp.float32, device=self.device)
        """Sphere radii, shape (count,), dtype float32."""

    @classmethod
    def from_spheres(cls, spheres: Sequence[SphereCollider], device: Devicelike | None = None) -> Colliders:
        colliders = cls(device)
        colliders.update([s.center for s in spheres], [s.radius for s in spheres])
        return colliders

    @property
    def count(self) -> int:
        return len(self.sphere_radius)

    def update(self, centers: Sequence[Vec3] | np.ndarray, radii: Sequence[float] | np.ndarray):
        """
        Replace the collider set.

        Args:
            centers: Sphere centers, shape (count, 3)
            radii: Sphere radii, shape (count,)

        Raises:
            ValueError: If the number of centers and radii differ, or a radius is negative.
        """
        centers = np.asarray(centers, dtype=np.float32).reshape(-1, 3)
        radii = np.asarray(radii, dtype=np.float32).reshape(-1)
        if len(centers) != len(radii):
            raise ValueError(f"Got {len(centers)} sphere centers but {len(radii)} radii")
        if np.any(radii < 0.0):
            raise ValueError(f"Sphere radii must be non-negative, got {radii.min()}")

        if len(radii) == self.count:
            self.sphere_center.assign(centers)
            self.sphere_radius.assign(radii)
        else:
            self.sphere_center = wp.array(centers, dtype=wp.vec3, device=self.device)
            self.sphere_radius = wp.array(radii, dtype=wp.float32, device=self.device)

    def spheres(self) -> list[SphereCollider]:
        """Returns the collider set as host-side :class:`SphereCollider` values."""
        return [
            SphereCollider(center=tuple(float(x) for x in c), radius=float(r))
            for c, r in zip(self.sphere_center.numpy(), self.sphere_radius.numpy(), strict=True)
        ]
