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

"""Common type aliases and physical constants."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Union

import warp as wp

Vec3 = Union[wp.vec3, Sequence[float]]
"""A 3D vector given either as a :class:`warp.vec3` or as a sequence of three floats."""

Vec2i = Union[wp.vec2i, Sequence[int]]
"""A 2D integer grid coordinate ``(col, row)``."""

Devicelike = Union[wp.Device, str, None]
"""A Warp device, a device alias such as ``"cpu"`` or ``"cuda:0"``, or ``None`` for the current default device."""

GRAVITY_ACCEL = 9.81
"""Magnitude of the gravitational acceleration [m/s^2]."""

AIR_DENSITY = 1.225
"""Density of air at sea level [kg/m^3]."""


def vec3(value: Vec3) -> wp.vec3:
    """Convert a sequence of three floats to a :class:`warp.vec3`."""
    if len(value) != 3:
        raise ValueError(f"Expected a 3D vector, got {len(value)} components: {value!r}")
    return wp.vec3(float(value[0]), float(value[1]), float(value[2]))


__all__ = [
    "AIR_DENSITY",
    "GRAVITY_ACCEL",
    "Devicelike",
    "Vec2i",
    "Vec3",
    "vec3",
]
