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

"""Indexing helpers for a square ``dim x dim`` particle grid.

A particle is addressed either by its linear index ``i`` or by its grid coordinate
``(col, row)`` with ``i = row * dim + col``. The device functions are used inside
kernels, the host functions mirror them for topology construction on the CPU.
"""

from __future__ import annotations

import warp as wp

###
# Device functions
###


@wp.func
def grid_to_2d(index: int, dim: int) -> wp.vec2i:
    """Returns the ``(col, row)`` grid coordinate of a linear particle index."""
    return wp.vec2i(index % dim, index // dim)


@wp.func
def grid_to_1d(coord: wp.vec2i, dim: int) -> int:
    """Returns the linear particle index of a valid ``(col, row)`` grid coordinate."""
    return coord[1] * dim + coord[0]


@wp.func
def grid_is_valid(coord: wp.vec2i, dim: int) -> bool:
    """Returns ``True`` if both components of ``coord`` lie in ``[0, dim)``."""
    return coord[0] >= 0 and coord[0] < dim and coord[1] >= 0 and coord[1] < dim


###
# Host functions
###


def to_2d(index: int, dim: int) -> tuple[int, int]:
    return index % dim, index // dim


def to_1d(col: int, row: int, dim: int) -> int:
    return row * dim + col


def is_valid(col: int, row: int, dim: int) -> bool:
    return 0 <= col < dim and 0 <= row < dim


__all__ = [
    "grid_is_valid",
    "grid_to_1d",
    "grid_to_2d",
    "is_valid",
    "to_1d",
    "to_2d",
]
