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

import unittest

import numpy as np
import warp as wp

from springcloth._src.sim.grid import grid_is_valid, grid_to_1d, grid_to_2d, is_valid, to_1d, to_2d
from springcloth.tests.unittest_utils import add_function_test, assert_np_equal, get_test_devices


@wp.kernel
def eval_grid_funcs(
    dim: int,
    coords: wp.array(dtype=wp.vec2i),
    indices: wp.array(dtype=int),
    valid: wp.array(dtype=int),
):
    i = wp.tid()
    coord = grid_to_2d(i, dim)
    coords[i] = coord
    indices[i] = grid_to_1d(coord, dim)
    valid[i] = 0
    if grid_is_valid(coord + wp.vec2i(1, 1), dim):
        valid[i] = 1


class TestGrid(unittest.TestCase):
    def test_host_roundtrip(self):
        dim = 5
        for i in range(dim * dim):
            col, row = to_2d(i, dim)
            self.assertEqual(to_1d(col, row, dim), i)
            self.assertTrue(is_valid(col, row, dim))

    def test_host_layout(self):
        self.assertEqual(to_2d(7, 4), (3, 1))
        self.assertEqual(to_1d(3, 1, 4), 7)

    def test_host_bounds(self):
        self.assertFalse(is_valid(-1, 0, 4))
        self.assertFalse(is_valid(0, -1, 4))
        self.assertFalse(is_valid(4, 0, 4))
        self.assertFalse(is_valid(0, 4, 4))
        self.assertTrue(is_valid(3, 3, 4))


def test_grid_funcs(test, device):
    dim = 4
    n = dim * dim
    coords = wp.zeros(n, dtype=wp.vec2i, device=device)
    indices = wp.zeros(n, dtype=int, device=device)
    valid = wp.zeros(n, dtype=int, device=device)
    wp.launch(eval_grid_funcs, dim=n, inputs=[dim, coords, indices, valid], device=device)

    expected_coords = np.array([[i % dim, i // dim] for i in range(n)])
    expected_valid = np.array([int(i % dim < dim - 1 and i // dim < dim - 1) for i in range(n)])
    assert_np_equal(coords.numpy(), expected_coords)
    assert_np_equal(indices.numpy(), np.arange(n))
    assert_np_equal(valid.numpy(), expected_valid)


devices = get_test_devices()
add_function_test(TestGrid, "test_grid_funcs", test_grid_funcs, devices=devices)


if __name__ == "__main__":
    unittest.main(verbosity=2, failfast=False)
