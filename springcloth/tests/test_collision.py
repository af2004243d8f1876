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

import springcloth
from springcloth.geometry import ray_intersect_sphere, segment_intersect_sphere_with_normal
from springcloth.solvers import IntegrationMode, MassSpringConfig, SolverMassSpring
from springcloth.tests.unittest_utils import add_function_test, assert_np_equal, get_test_devices


@wp.kernel
def eval_ray_intersect_sphere(
    origins: wp.array(dtype=wp.vec3),
    directions: wp.array(dtype=wp.vec3),
    center: wp.vec3,
    radius: float,
    distances: wp.array(dtype=float),
):
    i = wp.tid()
    distances[i] = ray_intersect_sphere(origins[i], directions[i], center, radius)


@wp.kernel
def eval_segment_intersect_sphere(
    starts: wp.array(dtype=wp.vec3),
    ends: wp.array(dtype=wp.vec3),
    center: wp.vec3,
    radius: float,
    hits: wp.array(dtype=int),
    distances: wp.array(dtype=float),
    normals: wp.array(dtype=wp.vec3),
):
    i = wp.tid()
    geom_hit = segment_intersect_sphere_with_normal(starts[i], ends[i], center, radius)
    hits[i] = 0
    if geom_hit.hit:
        hits[i] = 1
    distances[i] = geom_hit.distance
    normals[i] = geom_hit.normal


def _falling_particle(device, pos=(0.0, 1.0, 0.0), vel=(0.0, -20.0, 0.0), restrained=False):
    builder = springcloth.ClothBuilder()
    builder.add_cloth_grid(dim=1, cell_size=1.0, pos=pos, vel=vel)
    if restrained:
        builder.restrain([0])
    model = builder.finalize(device=device)
    return model, model.state()


def _step_once(device, colliders, cor=0.5, **kwargs):
    model, state = _falling_particle(device, **kwargs)
    solver = SolverMassSpring(model)
    config = MassSpringConfig(dt=0.01, cor=cor, gravity=(0.0, 0.0, 0.0), collision_offset=0.05)
    state.clear_forces()
    solver.step(state, colliders, config)
    return state.particle_q.numpy()[0], state.particle_qd.numpy()[0]


def _spheres(device, *spheres):
    return springcloth.Colliders.from_spheres(
        [springcloth.SphereCollider(center=c, radius=r) for c, r in spheres], device=device
    )


class TestCollision(unittest.TestCase):
    pass


def test_ray_intersect_sphere(test, device):
    origins = wp.array(
        [(0.0, 0.0, -5.0), (0.0, 0.0, -5.0), (0.0, 2.0, -5.0), (0.0, 0.0, 0.5)], dtype=wp.vec3, device=device
    )
    directions = wp.array(
        [(0.0, 0.0, 1.0), (0.0, 0.0, -1.0), (0.0, 0.0, 1.0), (0.0, 0.0, 1.0)], dtype=wp.vec3, device=device
    )
    distances = wp.zeros(4, dtype=float, device=device)
    wp.launch(
        eval_ray_intersect_sphere,
        dim=4,
        inputs=[origins, directions, wp.vec3(0.0, 0.0, 0.0), 1.0, distances],
        device=device,
    )
    # entry hit, pointing away, passing by, starting inside
    assert_np_equal(distances.numpy(), np.array([4.0, -1.0, -1.0, -1.0]), tol=1e-6)


def test_segment_intersect_sphere(test, device):
    starts = wp.array(
        [(0.0, 0.0, -5.0), (0.0, 0.0, -5.0), (0.0, 0.0, -5.0), (0.0, 0.0, 0.5)], dtype=wp.vec3, device=device
    )
    ends = wp.array(
        [(0.0, 0.0, 0.0), (0.0, 0.0, -3.0), (0.0, 0.0, -5.0), (0.0, 0.0, 3.0)], dtype=wp.vec3, device=device
    )
    hits = wp.zeros(4, dtype=int, device=device)
    distances = wp.zeros(4, dtype=float, device=device)
    normals = wp.zeros(4, dtype=wp.vec3, device=device)
    wp.launch(
        eval_segment_intersect_sphere,
        dim=4,
        inputs=[starts, ends, wp.vec3(0.0, 0.0, 0.0), 1.0, hits, distances, normals],
        device=device,
    )
    # crossing, too short, degenerate, starting inside
    assert_np_equal(hits.numpy(), np.array([1, 0, 0, 1]))
    test.assertAlmostEqual(float(distances.numpy()[0]), 4.0, places=5)
    assert_np_equal(normals.numpy()[0], np.array([0.0, 0.0, -1.0]), tol=1e-6)
    # a start inside hits at once, pointing out through the start
    test.assertEqual(float(distances.numpy()[3]), 0.0)
    assert_np_equal(normals.numpy()[3], np.array([0.0, 0.0, 1.0]), tol=1e-6)


def test_sphere_collision_reflects(test, device):
    colliders = _spheres(device, ((0.0, 0.0, 0.0), 0.8))

    # the segment y = 1.0 -> 0.8 enters the inflated sphere (radius 0.85) at y = 0.85
    q, qd = _step_once(device, colliders, cor=1.0)
    assert_np_equal(q, np.array([0.0, 0.85, 0.0]), tol=1e-5)
    assert_np_equal(qd, np.array([0.0, 20.0, 0.0]), tol=1e-4)

    q, qd = _step_once(device, colliders, cor=0.5)
    assert_np_equal(q, np.array([0.0, 0.85, 0.0]), tol=1e-5)
    assert_np_equal(qd, np.array([0.0, 10.0, 0.0]), tol=1e-4)

    q, qd = _step_once(device, colliders, cor=0.0)
    assert_np_equal(q, np.array([0.0, 0.85, 0.0]), tol=1e-5)
    assert_np_equal(qd, np.zeros(3), tol=1e-6)


def test_restitution_is_clamped(test, device):
    colliders = _spheres(device, ((0.0, 0.0, 0.0), 0.8))
    _, qd = _step_once(device, colliders, cor=2.0)
    assert_np_equal(qd, np.array([0.0, 20.0, 0.0]), tol=1e-4)


def test_oblique_reflection(test, device):
    # moving along +x, hitting a sphere below and ahead of the particle
    colliders = _spheres(device, ((1.0, -0.5, 0.0), 0.5))
    q, qd = _step_once(device, colliders, cor=1.0, pos=(0.0, 0.0, 0.0), vel=(100.0, 0.0, 0.0))

    center = np.array([1.0, -0.5, 0.0])
    test.assertAlmostEqual(float(np.linalg.norm(q - center)), 0.55, places=4)
    normal = (q - center) / np.linalg.norm(q - center)
    v = np.array([100.0, 0.0, 0.0])
    assert_np_equal(qd, v - 2.0 * np.dot(v, normal) * normal, tol=1e-2)
    test.assertAlmostEqual(float(np.linalg.norm(qd)), 100.0, places=2)


def test_no_collision_outside(test, device):
    colliders = _spheres(device, ((0.0, 0.0, 0.0), 0.5))
    q, qd = _step_once(device, colliders, cor=1.0)
    assert_np_equal(q, np.array([0.0, 0.8, 0.0]), tol=1e-5)
    assert_np_equal(qd, np.array([0.0, -20.0, 0.0]), tol=1e-5)


def test_start_inside_sphere(test, device):
    colliders = _spheres(device, ((0.0, 0.0, 0.0), 0.8))

    # moving inwards: pushed back onto the inflated surface and reflected
    q, qd = _step_once(device, colliders, cor=1.0, pos=(0.0, 0.5, 0.0))
    assert_np_equal(q, np.array([0.0, 0.85, 0.0]), tol=1e-5)
    assert_np_equal(qd, np.array([0.0, 20.0, 0.0]), tol=1e-4)

    # moving outwards: pushed back onto the surface, velocity kept
    q, qd = _step_once(device, colliders, cor=0.0, pos=(0.0, 0.5, 0.0), vel=(0.0, 20.0, 0.0))
    assert_np_equal(q, np.array([0.0, 0.85, 0.0]), tol=1e-5)
    assert_np_equal(qd, np.array([0.0, 20.0, 0.0]), tol=1e-5)

    # a start on the surface of a sphere with cor = 0 does not sink in
    q, qd = _step_once(device, colliders, cor=0.0, pos=(0.0, 0.85, 0.0), vel=(0.0, -1.0, 0.0))
    assert_np_equal(q, np.array([0.0, 0.85, 0.0]), tol=1e-5)
    assert_np_equal(qd, np.zeros(3), tol=1e-5)


def test_resting_on_sphere(test, device):
    colliders = _spheres(device, ((0.0, 0.0, 0.0), 0.5))
    radius = 0.55

    for mode in (IntegrationMode.EULER, IntegrationMode.LEAPFROG):
        for cor in (0.0, 0.2):
            for pos in ((0.0, 1.0, 0.0), (0.013, 1.0, 0.007)):
                model, state = _falling_particle(device, pos=pos, vel=(0.0, 0.0, 0.0))
                solver = SolverMassSpring(model)
                config = MassSpringConfig(dt=1.0 / 600.0, cor=cor, integration_mode=mode, collision_offset=0.05)
                params = config.to_struct()

                min_dist = np.inf
                for _ in range(600):
                    state.clear_forces()
                    solver.step(state, colliders, params)
                    min_dist = min(min_dist, float(np.linalg.norm(state.particle_q.numpy()[0])))

                # never closer to the center than the inflated radius
                test.assertGreaterEqual(min_dist, radius - 1e-3, msg=f"{mode.name}, cor={cor}, start={pos}")
                if pos[0] == 0.0:
                    # a particle dropped onto the pole stays there
                    q = state.particle_q.numpy()[0]
                    test.assertLess(float(np.linalg.norm(q)), radius + 0.01, msg=f"{mode.name}, cor={cor}")
                    test.assertTrue(np.all(np.isfinite(q)))


def test_last_collider_wins(test, device):
    small = ((0.0, 0.0, 0.0), 0.8)
    large = ((0.0, 0.0, 0.0), 0.85)

    # every collider is tested against the unresolved segment, a later hit overrides an earlier one
    q, _ = _step_once(device, _spheres(device, small, large), cor=1.0)
    assert_np_equal(q, np.array([0.0, 0.9, 0.0]), tol=1e-5)

    q, _ = _step_once(device, _spheres(device, large, small), cor=1.0)
    assert_np_equal(q, np.array([0.0, 0.85, 0.0]), tol=1e-5)


def test_restrained_ignores_colliders(test, device):
    colliders = _spheres(device, ((0.0, 0.0, 0.0), 0.8))
    q, qd = _step_once(device, colliders, cor=1.0, restrained=True)
    assert_np_equal(q, np.array([0.0, 1.0, 0.0]))
    assert_np_equal(qd, np.array([0.0, -20.0, 0.0]))


def test_no_colliders(test, device):
    q_none, qd_none = _step_once(device, None)
    q_empty, qd_empty = _step_once(device, springcloth.Colliders(device))
    assert_np_equal(q_none, q_empty)
    assert_np_equal(qd_none, qd_empty)
    assert_np_equal(q_none, np.array([0.0, 0.8, 0.0]), tol=1e-5)


def test_leapfrog_collision(test, device):
    model, state = _falling_particle(device, vel=(0.0, 0.0, 0.0))
    solver = SolverMassSpring(model)
    config = MassSpringConfig(
        dt=0.1, cor=1.0, gravity=(0.0, -20.0, 0.0), integration_mode=IntegrationMode.LEAPFROG, collision_offset=0.05
    )
    colliders = _spheres(device, ((0.0, 0.0, 0.0), 0.8))

    # v = -2 after the kick, x1 = 0.8, reflected about +y
    solver.step(state, colliders, config)
    assert_np_equal(state.particle_q.numpy()[0], np.array([0.0, 0.85, 0.0]), tol=1e-5)
    assert_np_equal(state.particle_qd.numpy()[0], np.array([0.0, 2.0, 0.0]), tol=1e-5)


def test_update_colliders_between_steps(test, device):
    model, state = _falling_particle(device, vel=(0.0, -2.0, 0.0))
    solver = SolverMassSpring(model)
    config = MassSpringConfig(dt=0.1, cor=0.0, gravity=(0.0, 0.0, 0.0), collision_offset=0.0)
    colliders = _spheres(device, ((0.0, -5.0, 0.0), 0.1))

    solver.step(state, colliders, config)
    assert_np_equal(state.particle_q.numpy()[0], np.array([0.0, 0.8, 0.0]), tol=1e-5)

    colliders.update([(0.0, 0.0, 0.0)], [0.7])
    solver.step(state, colliders, config)
    assert_np_equal(state.particle_q.numpy()[0], np.array([0.0, 0.7, 0.0]), tol=1e-5)
    assert_np_equal(state.particle_qd.numpy()[0], np.zeros(3), tol=1e-6)


devices = get_test_devices()
add_function_test(TestCollision, "test_ray_intersect_sphere", test_ray_intersect_sphere, devices=devices)
add_function_test(TestCollision, "test_segment_intersect_sphere", test_segment_intersect_sphere, devices=devices)
add_function_test(TestCollision, "test_sphere_collision_reflects", test_sphere_collision_reflects, devices=devices)
add_function_test(TestCollision, "test_restitution_is_clamped", test_restitution_is_clamped, devices=devices)
add_function_test(TestCollision, "test_oblique_reflection", test_oblique_reflection, devices=devices)
add_function_test(TestCollision, "test_no_collision_outside", test_no_collision_outside, devices=devices)
add_function_test(TestCollision, "test_start_inside_sphere", test_start_inside_sphere, devices=devices)
add_function_test(TestCollision, "test_resting_on_sphere", test_resting_on_sphere, devices=devices)
add_function_test(TestCollision, "test_last_collider_wins", test_last_collider_wins, devices=devices)
add_function_test(
    TestCollision, "test_restrained_ignores_colliders", test_restrained_ignores_colliders, devices=devices
)
add_function_test(TestCollision, "test_no_colliders", test_no_colliders, devices=devices)
add_function_test(TestCollision, "test_leapfrog_collision", test_leapfrog_collision, devices=devices)
add_function_test(
    TestCollision, "test_update_colliders_between_steps", test_update_colliders_between_steps, devices=devices
)


if __name__ == "__main__":
    unittest.main(verbosity=2, failfast=False)
