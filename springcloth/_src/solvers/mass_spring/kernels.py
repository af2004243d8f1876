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

"""Kernels of the three mass-spring stages: spring forces, drag forces and integration."""

import warp as wp

from ...geometry.raycast import segment_intersect_sphere_with_normal
from ...sim.grid import grid_is_valid, grid_to_1d, grid_to_2d
from .config import MassSpringParams, SpringFamilyParams

SPRING_EPSILON = 1.0e-5
DRAG_EPSILON = 1.0e-6

SPRING_FAMILY_PARALLEL = wp.constant(0)
SPRING_FAMILY_DIAGONAL = wp.constant(1)
SPRING_FAMILY_BENDING = wp.constant(2)

INTEGRATION_LEAPFROG = wp.constant(1)


###
# Springs
###


@wp.func
def spring_offset(family: int, k: int) -> wp.vec2i:
    """Returns the ``k``-th of the four grid offsets ``(dcol, drow)`` of a spring family."""
    if family == SPRING_FAMILY_PARALLEL:
        if k == 0:
            return wp.vec2i(1, 0)
        if k == 1:
            return wp.vec2i(-1, 0)
        if k == 2:
            return wp.vec2i(0, 1)
        return wp.vec2i(0, -1)

    # diagonal and bending springs share the (+-s, +-s) pattern
    s = 1
    if family == SPRING_FAMILY_BENDING:
        s = 2
    dcol = s
    if k % 2 == 1:
        dcol = -s
    drow = s
    if k >= 2:
        drow = -s
    return wp.vec2i(dcol, drow)


@wp.func
def spring_force(
    pos_a: wp.vec3,
    vel_a: wp.vec3,
    pos_b: wp.vec3,
    vel_b: wp.vec3,
    rest_length: float,
    stiffness: float,
    damping: float,
) -> wp.vec3:
    """Returns the damped spring force acting on particle ``a`` from its neighbor ``b``.

    The spring axis ``d = normalize(pos_a - pos_b)`` points from ``b`` to ``a``, and the force is
    ``(-stiffness * (|pos_a - pos_b| - rest_length) - damping * dot(vel_a - vel_b, d)) * d``.
    A stretched spring pulls ``a`` towards ``b`` and the damping term opposes the relative velocity
    along the axis, so the force on ``b`` is exactly the negation. Coincident particles exert no force.
    """
    delta = pos_a - pos_b
    dist = wp.length(delta)
    if dist < SPRING_EPSILON:
        return wp.vec3(0.0, 0.0, 0.0)

    direction = delta / dist
    stretch = dist - rest_length
    f_spring = -stiffness * stretch
    f_damp = -damping * (wp.dot(vel_a, direction) - wp.dot(vel_b, direction))
    return (f_spring + f_damp) * direction


@wp.func
def spring_family_force(
    i: int,
    dim: int,
    family: int,
    spring: SpringFamilyParams,
    particle_q: wp.array(dtype=wp.vec3),
    particle_qd: wp.array(dtype=wp.vec3),
) -> wp.vec3:
    """Returns the summed force of one spring family on particle ``i``, scaled by the clamped family influence."""
    coord = grid_to_2d(i, dim)
    x = particle_q[i]
    v = particle_qd[i]

    f = wp.vec3(0.0, 0.0, 0.0)
    for k in range(4):
        neighbor = coord + spring_offset(family, k)
        if grid_is_valid(neighbor, dim):
            j = grid_to_1d(neighbor, dim)
            f += spring_force(
                x, v, particle_q[j], particle_qd[j], spring.rest_length, spring.stiffness, spring.damping
            )

    return f * wp.clamp(spring.influence, 0.0, 1.0)


@wp.kernel
def eval_spring_forces_kernel(
    dim: int,
    particle_q: wp.array(dtype=wp.vec3),
    particle_qd: wp.array(dtype=wp.vec3),
    params: MassSpringParams,
    # outputs
    particle_f: wp.array(dtype=wp.vec3),
):
    i = wp.tid()

    f = spring_family_force(i, dim, SPRING_FAMILY_PARALLEL, params.parallel, particle_q, particle_qd)
    f += spring_family_force(i, dim, SPRING_FAMILY_DIAGONAL, params.diagonal, particle_q, particle_qd)
    f += spring_family_force(i, dim, SPRING_FAMILY_BENDING, params.bending, particle_q, particle_qd)

    # every thread owns the accumulator of its own particle
    particle_f[i] = particle_f[i] + f


###
# Drag
###


@wp.func
def triangle_drag_force(
    x0: wp.vec3,
    x1: wp.vec3,
    x2: wp.vec3,
    v0: wp.vec3,
    v1: wp.vec3,
    v2: wp.vec3,
    wind: wp.vec3,
    drag_coefficient: float,
    air_density: float,
) -> wp.vec3:
    """Returns the total quadratic drag force on a triangle moving through air."""
    v_rel = (v0 + v1 + v2) / 3.0 - wind

    c = wp.cross(x1 - x0, x2 - x0)
    area = 0.5 * wp.length(c)
    normal = wp.normalize(c)

    speed = wp.length(v_rel)
    projected_area = area * wp.dot(v_rel, normal)
    # at rest the projected area is left unnormalized
    if speed >= DRAG_EPSILON:
        projected_area = projected_area / speed

    return -0.5 * air_density * speed * speed * drag_coefficient * projected_area * normal


@wp.kernel
def eval_drag_forces_kernel(
    tri_indices: wp.array2d(dtype=wp.int32),
    particle_q: wp.array(dtype=wp.vec3),
    particle_qd: wp.array(dtype=wp.vec3),
    params: MassSpringParams,
    # outputs
    particle_f: wp.array(dtype=wp.vec3),
):
    t = wp.tid()

    i = tri_indices[t, 0]
    j = tri_indices[t, 1]
    k = tri_indices[t, 2]

    f = triangle_drag_force(
        particle_q[i],
        particle_q[j],
        particle_q[k],
        particle_qd[i],
        particle_qd[j],
        particle_qd[k],
        params.wind,
        params.drag_coefficient,
        params.air_density,
    )
    f = f * (wp.clamp(params.wind_influence, 0.0, 1.0) / 3.0)

    # triangles share particles, accumulate atomically
    wp.atomic_add(particle_f, i, f)
    wp.atomic_add(particle_f, j, f)
    wp.atomic_add(particle_f, k, f)


###
# Integration
###


@wp.func
def reflect_velocity(v: wp.vec3, normal: wp.vec3, cor: float) -> wp.vec3:
    """Reflects ``v`` about the plane with unit ``normal`` and scales it by the clamped restitution."""
    return (v - 2.0 * wp.dot(v, normal) * normal) * wp.clamp(cor, 0.0, 1.0)


@wp.func
def resolve_sphere_collisions(
    x_start: wp.vec3,
    x_end: wp.vec3,
    v: wp.vec3,
    sphere_center: wp.array(dtype=wp.vec3),
    sphere_radius: wp.array(dtype=wp.float32),
    collision_offset: float,
    cor: float,
):
    """Resolves the motion segment ``x_start -> x_end`` against all spheres in order.

    A hit places the particle on the inflated sphere surface. Every sphere is tested
    against the unresolved segment; a later hit overrides the position and velocity
    produced by an earlier one. A particle that starts inside a sphere is pushed back
    onto its surface, and its velocity is reflected only if it still points inwards.
    """
    x = x_end
    v_out = v
    for s in range(sphere_center.shape[0]):
        center = sphere_center[s]
        radius = sphere_radius[s] + collision_offset
        hit = segment_intersect_sphere_with_normal(x_start, x_end, center, radius)
        if hit.hit:
            x = center + hit.normal * radius
            if hit.distance > 0.0 or wp.dot(v, hit.normal) < 0.0:
                v_out = reflect_velocity(v, hit.normal, cor)
            else:
                v_out = v
    return x, v_out


@wp.kernel
def integrate_particles_kernel(
    particle_restrained: wp.array(dtype=wp.int32),
    particle_f: wp.array(dtype=wp.vec3),
    sphere_center: wp.array(dtype=wp.vec3),
    sphere_radius: wp.array(dtype=wp.float32),
    params: MassSpringParams,
    # outputs
    particle_q: wp.array(dtype=wp.vec3),
    particle_qd: wp.array(dtype=wp.vec3),
):
    i = wp.tid()
    if particle_restrained[i] != 0:
        return

    dt = params.dt
    x0 = particle_q[i]
    v = particle_qd[i]
    a = params.gravity + particle_f[i] / params.mass

    x1 = x0
    if params.integration_mode == INTEGRATION_LEAPFROG:
        v = v + a * dt
        x1 = x0 + v * dt
    else:
        x1 = x0 + v * dt
        v = v + a * dt

    x, v_out = resolve_sphere_collisions(
        x0, x1, v, sphere_center, sphere_radius, params.collision_offset, params.cor
    )

    particle_q[i] = x
    particle_qd[i] = v_out
