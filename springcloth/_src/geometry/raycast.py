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

import warp as wp

EPSILON = 1e-6


@wp.struct
class GeomHit:
    hit: wp.bool
    distance: wp.float32
    normal: wp.vec3f


@wp.func
def ray_intersect_sphere(
    ray_origin: wp.vec3f, ray_direction: wp.vec3f, center: wp.vec3f, radius: wp.float32
) -> wp.float32:
    """Returns the distance at which a ray enters a sphere, or -1 if it does not.

    Args:
            ray_origin: starting point of ray in world coordinates
            ray_direction: unit direction of ray in world coordinates
            center: center of the sphere
            radius: radius of the sphere

    Returns:
            Distance along the ray to the entry point. Rays starting inside the sphere
            or pointing away from it return -1.
    """
    oc = ray_origin - center
    c = wp.dot(oc, oc) - radius * radius

    # origin inside the sphere: no entry point
    if c < 0.0:
        return -1.0

    b = wp.dot(oc, ray_direction)
    disc = b * b - c
    if disc < 0.0:
        return -1.0

    t_hit = -b - wp.sqrt(disc)
    if t_hit < 0.0:
        return -1.0
    return t_hit


@wp.func
def segment_intersect_sphere_with_normal(
    start: wp.vec3f, end: wp.vec3f, center: wp.vec3f, radius: wp.float32
) -> GeomHit:
    """Returns where the segment ``start -> end`` enters a sphere, with the outward normal at the entry point.

    A segment starting inside the sphere hits at distance 0 with the normal pointing from
    the center towards ``start``, whatever its length.
    """
    geom_hit = GeomHit()
    geom_hit.hit = False
    geom_hit.distance = -1.0

    offset = start - center
    if wp.dot(offset, offset) < radius * radius:
        offset_length = wp.length(offset)
        geom_hit.hit = True
        geom_hit.distance = 0.0
        if offset_length > EPSILON:
            geom_hit.normal = offset / offset_length
        else:
            # start at the center: push out along +y
            geom_hit.normal = wp.vec3f(0.0, 1.0, 0.0)
        return geom_hit

    delta = end - start
    length = wp.length(delta)
    if length < EPSILON:
        return geom_hit

    direction = delta / length
    t_hit = ray_intersect_sphere(start, direction, center, radius)
    if t_hit >= 0.0 and t_hit <= length:
        geom_hit.hit = True
        geom_hit.distance = t_hit
        geom_hit.normal = wp.normalize(start + t_hit * direction - center)
    return geom_hit
