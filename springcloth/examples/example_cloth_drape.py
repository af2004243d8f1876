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

###########################################################################
# Cloth Drape
#
# A square cloth pinned along one edge falls under gravity, blows in the
# wind and drapes over a sphere.
# Command: python -m springcloth.examples.example_cloth_drape
#
###########################################################################

import numpy as np
import warp as wp

import springcloth
import springcloth.examples
from springcloth.solvers import IntegrationMode, MassSpringConfig, SolverMassSpring
from springcloth.utils import msg


class Example:
    def __init__(
        self,
        dim: int = 32,
        cell_size: float = 0.05,
        fps: int = 60,
        substeps: int = 10,
        scheme: str = "leapfrog",
        wind: tuple[float, float, float] = (0.0, 0.0, 0.0),
        verbose: bool = False,
    ):
        self.fps = fps
        self.frame_dt = 1.0 / fps
        self.sim_substeps = substeps
        self.sim_dt = self.frame_dt / substeps
        self.sim_time = 0.0

        builder = springcloth.ClothBuilder()
        builder.add_cloth_grid(
            dim=dim,
            cell_size=cell_size,
            pos=(-0.5 * cell_size * (dim - 1), 1.0, -0.5 * cell_size * (dim - 1)),
            fix_top=True,
        )
        self.model = builder.finalize()
        self.state = self.model.state()

        extent = cell_size * (dim - 1)
        self.colliders = springcloth.Colliders.from_spheres(
            [springcloth.SphereCollider(center=(0.0, 0.4, 0.25 * extent), radius=0.25 * extent)]
        )

        self.config = MassSpringConfig.from_cell_size(
            cell_size,
            mass=0.01,
            dt=self.sim_dt,
            integration_mode=IntegrationMode.LEAPFROG if scheme == "leapfrog" else IntegrationMode.EULER,
            wind=wind,
            cor=0.2,
            collision_offset=0.5 * cell_size,
            stiffness=(400.0, 400.0, 40.0),
            damping=(0.1, 0.1, 0.01),
        )
        self.params = self.config.to_struct()

        self.solver = SolverMassSpring(self.model, verbose=verbose)

        msg.notif(
            f"Cloth drape: {self.model.particle_count} particles, {self.model.tri_count} triangles, "
            f"{self.colliders.count} sphere(s), dt={self.sim_dt:.5f}, scheme={scheme}"
        )

    def simulate(self):
        for _ in range(self.sim_substeps):
            self.state.clear_forces()
            self.solver.step(self.state, self.colliders, self.params)

    def step(self):
        self.simulate()
        self.sim_time += self.frame_dt

    def positions(self) -> np.ndarray:
        return self.state.particle_q.numpy()

    def test_final(self):
        q = self.positions()
        if not np.all(np.isfinite(q)):
            raise RuntimeError("Cloth state contains non-finite positions")

        restrained = self.model.restrained_indices()
        initial = self.model.particle_q.numpy()
        if not np.allclose(q[restrained], initial[restrained]):
            raise RuntimeError("Restrained particles have moved")

        # every particle must stay on or outside the inflated sphere
        for sphere in self.colliders.spheres():
            radius = sphere.radius + self.config.collision_offset
            dist = np.linalg.norm(q - np.asarray(sphere.center), axis=1)
            if dist.min() < radius - 1.0e-3:
                raise RuntimeError(
                    f"Particles penetrated the sphere: min distance {dist.min():.4f}, collision radius {radius:.4f}"
                )


if __name__ == "__main__":
    parser = springcloth.examples.create_parser()
    parser.add_argument("--dim", type=int, default=32, help="Number of particles along each side of the cloth.")
    parser.add_argument("--cell-size", type=float, default=0.05, help="Rest distance between adjacent particles.")
    parser.add_argument("--substeps", type=int, default=10, help="Simulation substeps per frame.")
    parser.add_argument(
        "--scheme", type=str, choices=["euler", "leapfrog"], default="leapfrog", help="Time integration scheme."
    )
    parser.add_argument(
        "--wind", type=float, nargs=3, default=(0.0, 0.0, 0.0), metavar=("X", "Y", "Z"), help="Wind velocity."
    )

    args = springcloth.examples.init(parser)

    with wp.ScopedDevice(args.device):
        example = Example(
            dim=args.dim,
            cell_size=args.cell_size,
            fps=args.fps,
            substeps=args.substeps,
            scheme=args.scheme,
            wind=tuple(args.wind),
            verbose=args.verbose,
        )
        springcloth.examples.run(example, args)
