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

"""
Solvers are used to integrate the dynamics of a cloth model.

The typical workflow is to construct a :class:`~springcloth.Model` and a
:class:`~springcloth.State` object, then use a solver to advance the state forward in time
via the :meth:`~springcloth.solvers.SolverBase.step` method:

.. code-block:: python

    solver = springcloth.solvers.SolverMassSpring(model)
    config = springcloth.solvers.MassSpringConfig.from_cell_size(cell_size)

    for _ in range(num_steps):
        state.clear_forces()
        solver.step(state, colliders, config)

Supported Integration Schemes
-----------------------------

.. list-table::
   :header-rows: 1

   * - Scheme
     - Update order
   * - :attr:`IntegrationMode.EULER`
     - position from the old velocity, then velocity
   * - :attr:`IntegrationMode.LEAPFROG`
     - velocity first, then position from the new velocity
"""

from ._src.solvers import (
    IntegrationMode,
    MassSpringConfig,
    SolverBase,
    SolverMassSpring,
    SpringFamilyConfig,
)

__all__ = [
    "IntegrationMode",
    "MassSpringConfig",
    "SolverBase",
    "SolverMassSpring",
    "SpringFamilyConfig",
]
