# leggedtraj

Building blocks for formulating trajectory optimization problems for legged
robots. The trajectory of the robot's base and of each foot is described by
cubic Hermite splines whose node values are the decision variables of a
nonlinear program. The package supplies those variables, the splines built on
them, terrain descriptions, contact schedules, single-rigid-body dynamics, and
a few constraints and costs. Constraints and costs also give their Jacobians,
so an external solver can use them.

## Installation

```
pip install .
```

The only runtime dependency is `numpy`. To run the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

| Module | Contents |
| --- | --- |
| `leggedtraj.optimization` | `Bounds`, `VariableSet`, `Composite`, `ConstraintSet`, `CostTerm`, `LinearEqualityConstraint`, `SoftConstraint`, `JumpDuration` |
| `leggedtraj.parameters` | `Parameters`, `ConstraintName`, `CostName`: problem settings, total time and the base polynomial durations |
| `leggedtraj.polynomial` | `Dx`, `State`, `make_node`, `Polynomial`, `CubicHermitePolynomial` |
| `leggedtraj.spline` | `Spline`: a piecewise cubic Hermite curve |
| `leggedtraj.nodes_variables` | `NodesVariables`, `NodesVariablesAll`, `NodeValueInfo`, `NodesObserver`, `Side` |
| `leggedtraj.nodes_variables_phase_based` | `PolyInfo`, `build_poly_infos`, `NodesVariablesPhaseBased`, `NodesVariablesEEMotion`, `NodesVariablesEEForce`: variables whose layout follows contact phases |
| `leggedtraj.phase_durations` | `PhaseDurations`, `PhaseDurationsObserver`: optimizable contact timings |
| `leggedtraj.node_spline` | `NodeSpline`, `PhaseSpline`, `SplineHolder` |
| `leggedtraj.euler_converter` | Euler ZYX helpers and `EulerConverter` for rotations, angular velocity and acceleration and their node derivatives |
| `leggedtraj.height_map` | `HeightMap`, `Direction` and the terrains `FlatGround`, `Block`, `Stairs`, `Gap`, `Slope`, `Chimney`, `ChimneyLR` |
| `leggedtraj.gaits` | `GaitGenerator` with `MonopedGaitGenerator`, `BipedGaitGenerator`, `QuadrupedGaitGenerator`, the `Gaits` and `Combos` enums, and `make_gait_generator` |
| `leggedtraj.dynamics` | `DynamicModel`, `SingleRigidBodyDynamics`, `build_inertia_tensor`, `cross_matrix` |
| `leggedtraj.constraints` | `SplineAccConstraint`, `ForceConstraint` |
| `leggedtraj.node_cost` | `NodeCost`: a quadratic cost on one node quantity |

## Examples

Build a base trajectory from node variables and evaluate it:

```python
import numpy as np

from leggedtraj.nodes_variables import NodesVariablesAll
from leggedtraj.node_spline import NodeSpline
from leggedtraj.polynomial import Dx

nodes = NodesVariablesAll(3, 3, "base-lin")
nodes.set_by_linear_interpolation(np.zeros(3), np.array([1.0, 0.0, 0.5]), 1.0)

spline = NodeSpline(nodes, [0.5, 0.5])
state = spline.point(0.25)
print(state.p(), state.v(), state.a())

# Sensitivity of the position at t=0.25 with respect to every node variable.
jac = spline.jacobian_wrt_nodes(0.25, Dx.POS)
```

The spline observes its nodes: after `nodes.set_variables(x)` it is updated
automatically.

Costs and constraints that look variables up by name are linked to a
`Composite` of variable sets:

```python
from leggedtraj.node_cost import NodeCost
from leggedtraj.optimization import Composite

variables = Composite("variables")
variables.add(nodes)

cost = NodeCost("base-lin", Dx.VEL, 0, 1.0)
cost.link_variables(variables)
print(cost.cost(), cost.jacobian())
```

Contact schedules come from the gait generators:

```python
from leggedtraj.gaits import Combos, make_gait_generator

gen = make_gait_generator(2)
gen.set_combo(Combos.C0)
durations = gen.phase_durations(2.0, 0)
starts_in_contact = gen.is_in_contact_at_start(0)
```

Terrain queries return heights, slopes and the normal and tangent vectors
that the force constraint uses:

```python
from leggedtraj.height_map import Direction, Gap

terrain = Gap()
print(terrain.height(1.2, 0.0))
print(terrain.normalized_basis(Direction.NORMAL, 1.2, 0.0))
```

## Conventions

- Values and Jacobians are dense `numpy` arrays.
- Positions, velocities and forces are 3-vectors ordered x, y, z. Euler
  angles follow the ZYX convention and are stored as (x, y, z).
- Spline time queries must be non-negative and within the spline's duration;
  queries outside that range raise `ValueError`.
- Invalid requests (an unknown gait or combo, a leg count other than 1, 2
  or 4, inconsistent phase durations) raise `ValueError`.

## What it does not do

- It contains no solver. It provides variables, bounds, values and Jacobians;
  handing them to a nonlinear programming solver is up to the user.
- It does not assemble a complete problem from `Parameters`: the
  `ConstraintName` and `CostName` values are settings only, and the package
  has just the constraints and costs listed above.
- It ships no robot descriptions. `SingleRigidBodyDynamics` takes mass,
  inertia and endeffector count from the caller.
- It has no command-line interface.