# File: tests/test_simply_supported.py
"""
Simply supported beams: point load at midspan and uniform load.

Supports are pinned at the left end (ux, uy) and on a roller at the right
(uy only). Both cases are compared to textbook formulas:

    point load:  δ_mid = PL³/(48EI),   R = P/2
    uniform:     δ_mid = 5wL⁴/(384EI), R = wL/2
"""

import numpy as np
import pytest

from mini_fem.elements import Beam2D
from mini_fem.kernel import assemble_system, solve
from mini_fem.loads import LoadBC, LoadNode, LoadUDL
from mini_fem.model import MaterialStandard, Mesh, Node

L = 4.0
E = 210e9
I = 8.0e-6
A = 0.01


def make_simply_supported(num_elements: int) -> Mesh:
    mesh = Mesh()
    for i in range(num_elements + 1):
        mesh.add_node(Node(i, (L * i / num_elements, 0.0)))
    mesh.add_material(MaterialStandard(0, E=E, A=A, I=I))
    for i in range(num_elements):
        mesh.add_element(Beam2D(i, (i, i + 1), 0))

    last = num_elements - 1
    mesh.add_load(LoadBC(100, 0, 0, 0.0))      # left ux
    mesh.add_load(LoadBC(101, 0, 1, 0.0))      # left uy
    mesh.add_load(LoadBC(102, last, 4, 0.0))   # right uy
    return mesh


def test_simply_supported_midspan_pointload():
    P = 1000.0
    mesh = make_simply_supported(num_elements=2)
    mesh.add_load(LoadNode(0, 0, 1, (0.0, -P, 0.0)))

    system = assemble_system(mesh)
    solution = solve(system)
    d, R = solution.d, solution.R

    uy_mid = d[system.dofs.idx(1, 1)]
    assert np.isclose(uy_mid, -P * L**3 / (48 * E * I), rtol=1e-6)

    Ry_left = R[system.dofs.idx(0, 1)]
    Ry_right = R[system.dofs.idx(2, 1)]
    assert Ry_left == pytest.approx(P / 2)
    assert Ry_right == pytest.approx(P / 2)

    # symmetric: end rotations equal and opposite
    assert d[system.dofs.idx(0, 2)] == pytest.approx(-d[system.dofs.idx(2, 2)])


@pytest.mark.parametrize("num_elements", [2, 4, 10])
def test_simply_supported_udl_deflection(num_elements):
    w = -1000.0
    mesh = make_simply_supported(num_elements)
    mesh.add_load(LoadUDL(0, None, (0.0, w)))

    system = assemble_system(mesh)
    solution = solve(system)

    mid = num_elements // 2
    uy_mid = solution.d[system.dofs.idx(mid, 1)]
    delta_max_theory = 5 * w * L**4 / (384 * E * I)
    assert np.isclose(uy_mid, delta_max_theory, rtol=1e-6), \
        f"Midspan deflection {uy_mid:.6f} m != expected {delta_max_theory:.6f} m"

    R_theory = -w * L / 2
    assert solution.R[system.dofs.idx(0, 1)] == pytest.approx(R_theory)
    assert solution.R[system.dofs.idx(num_elements, 1)] == pytest.approx(R_theory)
