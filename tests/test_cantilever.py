# File: tests/test_cantilever.py
"""
Cantilever beam checks against closed-form Euler-Bernoulli results.

The fixed end is prescribed with LoadBC records, the tip load with a
LoadNode, exactly as a mesh file would describe them.
"""

import numpy as np

from mini_fem.elements import Beam2D
from mini_fem.kernel import assemble_system, solve
from mini_fem.loads import LoadBC, LoadNode, LoadUDL
from mini_fem.model import MaterialStandard, Mesh, Node

L = 3.0
E = 210e9
I = 8.0e-6
A = 0.01
P = 1000.0


def make_cantilever(num_elements: int = 1) -> Mesh:
    """Horizontal cantilever along x, fixed at node 0."""
    mesh = Mesh()
    for i in range(num_elements + 1):
        mesh.add_node(Node(i, (L * i / num_elements, 0.0)))
    mesh.add_material(MaterialStandard(0, E=E, A=A, I=I))
    for i in range(num_elements):
        mesh.add_element(Beam2D(i, (i, i + 1), 0))
    # clamp: ux, uy, rz of element 0's first node
    for dof in range(3):
        mesh.add_load(LoadBC(100 + dof, 0, dof, 0.0))
    return mesh


def test_cantilever_tip_load_deflection():
    mesh = make_cantilever()
    mesh.add_load(LoadNode(0, 0, 1, (0.0, -P, 0.0)))

    system = assemble_system(mesh)
    solution = solve(system)
    d, R = solution.d, solution.R

    uy_tip = d[system.dofs.idx(1, 1)]
    rz_tip = d[system.dofs.idx(1, 2)]

    uy_expected = -P * L**3 / (3 * E * I)
    rz_expected = -P * L**2 / (2 * E * I)

    assert np.isclose(uy_tip, uy_expected, rtol=1e-3, atol=1e-9)
    assert np.isclose(rz_tip, rz_expected, rtol=1e-3, atol=1e-9)

    # Reaction sanity: fixed-end Fy should be +P (within tolerance)
    Fy_fixed = R[1]
    assert np.isclose(Fy_fixed, +P, rtol=1e-6, atol=1e-6)


def test_cantilever_end_forces():
    """Root shear +P and root moment P·L; the free end carries no moment."""
    mesh = make_cantilever()
    mesh.add_load(LoadNode(0, 0, 1, (0.0, -P, 0.0)))
    d = solve(assemble_system(mesh)).d

    f = mesh.elements[0].end_forces(d)
    np.testing.assert_allclose(f[[1, 2]], [P, P * L], rtol=1e-6)
    np.testing.assert_allclose(f[[4, 5]], [-P, 0.0], atol=1e-6)
    assert abs(f[0]) < 1e-6


def test_cantilever_udl_tip_deflection():
    """
    Consistent nodal loads make nodal displacements exact:
    δ_tip = wL⁴ / (8EI)
    """
    w = -2000.0
    mesh = make_cantilever(num_elements=4)
    mesh.add_load(LoadUDL(0, None, (0.0, w)))
    system = assemble_system(mesh)
    d = solve(system).d

    uy_tip = d[system.dofs.idx(4, 1)]
    assert np.isclose(uy_tip, w * L**4 / (8 * E * I), rtol=1e-6)


def test_cantilever_axial_load():
    N = 5.0e5
    mesh = make_cantilever()
    mesh.add_load(LoadNode(0, 0, 1, (N, 0.0, 0.0)))
    system = assemble_system(mesh)
    d = solve(system).d

    assert np.isclose(d[system.dofs.idx(1, 0)], N * L / (E * A), rtol=1e-9)
    assert np.isclose(d[system.dofs.idx(1, 1)], 0.0, atol=1e-12)
