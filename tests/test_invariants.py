# File: tests/test_invariants.py
"""
Physical invariants every assembled system must satisfy.

- K is symmetric (Maxwell's reciprocal theorem)
- reactions balance applied loads: ΣR + ΣF = 0 per direction
- moments balance about any point
"""

import numpy as np
import pytest

from mini_fem.elements import Bar2D, Beam2D
from mini_fem.kernel import assemble_system, solve
from mini_fem.loads import LoadBC, LoadGravConst, LoadNode
from mini_fem.model import MaterialStandard, Mesh, Node


def make_loaded_cantilever(P: float = 1000.0, L: float = 3.0) -> Mesh:
    mesh = Mesh()
    mesh.add_node(Node(0, (0.0, 0.0)))
    mesh.add_node(Node(1, (L, 0.0)))
    mesh.add_material(MaterialStandard(0, E=210e9, A=0.01, I=8.0e-6))
    mesh.add_element(Beam2D(0, (0, 1), 0))
    mesh.add_load(LoadNode(0, 0, 1, (0.0, -P, 0.0)))
    for dof in range(3):
        mesh.add_load(LoadBC(1 + dof, 0, dof, 0.0))
    return mesh


def make_warren_truss(n_panels: int = 4, panel: float = 2.0, height: float = 1.5) -> Mesh:
    """
    Bottom chord nodes 0..n, top chord nodes between them, diagonals
    zig-zagging between the chords. Pinned at node 0, roller at node n.
    """
    mesh = Mesh()
    for i in range(n_panels + 1):
        mesh.add_node(Node(i, (i * panel, 0.0)))
    top = {}
    for i in range(n_panels):
        top[i] = 100 + i
        mesh.add_node(Node(top[i], ((i + 0.5) * panel, height)))
    mesh.add_material(MaterialStandard(0, E=200e9, A=0.002, rho=7850.0))

    eid = 0
    for i in range(n_panels):
        for ni, nj in ((i, i + 1), (i, top[i]), (top[i], i + 1)):
            mesh.add_element(Bar2D(eid, (ni, nj), 0))
            eid += 1
    for i in range(n_panels - 1):
        mesh.add_element(Bar2D(eid, (top[i], top[i + 1]), 0))
        eid += 1

    # element 0 starts at node 0, the last bottom chord ends at node n
    last_chord = 3 * (n_panels - 1)
    mesh.add_load(LoadBC(0, 0, 0, 0.0))
    mesh.add_load(LoadBC(1, 0, 1, 0.0))
    mesh.add_load(LoadBC(2, last_chord, 3, 0.0))
    return mesh


def test_stiffness_matrix_symmetry():
    """
    K[i,j] = K[j,i]: pushing at A and measuring at B equals pushing at B
    and measuring at A.
    """
    for mesh in (make_loaded_cantilever(), make_warren_truss()):
        K = assemble_system(mesh).K
        np.testing.assert_allclose(K, K.T, rtol=1e-10, atol=1e-6,
                                   err_msg="Stiffness matrix is not symmetric!")


def test_equilibrium_vertical_forces():
    mesh = make_loaded_cantilever()
    system = assemble_system(mesh)
    solution = solve(system)

    uy = [system.dofs.idx(n, 1) for n in mesh.nodes]
    sum_applied_vertical = system.F[uy].sum()
    sum_reactions_vertical = solution.R[uy].sum()

    equilibrium_error = sum_reactions_vertical + sum_applied_vertical
    assert np.isclose(equilibrium_error, 0.0, rtol=1e-6, atol=1e-9), \
        f"Vertical force equilibrium violated: ΣR_y + ΣF = {equilibrium_error:.2e}"


def test_equilibrium_moments():
    """ΣM about the origin: direct moments plus x·Fy − y·Fx of every nodal force."""
    mesh = make_loaded_cantilever()
    system = assemble_system(mesh)
    solution = solve(system)
    total = system.F + solution.R

    moment = 0.0
    for node_id, node in mesh.nodes.items():
        fx = total[system.dofs.idx(node_id, 0)]
        fy = total[system.dofs.idx(node_id, 1)]
        moment += total[system.dofs.idx(node_id, 2)] + node.x * fy - node.y * fx

    assert np.isclose(moment, 0.0, atol=1e-6), f"Moment equilibrium violated: ΣM = {moment:.2e}"


def test_truss_gravity_equilibrium():
    """Self-weight of every bar ends up in the two support reactions."""
    mesh = make_warren_truss()
    mesh.add_load(LoadGravConst(10, None, (0.0, -9.81)))
    system = assemble_system(mesh)
    solution = solve(system)

    total_weight = sum(
        e.length() * e.material["A"] * e.material["rho"] * 9.81 for e in mesh.elements.values()
    )
    assert system.F.sum() == pytest.approx(-total_weight)

    Ry = solution.R[system.dofs.idx(0, 1)] + solution.R[system.dofs.idx(4, 1)]
    assert Ry == pytest.approx(total_weight, rel=1e-8)
    # symmetric truss, symmetric load
    assert solution.R[system.dofs.idx(0, 1)] == pytest.approx(total_weight / 2, rel=1e-6)


def test_reactions_vanish_at_free_dofs():
    mesh = make_warren_truss()
    mesh.add_load(LoadNode(10, 0, 1, (0.0, -5.0e4)))
    solution = solve(assemble_system(mesh))
    scale = np.abs(solution.R).max()
    np.testing.assert_allclose(solution.R[solution.free], 0.0, atol=1e-9 * scale)
