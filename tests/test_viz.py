# File: tests/test_viz.py
"""
Smoke tests for the drawing helpers (matplotlib without a display, plotly
figures without a browser).
"""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import plotly.graph_objects as go

from mini_fem.io import load_mesh_file
from mini_fem.kernel import assemble_system, solve
from mini_fem.loads import LoadNode
from mini_fem.model import MaterialStandard, Mesh, Node
from mini_fem.post import element_results
from mini_fem.v3d import Bar3D
from mini_fem.viz import create_mesh_figure, plot_mesh, plot_mesh_3d

MESH_DIR = Path(__file__).resolve().parent.parent / "meshes"


def make_regular_tetrahedron() -> Mesh:
    """Unit tetrahedron of Bar3D elements: base edges 0-2, legs 3-5, apex load."""
    mesh = Mesh()
    for i, angle in enumerate([0, 2 * np.pi / 3, 4 * np.pi / 3]):
        mesh.add_node(Node(i, (np.cos(angle), np.sin(angle), 0.0)))
    mesh.add_node(Node(3, (0.0, 0.0, 1.0)))
    mesh.add_material(MaterialStandard(0, E=210e9, A=0.001))
    for i in range(3):
        mesh.add_element(Bar3D(i, (i, (i + 1) % 3), 0))
    for i in range(3):
        mesh.add_element(Bar3D(3 + i, (i, 3), 0))
    mesh.add_load(LoadNode(0, 3, 1, (0.0, 0.0, -1.0e4)))
    return mesh


def test_plot_undeformed_mesh(tmp_path):
    mesh = load_mesh_file(MESH_DIR / "truss3.fem")
    outpath = tmp_path / "plots" / "truss.png"
    ax = plot_mesh(mesh, outpath=str(outpath), title="Truss")

    assert outpath.exists()
    # one line per element
    assert len(ax.lines) == len(mesh.elements)
    assert ax.get_title() == "Truss"
    plt.close(ax.figure)


def test_plot_deformed_mesh():
    mesh = load_mesh_file(MESH_DIR / "portal_frame.fem")
    d = solve(assemble_system(mesh)).d
    ax = plot_mesh(mesh, d=d, scale=100.0, show_node_ids=False)

    # undeformed and deformed line for every element
    assert len(ax.lines) == 2 * len(mesh.elements)
    assert "×100" in ax.get_title()

    # the loaded knee (node 1) moves right in the deformed drawing
    deformed = ax.lines[1].get_xydata()
    assert deformed[1, 0] > mesh.nodes[1].x
    plt.close(ax.figure)


def test_plot_into_existing_axes():
    mesh = load_mesh_file(MESH_DIR / "truss3.fem")
    fig, ax = plt.subplots()
    assert plot_mesh(mesh, ax=ax) is ax
    plt.close(fig)


def test_create_mesh_figure_3d():
    mesh = make_regular_tetrahedron().resolve()
    fig = create_mesh_figure(mesh, title="Tetrahedron")
    assert isinstance(fig, go.Figure)
    # 6 bars + the node markers
    assert len(fig.data) == 7
    assert fig.layout.title.text == "Tetrahedron"


def test_mesh_figure_colored_by_force(tmp_path):
    mesh = make_regular_tetrahedron()
    system = assemble_system(mesh)
    fixed = [dof for n in (0, 1, 2) for dof in system.dofs.node_dofs(n)]
    d = solve(system, extra_fixed=fixed).d
    table = element_results(mesh, d)
    forces = dict(zip(table["element"], table["axial_force"]))

    outpath = tmp_path / "tetra.html"
    fig = plot_mesh_3d(mesh, forces=forces, outpath=str(outpath), show_nodes=False)
    assert outpath.exists()
    assert len(fig.data) == 6
    # legs are in compression: drawn blue
    assert fig.data[3].line.color.startswith("rgb(50, 50,")
