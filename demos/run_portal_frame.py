# File: demos/run_portal_frame.py
"""
DEMO: PORTAL FRAME (GRAVITY + LATERAL LOADS)
============================================

PURPOSE:
--------
Build a portal frame in code, save it as a mesh file, read it back and
solve it: the full round trip a user of mini_fem goes through.

    mesh (Python) -> meshes/ text file -> read_mesh -> assemble -> solve

PHYSICAL PROBLEM:
-----------------
Two columns and a beam, pinned at both bases:
- Gravity: UDL w on the beam
- Lateral: point load P at the top of the left column

Drift is typically limited to H/400 or H/500 by building codes.
"""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import numpy as np

from mini_fem import (
    Beam2D, LoadBC, LoadNode, LoadUDL, MaterialStandard, Mesh, Node,
    assemble_system, load_mesh_file, save_mesh_file, solve,
)
from mini_fem.logging_config import setup_logging
from mini_fem.post import element_results
from mini_fem.viz import plot_mesh

OUTPUT_DIR = Path(__file__).resolve().parent / "output"


def build_portal(L: float, H: float, w: float, P: float) -> Mesh:
    """Nodes 0-3 anticlockwise from the left base; elements column, beam, column."""
    mesh = Mesh()
    for i, xy in enumerate([(0.0, 0.0), (0.0, H), (L, H), (L, 0.0)]):
        mesh.add_node(Node(i, xy))
    mesh.add_material(MaterialStandard(0, E=210e9, A=0.01, I=8.0e-6))

    mesh.add_element(Beam2D(0, (0, 1), 0))   # left column, up
    mesh.add_element(Beam2D(1, (1, 2), 0))   # beam, right
    mesh.add_element(Beam2D(2, (2, 3), 0))   # right column, down

    mesh.add_load(LoadUDL(0, [1], (0.0, w)))
    mesh.add_load(LoadNode(1, 0, 1, (P, 0.0, 0.0)))
    # pinned bases: ux, uy of node 0 (element 0, local 0/1) and node 3 (element 2, local 3/4)
    for gn, (element_id, dof) in enumerate([(0, 0), (0, 1), (2, 3), (2, 4)], start=2):
        mesh.add_load(LoadBC(gn, element_id, dof, 0.0))
    return mesh


def main():
    setup_logging("INFO")

    print("=" * 70)
    print("DEMO: PORTAL FRAME (GRAVITY + LATERAL LOADS)")
    print("=" * 70)

    L, H = 6.0, 3.0
    w, P = -2000.0, 5000.0

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    mesh_file = OUTPUT_DIR / "portal_frame_pinned.fem"
    save_mesh_file(build_portal(L, H, w, P), mesh_file)
    print(f"Mesh written to: {mesh_file}")

    mesh = load_mesh_file(mesh_file)
    system = assemble_system(mesh)
    solution = solve(system)
    d, R = solution.d, solution.R

    drift = d[system.dofs.idx(1, 0)]
    print()
    print("RESULTS")
    print("-" * 70)
    print(f"Drift at left knee: {drift * 1000:.3f} mm (H/{H / abs(drift):.0f})")

    Rx = R[system.dofs.idx(0, 0)] + R[system.dofs.idx(3, 0)]
    Ry = R[system.dofs.idx(0, 1)] + R[system.dofs.idx(3, 1)]
    print(f"ΣRx = {Rx:.2f} N (applied {P:.2f} N)")
    print(f"ΣRy = {Ry:.2f} N (applied {abs(w) * L:.2f} N)")

    table = element_results(mesh, d)
    print()
    print(table.to_string(index=False))

    outpath = OUTPUT_DIR / "portal_frame.png"
    plot_mesh(mesh, d=d, scale=float(np.round(0.1 * H / abs(drift))), outpath=str(outpath),
              title="Portal frame")
    print(f"\nPlot saved to: {outpath}")


if __name__ == "__main__":
    main()
