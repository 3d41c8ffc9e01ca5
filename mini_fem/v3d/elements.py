# mini_fem/v3d/elements.py
"""
3D BAR ELEMENT: Stiffness Matrix from Direction Cosines
=======================================================

ENGINEERING DERIVATION:
-----------------------
A 3D bar has stiffness only along its axis. In LOCAL coordinates
(x' along the bar), the stiffness matrix is simple:

    k_local = (EA/L) × [ 1  -1 ]
                       [-1   1 ]

Direction cosines take it to GLOBAL coordinates (x, y, z):

    l = (xj - xi) / L
    m = (yj - yi) / L
    n = (zj - zi) / L

and the 6×6 global stiffness matrix becomes

    ke_global = (EA/L) × [  B  -B ]
                         [ -B   B ]

where B is the 3×3 outer product of [l, m, n] with itself. This is
ke_global = Tᵀ × k_local × T written out.

The matrix is symmetric, positive semi-definite and has rank 1 (the only
deformation mode is axial extension/compression).
"""

import numpy as np

from ..elements import LineElement


def bar3d_stiffness(E: float, A: float, L: float, l: float, m: float, n: float) -> np.ndarray:
    """
    Compute the 6×6 global stiffness matrix of a 3D bar.

    DOF order: [ux_i, uy_i, uz_i, ux_j, uy_j, uz_j]
    """
    EA_L = E * A / L

    # B[i,j] = direction_cosine[i] × direction_cosine[j]
    B = np.array([
        [l*l, l*m, l*n],
        [m*l, m*m, m*n],
        [n*l, n*m, n*n],
    ], dtype=float)

    ke = np.zeros((6, 6), dtype=float)
    ke[0:3, 0:3] = B
    ke[0:3, 3:6] = -B
    ke[3:6, 0:3] = -B
    ke[3:6, 3:6] = B

    ke *= EA_L
    return ke


class Bar3D(LineElement):
    """
    A 3D bar (truss) element connecting two nodes.

    - Carries only axial force (tension/compression)
    - Has no bending or torsional stiffness
    - 3 DOFs per node: ux, uy, uz
    - Uses material properties E and A

    Example:
    --------
    >>> bar = Bar3D(id=0, node_ids=(0, 1), material_id=0)
    """
    TAG = "Bar3D"
    NNODES = 2
    DOFS_PER_NODE = 3
    NDIM = 3

    def ke(self) -> np.ndarray:
        L, (l, m, n) = self.geometry()
        return bar3d_stiffness(self.material["E"], self.material["A"], L, l, m, n)
