# element forces and nodal displacements from a solved displacement vector

import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd

from .elements import Beam2D, LineElement
from .loads import LoadGravConst, LoadUDL

logger = logging.getLogger(__name__)


def _dof_labels(node) -> list:
    n = len(node.dofs)
    if n == 3 and node.ndim == 2:
        return ["ux", "uy", "rz"]
    return ["ux", "uy", "uz"][:n]


def nodal_displacements(mesh, d: np.ndarray) -> Dict[int, Dict[str, float]]:
    """
    Extract nodal displacements from the global displacement vector.

    Returns
    -------
    Dict[int, Dict[str, float]]
        node id -> {'ux', 'uy', ['uz' | 'rz'], 'magnitude'}; magnitude is the
        length of the translation part only.
    """
    result = {}
    for node_id, node in mesh.nodes.items():
        values = {label: float(d[dof]) for label, dof in zip(_dof_labels(node), node.dofs)}
        translation = [v for k, v in values.items() if k != "rz"]
        values["magnitude"] = float(np.linalg.norm(translation)) if translation else 0.0
        result[node_id] = values
    return result


def distributed_load_on(mesh, element) -> Optional[np.ndarray]:
    """Sum of uniform loads per unit length (global) acting on element, or None."""
    q = None
    for load in mesh.loads.values():
        if not isinstance(load, (LoadUDL, LoadGravConst)) or not load.targets(element):
            continue
        if isinstance(load, LoadUDL):
            part = load.q
        else:
            part = element.material["rho"] * element.material["A"] * load.g
        q = part.copy() if q is None else q + part
    return q


def element_results(mesh, d: np.ndarray) -> pd.DataFrame:
    """
    One row per element with its internal forces.

    Columns:
    - element, type, length
    - axial_force (positive = tension), axial_stress
    - moment_i, moment_j (Beam2D only, NaN otherwise)
    """
    rows = []
    for element in mesh.elements.values():
        row = {
            "element": element.id,
            "type": element.TAG,
            "length": np.nan,
            "axial_force": np.nan,
            "axial_stress": np.nan,
            "moment_i": np.nan,
            "moment_j": np.nan,
        }
        if isinstance(element, Beam2D):
            q = distributed_load_on(mesh, element)
            f = element.end_forces(d, q)
            # end forces are [Ni, Vi, Mi, Nj, Vj, Mj]; tension pulls j along +x
            row["axial_force"] = float(f[3])
            row["axial_stress"] = float(f[3]) / element.material["A"]
            row["moment_i"] = float(f[2])
            row["moment_j"] = float(f[5])
            row["length"] = element.length()
        elif isinstance(element, LineElement):
            row["axial_force"] = element.axial_force(d)
            row["axial_stress"] = element.axial_stress(d)
            row["length"] = element.length()
        rows.append(row)

    return pd.DataFrame(rows, columns=[
        "element", "type", "length", "axial_force", "axial_stress", "moment_i", "moment_j",
    ])
