# mini_fem/kernel/assemble.py
"""
ASSEMBLY: Global Matrix Assembly
================================

PURPOSE:
--------
This module assembles element contributions into the global system.
This is the scatter-add operation that builds K and F from element-level data.

The key insight: assembly doesn't care about element TYPE.
It just needs:
- Total number of DOFs
- For each element: its DOF map and its stiffness matrix

Whether the element is a Bar2D (4×4 ke), a Beam2D (6×6 ke) or a Bar3D
(6×6 ke), the assembly logic is identical.

USAGE:
------
    system = assemble_system(mesh)
    system.K, system.F, system.fixed

or, for hand-built contributions:

    K = assemble_global_K(ndof, [(dof_map, ke), ...])
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import scipy.sparse

from ..config import CONFIG
from ..loads import LoadBC
from .dof import DOFManager, number_dofs

logger = logging.getLogger(__name__)


def _check_contribution(n_element_dofs: int, shape: tuple, expected: tuple, kind: str) -> None:
    if shape != expected:
        raise ValueError(
            f"Element {kind} shape {shape} doesn't match dof_map length {n_element_dofs}"
        )


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble global stiffness matrix from element contributions.

    ALGORITHM:
    ----------
    K = zeros(ndof × ndof)
    for each element:
        for each (local_i, local_j) in element ke:
            global_i = dof_map[local_i]
            global_j = dof_map[local_j]
            K[global_i, global_j] += ke[local_i, local_j]

    Entries are accumulated, never overwritten: elements sharing a node
    add into the same global block.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system

    contributions : List[Tuple[List[int], np.ndarray]]
        List of (dof_map, ke) tuples, one per element

    Returns:
    --------
    np.ndarray
        Global stiffness matrix K, shape (ndof, ndof)
        Symmetric positive semi-definite (becomes PD after BCs applied)
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        n_element_dofs = len(dof_map)
        _check_contribution(n_element_dofs, ke.shape, (n_element_dofs, n_element_dofs), "ke")

        for a in range(n_element_dofs):
            ia = dof_map[a]
            for b in range(n_element_dofs):
                ib = dof_map[b]
                K[ia, ib] += ke[a, b]

    return K


def assemble_global_K_sparse(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> scipy.sparse.csr_matrix:
    """
    Same as assemble_global_K but returns a scipy CSR matrix.

    Triplets are collected in COO form; duplicate (row, col) pairs are
    summed on conversion, which is exactly the scatter-add.
    """
    rows, cols, data = [], [], []
    for dof_map, ke in contributions:
        n_element_dofs = len(dof_map)
        _check_contribution(n_element_dofs, ke.shape, (n_element_dofs, n_element_dofs), "ke")
        idx = np.asarray(dof_map, dtype=np.int64)
        rows.append(np.repeat(idx, n_element_dofs))
        cols.append(np.tile(idx, n_element_dofs))
        data.append(np.asarray(ke, dtype=float).ravel())

    if rows:
        rows, cols, data = np.concatenate(rows), np.concatenate(cols), np.concatenate(data)
    else:
        rows = cols = np.zeros(0, dtype=np.int64)
        data = np.zeros(0, dtype=float)

    K = scipy.sparse.coo_matrix((data, (rows, cols)), shape=(ndof, ndof)).tocsr()
    K.sum_duplicates()
    return K


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble global load vector from element contributions.

    Same scatter-add logic as assemble_global_K, but for load vectors.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system

    contributions : List[Tuple[List[int], np.ndarray]]
        List of (dof_map, fe) tuples

    Returns:
    --------
    np.ndarray
        Global load vector F, shape (ndof,)
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        n_element_dofs = len(dof_map)
        _check_contribution(n_element_dofs, fe.shape, (n_element_dofs,), "fe")

        for a in range(n_element_dofs):
            ia = dof_map[a]
            F[ia] += fe[a]

    return F


@dataclass
class GlobalSystem:
    """
    The assembled linear system K·u = F.

    Attributes:
    -----------
    K : np.ndarray or scipy.sparse.csr_matrix
        Global stiffness matrix, shape (ndof, ndof)
    F : np.ndarray
        Global load vector, shape (ndof,)
    dofs : DOFManager
        The numbering K and F are expressed in
    fixed : Dict[int, float]
        Global DOF -> prescribed value, collected from LoadBC loads
    """
    K: Union[np.ndarray, scipy.sparse.csr_matrix]
    F: np.ndarray
    dofs: DOFManager
    fixed: Dict[int, float] = field(default_factory=dict)

    @property
    def ndof(self) -> int:
        return self.dofs.ndof

    @property
    def is_sparse(self) -> bool:
        return scipy.sparse.issparse(self.K)


def element_contributions(mesh, dofs: DOFManager) -> List[Tuple[List[int], np.ndarray]]:
    """(dof_map, ke) for every element of the mesh, in mesh order."""
    return [(dofs.element_dof_map(e), e.ke()) for e in mesh.elements.values()]


def load_contributions(mesh, dofs: DOFManager) -> List[Tuple[List[int], np.ndarray]]:
    """(dof_map, fe) for every (load, targeted element) pair."""
    contributions = []
    for load in mesh.loads.values():
        for element in load.elements:
            contributions.append((dofs.element_dof_map(element), element.fe(load)))
    return contributions


def collect_fixed_dofs(mesh) -> Dict[int, float]:
    """Prescribed DOF values from LoadBC loads; later loads win on conflicts."""
    fixed = {}
    for load in mesh.loads.values():
        if isinstance(load, LoadBC):
            dof = load.global_dof()
            if dof in fixed and fixed[dof] != load.value:
                logger.warning(
                    "LoadBC %d overrides prescribed value of DOF %d (%g -> %g)",
                    load.id, dof, fixed[dof], load.value,
                )
            fixed[dof] = load.value
    return fixed


def assemble_system(mesh, sparse: Optional[bool] = None) -> GlobalSystem:
    """
    Build a fresh global system from the current state of a mesh.

    Steps:
    1. resolve references (if not done yet)
    2. number DOFs in node order
    3. scatter-add every element's ke() into K
    4. scatter-add every load's fe() into F
    5. collect prescribed DOFs from LoadBC loads

    Elements and loads are only read, so calling this again on an
    unmodified mesh gives an identical system.

    Parameters:
    -----------
    mesh : Mesh
    sparse : bool, optional
        Build K as scipy.sparse.csr_matrix. Defaults to sparse when the
        system has more than CONFIG.sparse_threshold DOFs.
    """
    if not mesh.resolved:
        mesh.resolve()

    dofs = number_dofs(mesh)
    if sparse is None:
        sparse = dofs.ndof > CONFIG.sparse_threshold

    k_contributions = element_contributions(mesh, dofs)
    if sparse:
        K = assemble_global_K_sparse(dofs.ndof, k_contributions)
    else:
        K = assemble_global_K(dofs.ndof, k_contributions)

    F = assemble_global_F(dofs.ndof, load_contributions(mesh, dofs))
    fixed = collect_fixed_dofs(mesh)

    logger.debug(
        "Assembled %s system: %d DOFs, %d elements, %d loads, %d fixed DOFs",
        "sparse" if sparse else "dense", dofs.ndof, len(mesh.elements), len(mesh.loads), len(fixed),
    )
    return GlobalSystem(K=K, F=F, dofs=dofs, fixed=fixed)


def add_nodal_load(
    F: np.ndarray,
    dofs: DOFManager,
    node_id: int,
    load_vector: np.ndarray,
) -> None:
    """
    Add a nodal load to the global load vector (in-place).

    Convenience for point loads that are not part of the mesh file.

    Example:
    --------
    >>> add_nodal_load(system.F, system.dofs, node_id=1, load_vector=np.array([1000, 0]))
    """
    for i, val in enumerate(load_vector):
        F[dofs.idx(node_id, i)] += val
