# mini_fem/kernel/solve.py
"""Linear system solve with prescribed DOFs and singularity detection."""

import logging
import warnings
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Union

import numpy as np
import scipy.sparse
from scipy.sparse.linalg import spsolve

from ..config import CONFIG
from ..errors import SingularSystemError

logger = logging.getLogger(__name__)


@dataclass
class Solution:
    """Result of a solve: displacements d, reactions R, free DOF indices."""
    d: np.ndarray
    R: np.ndarray
    free: np.ndarray


def _as_fixed_dict(fixed_dofs: Union[Dict[int, float], Iterable[int]]) -> Dict[int, float]:
    if isinstance(fixed_dofs, dict):
        return {int(k): float(v) for k, v in fixed_dofs.items()}
    return {int(k): 0.0 for k in fixed_dofs}


def solve_linear(
    K,
    F: np.ndarray,
    fixed_dofs: Union[Dict[int, float], Iterable[int]],
    cond_limit: Optional[float] = None,
) -> tuple:
    """
    Solve K·d = F with fixed boundary conditions via partitioning.

    Args:
        K: Global stiffness matrix (ndof x ndof), dense or scipy sparse
        F: Global load vector (ndof,)
        fixed_dofs: Constrained DOF indices (displacement = 0), or a dict
            DOF -> prescribed displacement
        cond_limit: Max condition number before raising SingularSystemError
            (dense only; defaults to CONFIG.cond_limit)

    Returns:
        d: Displacement vector (ndof,)
        R: Reaction vector (ndof,)
        free: Array of free DOF indices

    Raises:
        SingularSystemError: If structure is unstable or ill-conditioned
    """
    cond_limit = CONFIG.cond_limit if cond_limit is None else cond_limit
    ndof = K.shape[0]
    F = np.asarray(F, dtype=float)
    prescribed = _as_fixed_dict(fixed_dofs)

    # Partition DOFs
    fixed = np.array(sorted(prescribed), dtype=int)
    fixed_set = set(prescribed)
    free = np.array([i for i in range(ndof) if i not in fixed_set], dtype=int)

    d = np.zeros(ndof, dtype=float)
    if fixed.size:
        d[fixed] = [prescribed[i] for i in fixed]

    if free.size:
        sparse = scipy.sparse.issparse(K)
        if sparse:
            K = K.tocsr()
            Kff = K[free][:, free]
            Kfc = K[free][:, fixed] if fixed.size else None
        else:
            Kff = K[np.ix_(free, free)]
            Kfc = K[np.ix_(free, fixed)] if fixed.size else None

        # Move the prescribed displacements to the right-hand side
        Ff = F[free] if Kfc is None else F[free] - Kfc @ d[fixed]

        if sparse:
            try:
                with warnings.catch_warnings():
                    warnings.simplefilter("ignore")
                    df = spsolve(Kff.tocsc(), Ff)
            except RuntimeError as e:
                raise SingularSystemError(f"Unstable system: {e}. Check supports.") from e
            df = np.atleast_1d(df)
            if not np.all(np.isfinite(df)):
                raise SingularSystemError("Unstable system: sparse factorization is singular. Check supports.")
        else:
            cond = np.linalg.cond(Kff)
            logger.debug("Reduced system: %d free DOFs, cond=%.2e", free.size, cond)
            if not np.isfinite(cond) or cond > cond_limit:
                raise SingularSystemError(
                    f"Unstable system (cond={cond:.2e}). Check supports. Need cond < {cond_limit:.0e}."
                )
            df = np.linalg.solve(Kff, Ff)

        d[free] = df

    # Compute reactions: R = K·d - F
    R = K @ d - F

    return d, R, free


def solve(system, extra_fixed: Union[Dict[int, float], Iterable[int], None] = None) -> Solution:
    """
    Solve an assembled GlobalSystem.

    The fixed DOFs are the system's LoadBC prescriptions plus extra_fixed.
    """
    fixed = dict(system.fixed)
    if extra_fixed is not None:
        fixed.update(_as_fixed_dict(extra_fixed))
    d, R, free = solve_linear(system.K, system.F, fixed)
    return Solution(d=d, R=R, free=free)
