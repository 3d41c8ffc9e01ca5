# mini_fem/kernel - Assembly and solve core
"""
KERNEL: DOF NUMBERING, ASSEMBLY, SOLVE
======================================

Assembly and solving don't care about element types. They just need:
- A way to map (node_id, local_dof) → global_dof_index
- Element stiffness matrices and load vectors (any size)
- Fixed DOF lists

The ELEMENT implementations (Bar2D, Beam2D, Bar3D) are type-specific,
but the kernel plumbing is universal.
"""

from .dof import DOFManager, number_dofs
from .assemble import (
    GlobalSystem, add_nodal_load, assemble_global_F, assemble_global_K,
    assemble_global_K_sparse, assemble_system, collect_fixed_dofs,
)
from .solve import Solution, solve, solve_linear

__all__ = [
    'DOFManager', 'number_dofs',
    'GlobalSystem', 'assemble_system', 'assemble_global_K', 'assemble_global_F',
    'assemble_global_K_sparse', 'collect_fixed_dofs', 'add_nodal_load',
    'Solution', 'solve', 'solve_linear',
]
