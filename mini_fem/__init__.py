# mini_fem - Linear Finite-Element Kernel
"""
MINI-FEM: A Linear Finite-Element Kernel
========================================

This package provides:
- A mesh of nodes, materials, elements and loads
- A type registry so mesh files can hold any registered variant
- A text mesh format with checked cross-references
- Element stiffness matrices and load vectors (Bar2D, Beam2D, Bar3D)
- Global assembly of K and F, and a linear solve

ARCHITECTURE:
-------------
    errors.py       Error kinds
    config.py       Defaults (float precision, solver limits)
    registry.py     Type tag -> constructor table
    catalog.py      Built-in types, init_types()
    model.py        Node, Material, Mesh
    elements.py     Element contract, Bar2D, Beam2D
    v3d/            Bar3D
    loads.py        LoadNode, LoadUDL, LoadGravConst, LoadBC
    io.py           Mesh file reader/writer
    kernel/         DOF numbering, assembly, solve
    post.py         Element forces, nodal displacements
    viz/            Drawing (matplotlib, plotly); optional
    cli.py          mini-fem command

QUICK START:
------------
    from mini_fem import load_mesh_file, assemble_system, solve

    mesh = load_mesh_file("meshes/truss3.fem")
    system = assemble_system(mesh)
    solution = solve(system)
"""

from .errors import (
    FEMError,
    UnknownTypeError,
    RegistryFrozenError,
    MalformedRecordError,
    RecordOrderError,
    DuplicateIdError,
    DanglingReferenceError,
    UnresolvedReferenceError,
    MaterialPropertyError,
    UnsupportedLoadError,
    SingularSystemError,
)
from .registry import REGISTRY, TypeRegistry, register_type
from .catalog import init_types
from .model import Node, Material, MaterialStandard, Mesh
from .elements import Element, LineElement, Bar2D, Beam2D
from .v3d import Bar3D
from .loads import Load, LoadNode, LoadUDL, LoadGravConst, LoadBC
from .io import read_mesh, write_mesh, loads_mesh, dumps_mesh, load_mesh_file, save_mesh_file
from .kernel import DOFManager, number_dofs, GlobalSystem, assemble_system, Solution, solve, solve_linear

__version__ = "0.1.0"
