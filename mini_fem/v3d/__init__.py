# mini_fem/v3d - 3D Structural Elements
"""
V3D: 3D STRUCTURAL ELEMENTS
===========================

This package provides 3D element variants:
- Bar3D: Axial-only bar elements (6×6 stiffness, 3 DOF/node)

They share the Element contract with the planar variants, so the codec,
the DOF numbering and the assembly treat them exactly the same way.

USAGE:
------
    from mini_fem.model import Mesh, Node, MaterialStandard
    from mini_fem.v3d import Bar3D

    mesh = Mesh()
    mesh.add_node(Node(0, (0.0, 0.0, 0.0)))
    mesh.add_node(Node(1, (1.0, 0.0, 0.0)))
    mesh.add_material(MaterialStandard(0, E=210e9, A=0.001))
    mesh.add_element(Bar3D(0, (0, 1), 0))
    mesh.resolve()

    ke = mesh.elements[0].ke()
"""

from .elements import Bar3D, bar3d_stiffness

__all__ = ['Bar3D', 'bar3d_stiffness']
