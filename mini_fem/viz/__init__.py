# mini_fem/viz - Visualization Tools
"""
VIZ: Visualization for 2D and 3D Meshes
=======================================

This package provides visualization tools:
- viz2d: matplotlib drawing through each element's draw() hook
- viz3d: interactive 3D view of meshes with 3D nodes (Plotly)

The kernel never imports this package; drawing is optional.
"""

from .viz2d import plot_mesh
from .viz3d import create_mesh_figure, plot_mesh_3d

__all__ = ['plot_mesh', 'create_mesh_figure', 'plot_mesh_3d']
