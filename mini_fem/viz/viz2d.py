# mini_fem/viz/viz2d.py
"""
2D VISUALIZATION: Undeformed and Deformed Mesh
==============================================

Every element draws itself through its draw(ax, u, scale) hook, so new
element variants show up here without changes to this module.

Real deflections are tiny; `scale` exaggerates them for visibility only.
"""

import logging
import os
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger(__name__)

COLORS = {
    'undeformed': '#2C3E50',   # Dark blue-gray
    'deformed': '#E74C3C',     # Coral red
    'node': '#34495E',
}


def plot_mesh(
    mesh,
    d: Optional[np.ndarray] = None,
    scale: float = 1.0,
    outpath: Optional[str] = None,
    title: str = "Mesh",
    ax=None,
    show_node_ids: bool = True,
):
    """
    Plot the mesh, and its deformed shape when a displacement vector is given.

    Parameters:
    -----------
    mesh : Mesh
        A resolved mesh (DOFs numbered if d is given)
    d : np.ndarray, optional
        Global displacement vector
    scale : float
        Deformation exaggeration factor
    outpath : str, optional
        Save the figure there (.png, .pdf, .svg); the directory is created
    ax : matplotlib Axes, optional
        Draw into an existing axes instead of a new figure

    Returns:
    --------
    matplotlib.axes.Axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 6))
    else:
        fig = ax.figure

    for element in mesh.elements.values():
        element.draw(ax, color=COLORS['undeformed'], linewidth=2, alpha=0.6 if d is not None else 1.0)
        if d is not None:
            element.draw(ax, u=d, scale=scale, color=COLORS['deformed'], linewidth=2, linestyle='--')

    xs = [n.x for n in mesh.nodes.values()]
    ys = [n.y for n in mesh.nodes.values()]
    ax.scatter(xs, ys, s=25, color=COLORS['node'], zorder=3)
    if show_node_ids:
        for node in mesh.nodes.values():
            ax.annotate(str(node.id), (node.x, node.y), textcoords="offset points", xytext=(4, 4), fontsize=8)

    if d is not None:
        title = f"{title} (deformation ×{scale:g})"
    ax.set_title(title)
    ax.set_aspect('equal', adjustable='datalim')
    ax.grid(True, alpha=0.3)
    ax.set_xlabel('X')
    ax.set_ylabel('Y')

    if outpath:
        directory = os.path.dirname(outpath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(outpath, dpi=150, bbox_inches='tight')
        logger.info("Mesh plot saved to: %s", outpath)

    return ax
