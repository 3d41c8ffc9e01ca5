# mini_fem/viz/viz3d.py
"""
3D VISUALIZATION: Interactive Mesh Viewer
=========================================

Interactive 3D views of meshes using Plotly: rotate/zoom/pan, color by
axial force, export to HTML.
"""

import logging
import os
from typing import Dict, Optional

import plotly.graph_objects as go

from ..elements import LineElement

logger = logging.getLogger(__name__)


def create_mesh_figure(
    mesh,
    forces: Optional[Dict[int, float]] = None,
    title: str = "Mesh",
    show_nodes: bool = True,
) -> go.Figure:
    """
    Create a Plotly figure of a mesh's line elements.

    Parameters:
    -----------
    mesh : Mesh
        Resolved mesh; 2D nodes are drawn in the z=0 plane
    forces : Optional[Dict[int, float]]
        Element id -> axial force, for coloring (red=tension, blue=compression)
    title : str
        Plot title
    show_nodes : bool
        Whether to show node markers

    Returns:
    --------
    go.Figure
    """
    fig = go.Figure()

    max_force = max((abs(f) for f in forces.values()), default=0.0) if forces else 0.0

    for element in mesh.elements.values():
        if not isinstance(element, LineElement):
            continue
        ni, nj = element.nodes
        if forces and element.id in forces and max_force > 0:
            force = forces[element.id]
            intensity = int(255 * abs(force) / max_force)
            color = f'rgb({intensity}, 50, 50)' if force > 0 else f'rgb(50, 50, {intensity})'
            hover = f"{element.TAG} {element.id}: N={force:.4g} ({'tension' if force > 0 else 'compression'})"
        else:
            color = 'steelblue'
            hover = f"{element.TAG} {element.id}: L={element.length():.4g}"

        fig.add_trace(go.Scatter3d(
            x=[ni.x, nj.x], y=[ni.y, nj.y], z=[ni.z, nj.z],
            mode='lines',
            line=dict(color=color, width=4),
            name=f'{element.TAG} {element.id}',
            showlegend=False,
            hovertext=hover,
            hoverinfo='text',
        ))

    if show_nodes and mesh.nodes:
        nodes = list(mesh.nodes.values())
        fig.add_trace(go.Scatter3d(
            x=[n.x for n in nodes], y=[n.y for n in nodes], z=[n.z for n in nodes],
            mode='markers',
            marker=dict(size=5, color='darkgray', line=dict(width=1, color='black')),
            name='Nodes',
            text=[f"Node {n.id}: ({n.x:.2f}, {n.y:.2f}, {n.z:.2f})" for n in nodes],
            hoverinfo='text',
        ))

    fig.update_layout(
        title=dict(text=title, font=dict(size=16)),
        scene=dict(
            xaxis=dict(title='X'),
            yaxis=dict(title='Y'),
            zaxis=dict(title='Z'),
            aspectmode='data',
            camera=dict(eye=dict(x=1.5, y=1.5, z=1.0)),
        ),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig


def plot_mesh_3d(
    mesh,
    forces: Optional[Dict[int, float]] = None,
    title: str = "Mesh",
    outpath: Optional[str] = None,
    show: bool = False,
    **kwargs
) -> go.Figure:
    """Create the 3D figure and optionally save it as HTML and/or show it."""
    fig = create_mesh_figure(mesh, forces=forces, title=title, **kwargs)

    if outpath:
        directory = os.path.dirname(outpath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.write_html(outpath)
        logger.info("3D visualization saved to: %s", outpath)

    if show:
        fig.show()

    return fig
