# mini_fem/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Numbering
========================================

PURPOSE:
--------
This module maps (node_id, local_dof) to global DOF indices.

The number of DOFs at a node is not fixed per mesh; it comes from the
elements attached to it:

    Bar2D:   2 DOF/node (ux, uy)
    Beam2D:  3 DOF/node (ux, uy, rz)
    Bar3D:   3 DOF/node (ux, uy, uz)

A node gets the largest count any of its elements asks for. A Bar2D
attached to a Beam2D node simply uses the first two (ux, uy). A node no
element touches gets no DOFs at all, so it cannot make K singular.

Numbering walks the nodes in mesh order and hands out consecutive indices,
so the map is a pure function of node order and per-node arity: numbering
the same mesh twice gives the same result.

USAGE:
------
    dof = number_dofs(mesh)
    dof.ndof                    # size of K
    dof.idx(node_id=2, local_dof=1)
    dof.element_dof_map(element)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..errors import DanglingReferenceError, FEMError

logger = logging.getLogger(__name__)


@dataclass
class DOFManager:
    """
    Global DOF numbering of a mesh.

    Attributes:
    -----------
    node_dofs_map : Dict[int, Tuple[int, ...]]
        Node id -> its global DOF indices, in node order
    ndof : int
        Total number of DOFs (size of K)

    Examples:
    ---------
    >>> dof = DOFManager({0: (0, 1), 1: (2, 3)}, 4)
    >>> dof.idx(1, 0)
    2
    >>> dof.node_dofs(0)
    [0, 1]
    """
    node_dofs_map: Dict[int, Tuple[int, ...]] = field(default_factory=dict)
    ndof: int = 0

    def _dofs_of(self, node_id: int) -> Tuple[int, ...]:
        try:
            return self.node_dofs_map[node_id]
        except KeyError:
            raise DanglingReferenceError(f"Node {node_id} is not part of the DOF numbering") from None

    def idx(self, node_id: int, local_dof: int) -> int:
        """Global DOF index of a node's local DOF."""
        dofs = self._dofs_of(node_id)
        if not 0 <= local_dof < len(dofs):
            raise IndexError(f"Node {node_id} has {len(dofs)} DOFs, no local DOF {local_dof}")
        return dofs[local_dof]

    def node_dofs(self, node_id: int) -> List[int]:
        """All global DOF indices of a node."""
        return list(self._dofs_of(node_id))

    def element_dof_map(self, element) -> List[int]:
        """
        Global DOF indices for an element, in the element's local DOF order.

        Each node contributes its first DOFS_PER_NODE DOFs.
        """
        result = []
        n = element.DOFS_PER_NODE
        for node_id in element.node_ids:
            dofs = self._dofs_of(node_id)
            if len(dofs) < n:
                raise FEMError(f"Node {node_id} has {len(dofs)} DOFs but {element.TAG} {element.id} needs {n}")
            result.extend(dofs[:n])
        return result


def node_dof_arity(mesh) -> Dict[int, int]:
    """Number of DOFs each node needs: max DOFS_PER_NODE of attached elements."""
    arity = {node_id: 0 for node_id in mesh.nodes}
    for element in mesh.elements.values():
        for node_id in element.node_ids:
            if node_id not in arity:
                raise FEMError(f"{element.TAG} {element.id} references unknown node {node_id}")
            arity[node_id] = max(arity[node_id], element.DOFS_PER_NODE)
    return arity


def number_dofs(mesh) -> DOFManager:
    """
    Number the DOFs of a mesh and store them on each Node.

    Returns the DOFManager holding the same map.
    """
    arity = node_dof_arity(mesh)
    node_dofs_map = {}
    next_dof = 0
    for node_id, node in mesh.nodes.items():
        n = arity[node_id]
        dofs = tuple(range(next_dof, next_dof + n))
        node.dofs = dofs
        node_dofs_map[node_id] = dofs
        next_dof += n

    logger.debug("Numbered %d DOFs over %d nodes", next_dof, len(mesh.nodes))
    return DOFManager(node_dofs_map, next_dof)
