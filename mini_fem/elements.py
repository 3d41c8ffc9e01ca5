# Element base class, Bar2D and Beam2D: stiffness, equivalent loads, drawing

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from .config import CONFIG
from .errors import (
    DanglingReferenceError,
    FEMError,
    MalformedRecordError,
    UnresolvedReferenceError,
    UnsupportedLoadError,
)
from .model import FEMObject

logger = logging.getLogger(__name__)


class Element(FEMObject):
    """
    Common contract of all element variants.

    An element stores the ids of its nodes and material; resolve() links
    them to the objects owned by the mesh. ke() and fe() need the links and
    raise UnresolvedReferenceError before resolve() has been called.

    Class attributes:
        NNODES        number of nodes
        DOFS_PER_NODE DOFs the element uses at each node
        NDIM          required node coordinate dimension
    """
    KIND = "element"
    NNODES = 2
    DOFS_PER_NODE = 2
    NDIM = 2

    def __init__(self, id: int = -1, node_ids: Sequence[int] = (), material_id: int = -1):
        super().__init__(id)
        self.node_ids: Tuple[int, ...] = tuple(int(n) for n in node_ids)
        self.material_id = int(material_id)
        self.nodes = None
        self.material = None

    @property
    def ndofs(self) -> int:
        return self.NNODES * self.DOFS_PER_NODE

    @property
    def resolved(self) -> bool:
        return self.nodes is not None and self.material is not None

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------

    def read(self, tokens, context) -> None:
        super().read(tokens, context)
        self.node_ids = tuple(tokens.read_int("node number") for _ in range(self.NNODES))
        self.material_id = tokens.read_int("material number")

        for node_id in self.node_ids:
            node = context.node(node_id, referrer=self)
            if node.ndim != self.NDIM:
                raise MalformedRecordError(
                    f"{self.TAG} {self.id} needs {self.NDIM}D nodes, node {node_id} is {node.ndim}D",
                    tokens.line,
                )
        context.material(self.material_id, referrer=self)

    def write(self, out) -> None:
        super().write(out)
        ids = " ".join(str(n) for n in self.node_ids)
        out.write(f"\t{ids}\t% Node numbers\n")
        out.write(f"\t{self.material_id}\t% Material number\n")

    # ------------------------------------------------------------------
    # references
    # ------------------------------------------------------------------

    def resolve(self, mesh) -> None:
        if len(self.node_ids) != self.NNODES:
            raise MalformedRecordError(f"{self.TAG} {self.id} needs {self.NNODES} nodes, got {len(self.node_ids)}")
        try:
            nodes = tuple(mesh.node(n) for n in self.node_ids)
            material = mesh.material(self.material_id)
        except DanglingReferenceError as e:
            raise DanglingReferenceError(f"{self.TAG} {self.id}: {e}") from None
        for node in nodes:
            if node.ndim != self.NDIM:
                raise MalformedRecordError(
                    f"{self.TAG} {self.id} needs {self.NDIM}D nodes, node {node.id} is {node.ndim}D"
                )
        self.nodes = nodes
        self.material = material

    def _require_resolved(self) -> None:
        if not self.resolved:
            raise UnresolvedReferenceError(
                f"{self.TAG} {self.id} has unresolved node/material references; call Mesh.resolve() first"
            )

    # ------------------------------------------------------------------
    # stiffness protocol
    # ------------------------------------------------------------------

    def ke(self) -> np.ndarray:
        """Element stiffness matrix in global directions, shape (ndofs, ndofs)."""
        raise NotImplementedError

    def fe(self, load) -> np.ndarray:
        """Element load vector for load; zero if load does not act on this element."""
        self._require_resolved()
        if not load.targets(self):
            return np.zeros(self.ndofs, dtype=float)
        return load.element_vector(self)

    def nodal_load_vector(self, point: int, force: Sequence[float]) -> np.ndarray:
        """Load vector for a force applied at the element's local node `point`."""
        self._require_resolved()
        force = np.asarray(force, dtype=float)
        if not 0 <= point < self.NNODES:
            raise ValueError(f"{self.TAG} {self.id} has no local point {point}")
        if force.shape != (self.DOFS_PER_NODE,):
            raise ValueError(
                f"Force on {self.TAG} {self.id} needs {self.DOFS_PER_NODE} components, got {force.size}"
            )
        f = np.zeros(self.ndofs, dtype=float)
        base = point * self.DOFS_PER_NODE
        f[base:base + self.DOFS_PER_NODE] = force
        return f

    def distributed_load_vector(self, q: Sequence[float]) -> np.ndarray:
        """Equivalent nodal loads for a uniform load per unit length q (global)."""
        raise UnsupportedLoadError(f"{self.TAG} does not support distributed loads")

    # ------------------------------------------------------------------
    # DOF mapping and post-processing
    # ------------------------------------------------------------------

    def dof_map(self) -> list:
        """Global DOF indices of the element DOFs, in local order."""
        self._require_resolved()
        result = []
        for node in self.nodes:
            if len(node.dofs) < self.DOFS_PER_NODE:
                raise FEMError(f"Node {node.id} has no DOFs numbered; run number_dofs() first")
            result.extend(node.dofs[:self.DOFS_PER_NODE])
        return result

    def displacements(self, u: np.ndarray) -> np.ndarray:
        """Gather this element's DOF values from a global vector."""
        return np.asarray(u, dtype=float)[self.dof_map()]

    def draw(self, ax, u: Optional[np.ndarray] = None, scale: float = 1.0, **style) -> None:
        """Drawing hook; elements without a drawable shape do nothing."""
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, nodes={list(self.node_ids)}, material={self.material_id})"


class LineElement(Element):
    """Two-node straight element: length, direction cosines, axial force, drawing."""

    def geometry(self) -> Tuple[float, np.ndarray]:
        """Return (L, cosines) where cosines is the unit vector from node i to node j."""
        self._require_resolved()
        ni, nj = self.nodes
        delta = nj.coords - ni.coords
        L = float(np.linalg.norm(delta))
        if L <= CONFIG.zero_length_tol:
            raise ValueError(f"Element {self.id} has zero length.")
        return L, delta / L

    def length(self) -> float:
        return self.geometry()[0]

    def axial_force(self, u: np.ndarray) -> float:
        """
        Axial force from global displacements (positive = tension).
        """
        L, cosines = self.geometry()
        d = self.displacements(u)
        n = self.DOFS_PER_NODE
        du = d[n:n + self.NDIM] - d[0:self.NDIM]
        return (self.material["E"] * self.material["A"] / L) * float(cosines @ du)

    def axial_stress(self, u: np.ndarray) -> float:
        return self.axial_force(u) / self.material["A"]

    def distributed_load_vector(self, q: Sequence[float]) -> np.ndarray:
        # lumped: each node takes half the resultant
        L, _ = self.geometry()
        q = np.asarray(q, dtype=float)
        if q.shape != (self.NDIM,):
            raise ValueError(f"Distributed load on {self.TAG} {self.id} needs {self.NDIM} components")
        f = np.zeros(self.ndofs, dtype=float)
        for k in range(self.NNODES):
            base = k * self.DOFS_PER_NODE
            f[base:base + self.NDIM] = q * L / 2.0
        return f

    def draw(self, ax, u: Optional[np.ndarray] = None, scale: float = 1.0, **style) -> None:
        self._require_resolved()
        xy = np.array([node.coords[:2] for node in self.nodes])
        if u is not None:
            d = self.displacements(u)
            for k in range(self.NNODES):
                base = k * self.DOFS_PER_NODE
                xy[k] += scale * d[base:base + 2]
        style.setdefault("color", "#2C3E50")
        ax.plot(xy[:, 0], xy[:, 1], **style)


class Bar2D(LineElement):
    """
    1D bar (spring) element in 2D space: 2 nodes, 2 DOF per node (ux, uy).
    Axial stiffness only: k = E·A / L projected on the bar direction.
    """
    TAG = "Bar2D"
    NNODES = 2
    DOFS_PER_NODE = 2
    NDIM = 2

    def ke(self) -> np.ndarray:
        L, (c, s) = self.geometry()
        EA_L = self.material["E"] * self.material["A"] / L
        cc, ss, cs = c * c, s * s, c * s
        k = np.array([
            [ cc,  cs, -cc, -cs],
            [ cs,  ss, -cs, -ss],
            [-cc, -cs,  cc,  cs],
            [-cs, -ss,  cs,  ss],
        ], dtype=float)
        return EA_L * k


def frame2d_local_stiffness(E: float, A: float, I: float, L: float) -> np.ndarray:
    """
    Local stiffness matrix in element local coords (x along member).
    DOF order: [uix, uiy, rzi, ujx, ujy, rzj]
    """
    EA_L = E * A / L
    EI = E * I
    L2 = L * L
    L3 = L2 * L

    k = np.array([
        [ EA_L,      0.0,        0.0,    -EA_L,      0.0,        0.0],
        [  0.0,  12*EI/L3,   6*EI/L2,      0.0, -12*EI/L3,   6*EI/L2],
        [  0.0,   6*EI/L2,    4*EI/L,      0.0,  -6*EI/L2,    2*EI/L],
        [-EA_L,      0.0,        0.0,     EA_L,      0.0,        0.0],
        [  0.0, -12*EI/L3,  -6*EI/L2,      0.0,  12*EI/L3,  -6*EI/L2],
        [  0.0,   6*EI/L2,    2*EI/L,      0.0,  -6*EI/L2,    4*EI/L],
    ], dtype=float)
    return k


def frame2d_transform(c: float, s: float) -> np.ndarray:
    """
    6x6 transform from global DOFs to local DOFs.
    """
    T = np.array([
        [ c,  s, 0,  0, 0, 0],
        [-s,  c, 0,  0, 0, 0],
        [ 0,  0, 1,  0, 0, 0],
        [ 0,  0, 0,  c, s, 0],
        [ 0,  0, 0, -s, c, 0],
        [ 0,  0, 0,  0, 0, 1],
    ], dtype=float)
    return T


def frame2d_equiv_nodal_load(L: float, qx: float, qy: float) -> np.ndarray:
    """
    Fixed-end load vector in LOCAL coordinates for a uniform load with axial
    component qx and transverse component qy (per unit length).

    Returns [Fx_i, Fy_i, Mz_i, Fx_j, Fy_j, Mz_j]:
        axial   qx·L/2 at each end
        shear   qy·L/2 at each end
        moment  +qy·L²/12 at i, -qy·L²/12 at j
    """
    return np.array([
        qx * L / 2.0,
        qy * L / 2.0,
        qy * L * L / 12.0,
        qx * L / 2.0,
        qy * L / 2.0,
        -qy * L * L / 12.0,
    ], dtype=float)


class Beam2D(LineElement):
    """
    2D frame element (Euler–Bernoulli): 2 nodes, 3 DOF per node: (ux, uy, rz).
    Uses material properties E, A and I.
    """
    TAG = "Beam2D"
    NNODES = 2
    DOFS_PER_NODE = 3
    NDIM = 2

    def transform(self) -> np.ndarray:
        _, (c, s) = self.geometry()
        return frame2d_transform(c, s)

    def ke(self) -> np.ndarray:
        L, (c, s) = self.geometry()
        m = self.material
        k_local = frame2d_local_stiffness(m["E"], m["A"], m["I"], L)
        T = frame2d_transform(c, s)
        return T.T @ k_local @ T

    def distributed_load_vector(self, q: Sequence[float]) -> np.ndarray:
        L, (c, s) = self.geometry()
        q = np.asarray(q, dtype=float)
        if q.shape != (2,):
            raise ValueError(f"Distributed load on {self.TAG} {self.id} needs 2 components")
        # rotate the global load into member axes
        qx = c * q[0] + s * q[1]
        qy = -s * q[0] + c * q[1]
        f_local = frame2d_equiv_nodal_load(L, qx, qy)
        return frame2d_transform(c, s).T @ f_local

    def end_forces(self, u: np.ndarray, q: Optional[Sequence[float]] = None) -> np.ndarray:
        """
        Element end forces [Ni, Vi, Mi, Nj, Vj, Mj] in LOCAL coordinates.

        If the element carries a uniform load q (global, per unit length),
        its fixed-end vector is subtracted so the result is the actual
        internal force state.
        """
        L, (c, s) = self.geometry()
        m = self.material
        T = frame2d_transform(c, s)
        d_local = T @ self.displacements(u)
        f_local = frame2d_local_stiffness(m["E"], m["A"], m["I"], L) @ d_local
        if q is not None:
            f_local = f_local - T @ self.distributed_load_vector(q)
        return f_local
