# loads.py - Load variants: nodal forces, distributed loads, gravity, prescribed DOFs

import logging
from typing import List, Optional, Sequence

import numpy as np

from .errors import DanglingReferenceError, MalformedRecordError, UnresolvedReferenceError
from .model import FEMObject

logger = logging.getLogger(__name__)


class Load(FEMObject):
    """
    Base class of load variants.

    A load acts on one or more elements (by id). element_vector(element)
    returns its contribution in the element's local DOF order; assembly
    scatters it into the global load vector F.
    """
    KIND = "load"

    def __init__(self, id: int = -1):
        super().__init__(id)
        self.elements = None

    @property
    def element_ids(self) -> Optional[List[int]]:
        """Ids of target elements; None means every element of the mesh."""
        raise NotImplementedError

    @property
    def resolved(self) -> bool:
        return self.elements is not None

    def resolve(self, mesh) -> None:
        ids = self.element_ids
        try:
            if ids is None:
                self.elements = list(mesh.elements.values())
            else:
                self.elements = [mesh.element(i) for i in ids]
        except DanglingReferenceError as e:
            raise DanglingReferenceError(f"{self.TAG} {self.id}: {e}") from None

    def targets(self, element) -> bool:
        if not self.resolved:
            raise UnresolvedReferenceError(f"{self.TAG} {self.id} has not been resolved")
        return any(e is element for e in self.elements)

    def element_vector(self, element) -> np.ndarray:
        raise NotImplementedError


class LoadNode(Load):
    """
    Point force applied at one node of one element.

    point is the element-local node index, force has one component per
    DOF of that node (global directions; for Beam2D the third is a moment).
    """
    TAG = "LoadNode"

    def __init__(self, id: int = -1, element_id: int = -1, point: int = 0, force: Sequence[float] = ()):
        super().__init__(id)
        self.element_id = int(element_id)
        self.point = int(point)
        self.force = np.array(list(force), dtype=float)

    @property
    def element_ids(self) -> List[int]:
        return [self.element_id]

    def read(self, tokens, context) -> None:
        super().read(tokens, context)
        self.element_id = tokens.read_int("element number")
        self.point = tokens.read_int("point number")
        self.force = tokens.read_vector("force vector")

        element = context.element(self.element_id, referrer=self)
        if not 0 <= self.point < element.NNODES:
            raise MalformedRecordError(
                f"LoadNode {self.id}: element {element.id} has no point {self.point}", tokens.line
            )
        if len(self.force) != element.DOFS_PER_NODE:
            raise MalformedRecordError(
                f"LoadNode {self.id}: force needs {element.DOFS_PER_NODE} components, got {len(self.force)}",
                tokens.line,
            )

    def write(self, out) -> None:
        super().write(out)
        fmt = out.float_format
        out.write(f"\t{self.element_id}\t% Element number\n")
        out.write(f"\t{self.point}\t% Point number within the element\n")
        values = " ".join(fmt % f for f in self.force)
        out.write(f"\t{len(self.force)} {values}\t% Force vector\n")

    def element_vector(self, element) -> np.ndarray:
        return element.nodal_load_vector(self.point, self.force)


class LoadElement(Load):
    """
    Load acting along whole elements.

    The record lists the number of target elements followed by their
    numbers; a count of -1 applies the load to every element of the mesh.
    """

    def __init__(self, id: int = -1, element_ids: Optional[Sequence[int]] = None):
        super().__init__(id)
        self._element_ids = None if element_ids is None else [int(e) for e in element_ids]

    @property
    def element_ids(self) -> Optional[List[int]]:
        return self._element_ids

    def read(self, tokens, context) -> None:
        super().read(tokens, context)
        count = tokens.read_int("number of elements")
        if count == -1:
            self._element_ids = None
        elif count < 0:
            raise MalformedRecordError(f"{self.TAG} {self.id}: invalid element count {count}", tokens.line)
        else:
            self._element_ids = [tokens.read_int("element number") for _ in range(count)]
            for element_id in self._element_ids:
                context.element(element_id, referrer=self)

    def _read_targets(self, context) -> list:
        if self._element_ids is None:
            return context.elements()
        return [context.element(e, referrer=self) for e in self._element_ids]

    @property
    def vector(self) -> np.ndarray:
        """Load or acceleration vector in global directions, one component per coordinate."""
        raise NotImplementedError

    def check_vector(self, elements, line: int = None) -> None:
        n = len(self.vector)
        for element in elements:
            if n != element.NDIM:
                raise MalformedRecordError(
                    f"{self.TAG} {self.id}: {element.TAG} {element.id} needs {element.NDIM} components, got {n}",
                    line,
                )

    def resolve(self, mesh) -> None:
        super().resolve(mesh)
        try:
            self.check_vector(self.elements)
        except MalformedRecordError:
            self.elements = None
            raise

    def write(self, out) -> None:
        super().write(out)
        if self._element_ids is None:
            out.write("\t-1\t% Applies to all elements\n")
        else:
            ids = " ".join(str(e) for e in self._element_ids)
            out.write(f"\t{len(self._element_ids)} {ids}\t% Element numbers\n")


class LoadUDL(LoadElement):
    """Uniform distributed load per unit length, global components."""
    TAG = "LoadUDL"

    def __init__(self, id: int = -1, element_ids: Optional[Sequence[int]] = None, q: Sequence[float] = ()):
        super().__init__(id, element_ids)
        self.q = np.array(list(q), dtype=float)

    def read(self, tokens, context) -> None:
        super().read(tokens, context)
        self.q = tokens.read_vector("load per unit length")
        self.check_vector(self._read_targets(context), tokens.line)

    @property
    def vector(self) -> np.ndarray:
        return self.q

    def write(self, out) -> None:
        super().write(out)
        fmt = out.float_format
        values = " ".join(fmt % v for v in self.q)
        out.write(f"\t{len(self.q)} {values}\t% Load per unit length\n")

    def element_vector(self, element) -> np.ndarray:
        return element.distributed_load_vector(self.q)


class LoadGravConst(LoadElement):
    """
    Constant gravity (body force) on elements.

    The load per unit length is rho · A · g, taken from each element's
    material, and is then treated like a uniform distributed load.
    """
    TAG = "LoadGravConst"

    def __init__(self, id: int = -1, element_ids: Optional[Sequence[int]] = None, g: Sequence[float] = ()):
        super().__init__(id, element_ids)
        self.g = np.array(list(g), dtype=float)

    def read(self, tokens, context) -> None:
        super().read(tokens, context)
        self.g = tokens.read_vector("gravity acceleration")
        self.check_vector(self._read_targets(context), tokens.line)

    @property
    def vector(self) -> np.ndarray:
        return self.g

    def write(self, out) -> None:
        super().write(out)
        fmt = out.float_format
        values = " ".join(fmt % v for v in self.g)
        out.write(f"\t{len(self.g)} {values}\t% Gravity acceleration\n")

    def element_vector(self, element) -> np.ndarray:
        m = element.material
        q = m["rho"] * m["A"] * self.g
        return element.distributed_load_vector(q)


class LoadBC(Load):
    """
    Prescribed value of one element DOF (a support or imposed displacement).

    It adds nothing to F; assemble_system() collects it into the fixed DOF
    table handed to the solver.
    """
    TAG = "LoadBC"

    def __init__(self, id: int = -1, element_id: int = -1, dof: int = 0, value: float = 0.0):
        super().__init__(id)
        self.element_id = int(element_id)
        self.dof = int(dof)
        self.value = float(value)

    @property
    def element_ids(self) -> List[int]:
        return [self.element_id]

    def read(self, tokens, context) -> None:
        super().read(tokens, context)
        self.element_id = tokens.read_int("element number")
        self.dof = tokens.read_int("DOF number")
        self.value = tokens.read_float("prescribed value")

        element = context.element(self.element_id, referrer=self)
        if not 0 <= self.dof < element.ndofs:
            raise MalformedRecordError(
                f"LoadBC {self.id}: element {element.id} has no DOF {self.dof}", tokens.line
            )

    def write(self, out) -> None:
        super().write(out)
        out.write(f"\t{self.element_id}\t% Element number\n")
        out.write(f"\t{self.dof}\t% DOF number within the element\n")
        out.write(f"\t{out.float_format % self.value}\t% Prescribed value\n")

    def element_vector(self, element) -> np.ndarray:
        return np.zeros(element.ndofs, dtype=float)

    def global_dof(self) -> int:
        if not self.resolved:
            raise UnresolvedReferenceError(f"LoadBC {self.id} has not been resolved")
        element = self.elements[0]
        dofs = element.dof_map()
        if not 0 <= self.dof < len(dofs):
            raise MalformedRecordError(f"LoadBC {self.id}: element {element.id} has no DOF {self.dof}")
        return dofs[self.dof]
