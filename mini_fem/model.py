# Node, Material, Mesh and the common persisted-object base

import logging
from typing import Dict, Iterable, Optional

import numpy as np

from .errors import (
    DanglingReferenceError,
    DuplicateIdError,
    MalformedRecordError,
    MaterialPropertyError,
)

logger = logging.getLogger(__name__)


class FEMObject:
    """
    Base of every entity that lives in a mesh file.

    TAG is the persisted type tag, KIND the block the record belongs to.
    read()/write() handle the global number; subclasses chain to them and
    then read/write their own fields in fixed order.
    """
    TAG: str = ""
    KIND: str = ""

    def __init__(self, id: int = -1):
        self.id = id

    def read(self, tokens, context) -> None:
        self.id = tokens.read_int("global number")

    def write(self, out) -> None:
        out.write(f"<{self.TAG}>\n")
        out.write(f"\t{self.id}\t% Global number\n")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"


class Node(FEMObject):
    """
    A point in 2D or 3D space.

    dofs holds the global DOF indices handed out by kernel.dof.number_dofs;
    it is empty until the numbering pass has run.
    """
    TAG = "Node"
    KIND = "node"

    def __init__(self, id: int = -1, coords: Iterable[float] = ()):
        super().__init__(id)
        self.coords = np.array(list(coords), dtype=float)
        self.dofs: tuple = ()

    @property
    def ndim(self) -> int:
        return len(self.coords)

    @property
    def x(self) -> float:
        return float(self.coords[0])

    @property
    def y(self) -> float:
        return float(self.coords[1])

    @property
    def z(self) -> float:
        return float(self.coords[2]) if self.ndim > 2 else 0.0

    def read(self, tokens, context) -> None:
        super().read(tokens, context)
        coords = tokens.read_vector("node coordinates")
        if len(coords) not in (2, 3):
            raise MalformedRecordError(
                f"Node {self.id} has {len(coords)} coordinates; expected 2 or 3", tokens.line
            )
        self.coords = coords

    def write(self, out) -> None:
        super().write(out)
        fmt = out.float_format
        values = " ".join(fmt % c for c in self.coords)
        out.write(f"\t{self.ndim} {values}\t% Coordinates\n")

    def __repr__(self) -> str:
        return f"Node(id={self.id}, coords={self.coords.tolist()})"


class Material(FEMObject):
    """Base class of material variants: a set of named scalar properties."""
    KIND = "material"
    END_NAME = "END"

    def __init__(self, id: int = -1, **properties: float):
        super().__init__(id)
        for name in properties:
            if name == self.END_NAME or ":" in name or name.split() != [name]:
                raise MaterialPropertyError(f"Invalid material property name {name!r}")
        self.properties: Dict[str, float] = {k: float(v) for k, v in properties.items()}

    def __getitem__(self, name: str) -> float:
        try:
            return self.properties[name]
        except KeyError:
            raise MaterialPropertyError(
                f"{self.__class__.__name__} {self.id} has no property '{name}'"
            ) from None

    def get(self, name: str, default: Optional[float] = None) -> Optional[float]:
        return self.properties.get(name, default)

    def read(self, tokens, context) -> None:
        super().read(tokens, context)
        # name : value lines, closed by "END:"
        while True:
            name = tokens.next("property name")
            tokens.expect(":")
            if name == self.END_NAME:
                break
            self.properties[name] = tokens.read_float(f"property '{name}'")

    def write(self, out) -> None:
        super().write(out)
        fmt = out.float_format
        for name, value in self.properties.items():
            out.write(f"\t{name} : {fmt % value}\n")
        out.write("\tEND:\n")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, {self.properties})"


class MaterialStandard(Material):
    """
    Linear elastic material for bar and beam elements.

    E  : Young's modulus
    A  : cross-sectional area
    I  : second moment of area
    nu : Poisson's ratio
    h  : thickness
    RhoC : density times heat capacity
    rho : density (used by gravity loads)
    """
    TAG = "MaterialStandard"

    DEFAULTS = {"E": 100.0, "A": 1.0, "I": 1.0, "nu": 0.2, "h": 1.0, "RhoC": 1.0, "rho": 1.0}

    def __init__(self, id: int = -1, **properties: float):
        merged = dict(self.DEFAULTS)
        merged.update(properties)
        super().__init__(id, **merged)

    @property
    def E(self) -> float:
        return self["E"]

    @property
    def A(self) -> float:
        return self["A"]

    @property
    def I(self) -> float:
        return self["I"]


class Mesh:
    """
    Owning container for all nodes, materials, elements and loads.

    Elements and loads only store ids of what they reference. resolve()
    links them to the live objects held here and fails on any id that
    does not exist in this mesh.
    """

    def __init__(self):
        self.nodes: Dict[int, Node] = {}
        self.materials: Dict[int, Material] = {}
        self.elements: Dict[int, "Element"] = {}
        self.loads: Dict[int, "Load"] = {}

    def _add(self, table: dict, obj, what: str):
        if obj.id in table:
            raise DuplicateIdError(f"Duplicate {what} id {obj.id}")
        table[obj.id] = obj
        return obj

    def add_node(self, node: Node) -> Node:
        return self._add(self.nodes, node, "node")

    def add_material(self, material: Material) -> Material:
        return self._add(self.materials, material, "material")

    def add_element(self, element) -> "Element":
        return self._add(self.elements, element, "element")

    def add_load(self, load) -> "Load":
        return self._add(self.loads, load, "load")

    def add(self, obj):
        """Add any entity to the table matching its KIND."""
        adders = {
            "node": self.add_node,
            "material": self.add_material,
            "element": self.add_element,
            "load": self.add_load,
        }
        return adders[obj.KIND](obj)

    def node(self, node_id: int) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise DanglingReferenceError(f"Node {node_id} does not exist in this mesh") from None

    def material(self, material_id: int) -> Material:
        try:
            return self.materials[material_id]
        except KeyError:
            raise DanglingReferenceError(f"Material {material_id} does not exist in this mesh") from None

    def element(self, element_id: int):
        try:
            return self.elements[element_id]
        except KeyError:
            raise DanglingReferenceError(f"Element {element_id} does not exist in this mesh") from None

    def resolve(self) -> "Mesh":
        """Link every element and load to the entities it references."""
        for element in self.elements.values():
            element.resolve(self)
        for load in self.loads.values():
            load.resolve(self)
        logger.debug(
            "Resolved mesh: %d nodes, %d materials, %d elements, %d loads",
            len(self.nodes), len(self.materials), len(self.elements), len(self.loads),
        )
        return self

    @property
    def resolved(self) -> bool:
        return all(e.resolved for e in self.elements.values()) and \
            all(l.resolved for l in self.loads.values())

    def summary(self) -> Dict[str, int]:
        return {
            "nodes": len(self.nodes),
            "materials": len(self.materials),
            "elements": len(self.elements),
            "loads": len(self.loads),
        }

    def __repr__(self) -> str:
        s = self.summary()
        return (f"Mesh(nodes={s['nodes']}, materials={s['materials']}, "
                f"elements={s['elements']}, loads={s['loads']})")
