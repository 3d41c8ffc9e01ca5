# mini_fem/catalog.py
"""
Catalog of the built-in entity types.

init_types() is the initialization routine that fills a TypeRegistry with
every node, material, element and load class shipped with mini_fem. It is
idempotent, so the codec calls it before each read without harm.
"""

from .elements import Bar2D, Beam2D
from .loads import LoadBC, LoadGravConst, LoadNode, LoadUDL
from .model import MaterialStandard, Node
from .registry import REGISTRY, TypeRegistry
from .v3d.elements import Bar3D

BUILTIN_TYPES = (
    Node,
    MaterialStandard,
    Bar2D,
    Beam2D,
    Bar3D,
    LoadNode,
    LoadUDL,
    LoadGravConst,
    LoadBC,
)


def init_types(registry: TypeRegistry = None) -> TypeRegistry:
    """Register all built-in classes under their TAG; returns the registry."""
    registry = REGISTRY if registry is None else registry
    for cls in BUILTIN_TYPES:
        registry.register(cls.TAG, cls, cls.KIND)
    return registry
