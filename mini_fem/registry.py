# mini_fem/registry.py
"""
TYPE REGISTRY: Persisted Type Tag -> Constructor
================================================

PURPOSE:
--------
A mesh file is heterogeneous: the element block may hold Bar2D, Beam2D and
Bar3D records side by side, the load block several load kinds. Each record
starts with its type tag (e.g. ``<Bar2D>``). The registry maps that tag to a
zero-argument factory producing an empty instance of the concrete variant,
so the codec never needs a hardcoded type switch. New element, material or
load kinds become readable by registering them, without touching io.py.

LIFECYCLE:
----------
    1. init_types() (catalog.py) registers the built-in classes
    2. extension code may register more (register_type decorator)
    3. the codec freezes the registry before the first read
    4. afterwards the table is read-only; only idempotent re-registrations
       are accepted

USAGE:
------
    from mini_fem.registry import REGISTRY

    element = REGISTRY.create("Bar2D")   # empty Bar2D, id == -1
    REGISTRY.kind_of("Bar2D")            # 'element'
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .errors import RegistryFrozenError, UnknownTypeError

logger = logging.getLogger(__name__)

# Entity kinds in the order their blocks appear in a mesh file
KINDS = ("node", "material", "element", "load")


class TypeRegistry:
    """
    Process-wide table of persisted type tags.

    Each entry is ``tag -> (factory, kind)`` where factory is any zero-argument
    callable (usually the class itself) and kind is one of KINDS.
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[Callable[[], object], str]] = {}
        self._frozen = False

    def register(self, tag: str, factory: Callable[[], object], kind: str) -> None:
        """
        Associate a type tag with a factory.

        Registering the same (tag, factory, kind) twice is a no-op. Binding an
        existing tag to something else raises ValueError, and any new binding
        after freeze() raises RegistryFrozenError.
        """
        if kind not in KINDS:
            raise ValueError(f"Unknown entity kind '{kind}' for tag '{tag}' (expected one of {KINDS})")
        if not tag or any(ch.isspace() or ch in "<>" for ch in tag):
            raise ValueError(f"Invalid type tag {tag!r}")

        existing = self._entries.get(tag)
        if existing is not None:
            if existing == (factory, kind):
                return
            raise ValueError(
                f"Type tag '{tag}' is already registered to {existing[0]!r} ({existing[1]})"
            )
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{tag}': registry is frozen once deserialization has started"
            )

        self._entries[tag] = (factory, kind)
        logger.debug("Registered %s type '%s'", kind, tag)

    def create(self, tag: str):
        """Return a fresh, empty instance of the variant registered under tag."""
        try:
            factory, _ = self._entries[tag]
        except KeyError:
            raise UnknownTypeError(f"No type registered for tag '{tag}'") from None
        return factory()

    def kind_of(self, tag: str) -> str:
        try:
            return self._entries[tag][1]
        except KeyError:
            raise UnknownTypeError(f"No type registered for tag '{tag}'") from None

    def tags(self, kind: Optional[str] = None) -> List[str]:
        return [t for t, (_, k) in self._entries.items() if kind is None or k == kind]

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, tag: str) -> bool:
        return tag in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Global registry instance
REGISTRY = TypeRegistry()


def register_type(cls=None, *, registry: TypeRegistry = None):
    """
    Class decorator registering a class under its own TAG and KIND.

        @register_type
        class Truss2D(Bar2D):
            TAG = "Truss2D"
    """
    def wrap(klass):
        tag = getattr(klass, "TAG", None)
        kind = getattr(klass, "KIND", None)
        if not tag or not kind:
            raise ValueError(f"{klass.__name__} must define TAG and KIND")
        target = REGISTRY if registry is None else registry
        target.register(tag, klass, kind)
        return klass

    if cls is None:
        return wrap
    return wrap(cls)
