# mini_fem/errors.py
"""
Error kinds raised by the FEM kernel.

All of them derive from FEMError so callers can catch the whole family.
Load-time errors (unknown tags, malformed or out-of-order records, dangling
references) abort the entire read; no partial mesh is ever returned.
"""


class FEMError(RuntimeError):
    """Base class for every error raised by mini_fem."""
    pass


class UnknownTypeError(FEMError):
    """A type tag was never registered."""
    pass


class RegistryFrozenError(FEMError):
    """Registration attempted after the registry was frozen."""
    pass


class MalformedRecordError(FEMError):
    """A record could not be parsed."""

    def __init__(self, message: str, line: int = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class RecordOrderError(MalformedRecordError):
    """A record appeared outside the block it belongs to."""
    pass


class DuplicateIdError(MalformedRecordError):
    """Two entities of the same kind share a global number."""
    pass


class DanglingReferenceError(FEMError):
    """An element or load references an entity that does not exist (yet)."""
    pass


class UnresolvedReferenceError(FEMError):
    """Stiffness or load computation attempted before Mesh.resolve()."""
    pass


class MaterialPropertyError(FEMError):
    """A material does not define a requested property."""
    pass


class UnsupportedLoadError(FEMError):
    """An element variant cannot take a given load kind."""
    pass


class SingularSystemError(FEMError):
    """Raised when the structure is unstable or ill-conditioned."""
    pass
