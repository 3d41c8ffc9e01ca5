# mini_fem/io.py
"""
MESH FILES: Reading and Writing the Text Format
===============================================

FORMAT:
-------
A mesh file is four blocks in a fixed order, each closed by <END>:

    nodes, materials, elements, loads

Every record starts with its type tag in angle brackets, followed by the
variant's fields in fixed order. '%' starts a comment that runs to the end
of the line. Whitespace and line breaks between fields are not significant.

    <Node>
        0               % Global number
        2 0.0 0.0       % Coordinates (count, values)
    <Node>
        1
        2 1.0 0.0
    <END>
    <MaterialStandard>
        0
        E : 1.0
        A : 1.0
        END:
    <END>
    <Bar2D>
        0               % Global number
        0 1             % Node numbers
        0               % Material number
    <END>
    <LoadNode>
        0
        0               % Element number
        1               % Point number within the element
        2 1.0 0.0       % Force vector
    <END>

READ PROTOCOL:
--------------
For each record: read the tag, ask the registry for an empty instance of
that variant, let the instance read its own fields. References (node and
material numbers in elements, element numbers in loads) are checked
against what has already been read, so an element can only reference
nodes/materials from the blocks before it and a load only elements.
Once every block is in, Mesh.resolve() links the live objects.

Any problem aborts the whole read. The partially built mesh is dropped
and the error propagates to the caller.
"""

import io
import logging
from collections import deque
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np

from .catalog import init_types
from .config import CONFIG, FEMConfig
from .errors import (
    DanglingReferenceError,
    DuplicateIdError,
    FEMError,
    MalformedRecordError,
    RecordOrderError,
)
from .model import Mesh
from .registry import KINDS, TypeRegistry

logger = logging.getLogger(__name__)

END_MARKER = "<END>"


class TokenStream:
    """
    Whitespace-separated tokens of a text stream, with comments removed.

    ':' is always a token of its own, so "E:1.0", "E : 1.0" and "E :1.0"
    all read the same. `line` is the line number of the last token taken.
    """

    def __init__(self, stream: Iterable, comment_char: str = "%"):
        self._lines = iter(stream)
        self._comment_char = comment_char
        self._pending = deque()
        self._lineno = 0
        self.line = 0

    def _fill(self) -> bool:
        while not self._pending:
            try:
                raw = next(self._lines)
            except StopIteration:
                return False
            self._lineno += 1
            if isinstance(raw, bytes):
                try:
                    raw = raw.decode("utf-8")
                except UnicodeDecodeError as e:
                    raise MalformedRecordError(f"invalid UTF-8 at byte {e.start}", self._lineno) from None
            text = raw.split(self._comment_char, 1)[0].replace(":", " : ")
            self._pending.extend((tok, self._lineno) for tok in text.split())
        return True

    def peek(self) -> Optional[str]:
        if not self._fill():
            return None
        return self._pending[0][0]

    def next(self, what: str = "token") -> str:
        if not self._fill():
            raise MalformedRecordError(f"unexpected end of stream while reading {what}", self._lineno)
        token, self.line = self._pending.popleft()
        return token

    def expect(self, expected: str) -> None:
        token = self.next(repr(expected))
        if token != expected:
            raise MalformedRecordError(f"expected {expected!r}, found {token!r}", self.line)

    def read_int(self, what: str = "integer") -> int:
        token = self.next(what)
        try:
            return int(token)
        except ValueError:
            raise MalformedRecordError(f"invalid {what}: {token!r} is not an integer", self.line) from None

    def read_float(self, what: str = "number") -> float:
        token = self.next(what)
        try:
            return float(token)
        except ValueError:
            raise MalformedRecordError(f"invalid {what}: {token!r} is not a number", self.line) from None

    def read_vector(self, what: str = "vector") -> np.ndarray:
        """Read a count followed by that many floats."""
        n = self.read_int(f"{what} size")
        if n < 0:
            raise MalformedRecordError(f"invalid {what} size {n}", self.line)
        return np.array([self.read_float(what) for _ in range(n)], dtype=float)


class ReadContext:
    """
    What a record may reference while it is being read: the entities of
    the earlier blocks (and earlier records of the same block).
    """

    def __init__(self, mesh: Mesh):
        self._mesh = mesh

    def _lookup(self, table: dict, what: str, ref_id: int, referrer):
        try:
            return table[ref_id]
        except KeyError:
            who = f"{referrer.TAG} {referrer.id}" if referrer is not None else "record"
            raise DanglingReferenceError(
                f"{who} references {what} {ref_id}, which has not been read"
            ) from None

    def node(self, node_id: int, referrer=None):
        return self._lookup(self._mesh.nodes, "node", node_id, referrer)

    def material(self, material_id: int, referrer=None):
        return self._lookup(self._mesh.materials, "material", material_id, referrer)

    def element(self, element_id: int, referrer=None):
        return self._lookup(self._mesh.elements, "element", element_id, referrer)

    def elements(self) -> list:
        return list(self._mesh.elements.values())


def _parse_marker(token: str, line: int) -> str:
    if len(token) < 3 or not (token.startswith("<") and token.endswith(">")):
        raise MalformedRecordError(f"expected a <Tag> record marker, found {token!r}", line)
    return token[1:-1]


def read_mesh(
    stream: Iterable,
    registry: Optional[TypeRegistry] = None,
    config: Optional[FEMConfig] = None,
) -> Mesh:
    """
    Read a complete mesh from a text stream (any iterable of lines).

    Returns a resolved Mesh. Raises UnknownTypeError, MalformedRecordError
    (incl. RecordOrderError, DuplicateIdError) or DanglingReferenceError;
    nothing of a failed read is kept.
    """
    config = config or CONFIG
    registry = init_types(registry)
    registry.freeze()

    tokens = TokenStream(stream, config.comment_char)
    mesh = Mesh()
    context = ReadContext(mesh)

    try:
        for kind in KINDS:
            count = 0
            while True:
                token = tokens.next(f"{kind} record or {END_MARKER}")
                if token == END_MARKER:
                    break
                tag = _parse_marker(token, tokens.line)
                record_kind = registry.kind_of(tag)
                if record_kind != kind:
                    raise RecordOrderError(
                        f"<{tag}> is a {record_kind} record but the {kind} block is open "
                        f"(blocks must appear in the order {', '.join(KINDS)})",
                        tokens.line,
                    )
                obj = registry.create(tag)
                obj.read(tokens, context)
                try:
                    mesh.add(obj)
                except DuplicateIdError as e:
                    raise DuplicateIdError(str(e), tokens.line) from None
                count += 1
            logger.debug("Read %d %s record(s)", count, kind)

        leftover = tokens.peek()
        if leftover is not None:
            tokens.next()
            raise MalformedRecordError(f"unexpected data after the loads block: {leftover!r}", tokens.line)

        mesh.resolve()
    except FEMError as e:
        logger.error("Mesh load aborted: %s", e)
        raise

    logger.info("Loaded mesh: %s", mesh.summary())
    return mesh


class MeshWriter:
    """Text sink that knows how floats are formatted."""

    def __init__(self, out, float_format: str):
        self._out = out
        self.float_format = float_format

    def write(self, text: str) -> None:
        self._out.write(text)


def write_mesh(mesh: Mesh, out, config: Optional[FEMConfig] = None) -> None:
    """Write mesh to a text stream; read_mesh() reproduces it exactly."""
    config = config or CONFIG
    writer = MeshWriter(out, config.float_format())
    tables = {
        "node": mesh.nodes,
        "material": mesh.materials,
        "element": mesh.elements,
        "load": mesh.loads,
    }
    writer.write(f"{config.comment_char} mini_fem mesh\n")
    for kind in KINDS:
        for obj in tables[kind].values():
            obj.write(writer)
        writer.write(f"{END_MARKER}\t{config.comment_char} End of {kind} block\n")
    logger.debug("Wrote mesh: %s", mesh.summary())


def loads_mesh(text: str, registry: Optional[TypeRegistry] = None) -> Mesh:
    return read_mesh(io.StringIO(text), registry=registry)


def dumps_mesh(mesh: Mesh) -> str:
    buf = io.StringIO()
    write_mesh(mesh, buf)
    return buf.getvalue()


def load_mesh_file(path: Union[str, Path], registry: Optional[TypeRegistry] = None) -> Mesh:
    logger.info("Reading mesh file: %s", path)
    with open(path, "r", encoding="utf-8") as f:
        return read_mesh(f, registry=registry)


def save_mesh_file(mesh: Mesh, path: Union[str, Path]) -> None:
    logger.info("Saving mesh file: %s", path)
    with open(path, "w", encoding="utf-8") as f:
        write_mesh(mesh, f)
