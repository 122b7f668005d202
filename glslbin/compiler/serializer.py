"""
Binary blob encoding for compiled shaders.

Layout, little-endian with no padding:

    u16  resource count
    per resource:
        u8   name length
        ...  name bytes (UTF-8, no terminator)
        u8   uniform kind
        u8   array size
        u16  register index
        u16  register count
        u8   texture component
        u8   texture dimension
        u8   texture format
    u32  source length
    ...  source bytes
    u8   0

The runtime loader reads exactly this layout; any change is a format break.
"""

import os
import struct
import tempfile
from pathlib import Path

from loguru import logger

from glslbin.compiler.constants import (
    MAX_ARRAY_SIZE,
    MAX_NAME_LENGTH,
    MAX_REGISTER,
    MAX_RESOURCES,
    MAX_SOURCE_LENGTH,
)
from glslbin.compiler.errors import SerializationError
from glslbin.compiler.models import (
    CompiledBlob,
    ResourceDescriptor,
    ResourceTable,
    UniformKind,
)

_COUNT = struct.Struct("<H")
_NAME_LENGTH = struct.Struct("<B")
_RESOURCE = struct.Struct("<BBHHBBB")
_SOURCE_LENGTH = struct.Struct("<I")
_TERMINATOR = b"\0"


def _check_resource(resource: ResourceDescriptor, name: bytes) -> None:
    if len(name) > MAX_NAME_LENGTH:
        raise SerializationError(
            f"Uniform name {resource.name!r} is longer than {MAX_NAME_LENGTH} bytes"
        )
    if resource.kind is UniformKind.UNKNOWN:
        raise SerializationError(f"Uniform {resource.name!r} has an unknown type")
    if not 0 <= resource.array_size <= MAX_ARRAY_SIZE:
        raise SerializationError(
            f"Uniform {resource.name!r} array size {resource.array_size} "
            f"does not fit in a byte"
        )
    for label, value in (
        ("register index", resource.register_index),
        ("register count", resource.register_count),
    ):
        if not 0 <= value <= MAX_REGISTER:
            raise SerializationError(
                f"Uniform {resource.name!r} {label} {value} does not fit in 16 bits"
            )


def serialize(table: ResourceTable, source: str) -> bytes:
    """Encode a resource table and the final shader source.

    Args:
        table: Resources in output order
        source: Final shader source

    Returns:
        Blob bytes

    Raises:
        SerializationError: If a value does not fit its field
    """
    if len(table) > MAX_RESOURCES:
        raise SerializationError(f"Too many uniforms: {len(table)}")

    parts = [_COUNT.pack(len(table))]
    for resource in table:
        name = resource.name.encode("utf-8")
        _check_resource(resource, name)
        parts.append(_NAME_LENGTH.pack(len(name)))
        parts.append(name)
        try:
            parts.append(
                _RESOURCE.pack(
                    int(resource.kind),
                    resource.array_size,
                    resource.register_index,
                    resource.register_count,
                    resource.tex_component,
                    resource.tex_dimension,
                    resource.tex_format,
                )
            )
        except struct.error as e:
            raise SerializationError(
                f"Cannot encode uniform {resource.name!r}: {e}"
            ) from e

    code = source.encode("utf-8")
    if len(code) > MAX_SOURCE_LENGTH:
        raise SerializationError(f"Shader source too large: {len(code)} bytes")
    parts.append(_SOURCE_LENGTH.pack(len(code)))
    parts.append(code)
    parts.append(_TERMINATOR)

    return b"".join(parts)


def write_file(path: Path, data: bytes) -> None:
    """Write bytes to path, replacing it only once the write succeeded.

    Raises:
        SerializationError: If the destination cannot be written; no partial
            file is left behind and an existing file is kept unchanged
    """
    path = Path(path)
    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as f:
            tmp_name = f.name
            f.write(data)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise SerializationError(f"Failed to write {path}: {e}") from e


def write_blob(path: Path, table: ResourceTable, source: str) -> None:
    """Serialize a compiled shader and write it to path."""
    data = serialize(table, source)
    write_file(path, data)
    logger.debug(f"Wrote {len(data)} bytes ({len(table)} uniforms) to {path}")


class _Reader:
    """Sequential reader over blob bytes."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def unpack(self, fmt: struct.Struct) -> tuple[int, ...]:
        end = self.offset + fmt.size
        if end > len(self.data):
            raise SerializationError(f"Truncated blob at offset {self.offset}")
        values = fmt.unpack_from(self.data, self.offset)
        self.offset = end
        return values

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise SerializationError(f"Truncated blob at offset {self.offset}")
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk


def deserialize(data: bytes) -> CompiledBlob:
    """Decode blob bytes produced by serialize.

    Args:
        data: Blob bytes

    Returns:
        Decoded resource table and source

    Raises:
        SerializationError: If the data is truncated, unterminated or has
            trailing bytes
    """
    reader = _Reader(data)
    table = ResourceTable()

    (count,) = reader.unpack(_COUNT)
    for _ in range(count):
        (name_length,) = reader.unpack(_NAME_LENGTH)
        name = reader.take(name_length).decode("utf-8")
        kind, array_size, reg_index, reg_count, component, dimension, fmt = (
            reader.unpack(_RESOURCE)
        )
        try:
            uniform_kind = UniformKind(kind)
        except ValueError as e:
            raise SerializationError(f"Unknown uniform kind {kind} for {name!r}") from e
        table.append(
            ResourceDescriptor(
                name=name,
                kind=uniform_kind,
                array_size=array_size,
                register_index=reg_index,
                register_count=reg_count,
                tex_component=component,
                tex_dimension=dimension,
                tex_format=fmt,
            )
        )

    (source_length,) = reader.unpack(_SOURCE_LENGTH)
    source = reader.take(source_length).decode("utf-8")
    if reader.take(1) != _TERMINATOR:
        raise SerializationError("Shader source is not NUL terminated")
    if reader.offset != len(data):
        raise SerializationError(
            f"Unexpected {len(data) - reader.offset} trailing bytes in blob"
        )

    return CompiledBlob(table=table, source=source)


def read_blob(path: Path) -> CompiledBlob:
    """Read and decode a blob file."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise SerializationError(f"Failed to read {path}: {e}") from e
    return deserialize(data)
