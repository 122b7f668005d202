"""
Data models and structures for the shader post-processing compiler.

This module contains the enums and dataclass definitions shared by the scanners,
the serializer and the driver: shader stages, target dialects, uniform kinds and
the resource descriptors recovered from optimized shader source.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from pathlib import Path

from glslbin.compiler.constants import DISASM_SUFFIX
from glslbin.compiler.errors import ConfigError


class ShaderStage(Enum):
    """Shader stage being compiled, keyed by its single-letter tag."""

    VERTEX = "v"
    FRAGMENT = "f"
    COMPUTE = "c"

    @classmethod
    def parse(cls, raw: str) -> "ShaderStage":
        """Parse a stage from a tag (``v``/``f``/``c``) or a full name.

        Args:
            raw: Stage tag or name, case-insensitive

        Returns:
            The matching shader stage

        Raises:
            ConfigError: If the value does not name a stage
        """
        text = raw.strip().lower()
        for stage in cls:
            if text in (stage.value, stage.name.lower()):
                return stage
        raise ConfigError(
            f"Unknown shader stage: {raw!r} (expected one of v, f, c, "
            "vertex, fragment, compute)"
        )


class TargetDialect(Enum):
    """Shading language output shapes produced by the optimizer."""

    DESKTOP_GL = auto()
    GLES2 = auto()
    GLES3 = auto()
    METAL = auto()

    @property
    def is_metal(self) -> bool:
        """Whether the dialect is the C-like struct (Metal-like) dialect."""
        return self is TargetDialect.METAL


class UniformKind(IntEnum):
    """Uniform types understood by the runtime loader.

    The integer values are the on-disk encoding and must not change.
    """

    INT = 0
    END = 1
    VEC4 = 2
    MAT3 = 3
    MAT4 = 4
    UNKNOWN = 5

    @property
    def rows(self) -> int:
        """Number of registers one array element of this kind occupies."""
        if self is UniformKind.MAT3:
            return 3
        if self is UniformKind.MAT4:
            return 4
        return 1


@dataclass
class ResourceDescriptor:
    """One externally bindable resource recovered from shader source.

    Attributes:
        name: Binding name as written in the source
        kind: Uniform kind
        array_size: Number of array elements, 1 for non-arrays
        register_index: First register slot, 0 unless annotated
        register_count: Number of registers consumed
        tex_component: Opaque texture metadata, carried through as zero
        tex_dimension: Opaque texture metadata, carried through as zero
        tex_format: Opaque texture metadata, carried through as zero
    """

    name: str
    kind: UniformKind
    array_size: int = 1
    register_index: int = 0
    register_count: int = 1
    tex_component: int = 0
    tex_dimension: int = 0
    tex_format: int = 0

    @classmethod
    def for_declaration(
        cls,
        name: str,
        kind: UniformKind,
        array_size: int = 1,
        matrix_rows: bool = True,
    ) -> "ResourceDescriptor":
        """Build a descriptor with the register count derived from its kind.

        Args:
            name: Binding name
            kind: Uniform kind
            array_size: Declared array size
            matrix_rows: Multiply by the matrix row count (GL-style dialects)

        Returns:
            New descriptor starting at register 0
        """
        count = array_size * kind.rows if matrix_rows else array_size
        return cls(
            name=name, kind=kind, array_size=array_size, register_count=count
        )

    @classmethod
    def for_texture(cls, name: str, register_index: int) -> "ResourceDescriptor":
        """Build a descriptor for an annotated texture parameter."""
        return cls(
            name=name,
            kind=UniformKind.INT,
            array_size=1,
            register_index=register_index,
            register_count=1,
        )


@dataclass
class ResourceTable:
    """Ordered resource descriptors in first-seen source order.

    Duplicate names are kept; the table is a name list, not a name set.
    """

    resources: list[ResourceDescriptor] = field(default_factory=list)

    def append(self, resource: ResourceDescriptor) -> None:
        self.resources.append(resource)

    def extend(self, other: "ResourceTable") -> None:
        self.resources.extend(other.resources)

    def names(self) -> list[str]:
        return [resource.name for resource in self.resources]

    def __iter__(self) -> Iterator[ResourceDescriptor]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)

    def __getitem__(self, index: int) -> ResourceDescriptor:
        return self.resources[index]


@dataclass(frozen=True)
class CompiledBlob:
    """Decoded contents of a compiled shader blob.

    Attributes:
        table: Resource table in serialized order
        source: Final shader source without the trailing NUL
    """

    table: ResourceTable
    source: str


@dataclass(frozen=True)
class CompileOptions:
    """Options for a single shader compilation.

    Attributes:
        stage: Shader stage being compiled
        output_path: Destination of the compiled blob
        version: Numeric target version code
        platform: Optional four-character target platform tag
        disasm: Also write the final source next to the blob
    """

    stage: ShaderStage
    output_path: Path
    version: int = 0
    platform: str | None = None
    disasm: bool = False

    @property
    def disasm_path(self) -> Path:
        return self.output_path.with_name(self.output_path.name + DISASM_SUFFIX)


@dataclass(frozen=True)
class Diagnostic:
    """Location and message reported by the optimizer.

    Attributes:
        line: 1-based source line, 0 when unknown
        column: Source column, 0 when unknown
        message: Full optimizer log text
    """

    line: int
    column: int
    message: str
