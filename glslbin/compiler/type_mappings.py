"""Shader type name to uniform kind mappings."""

from glslbin.compiler.models import UniformKind

# Type names emitted by the optimizer for each dialect family
UNIFORM_TYPE_NAMES: dict[str, UniformKind] = {
    # GL-style
    "int": UniformKind.INT,
    "vec4": UniformKind.VEC4,
    "mat3": UniformKind.MAT3,
    "mat4": UniformKind.MAT4,
    # Metal-like
    "float4": UniformKind.VEC4,
    "float3x3": UniformKind.MAT3,
    "float4x4": UniformKind.MAT4,
}

# Samplers are bound as integer texture-unit handles
SAMPLER_PREFIXES: tuple[str, ...] = ("sampler", "isampler", "usampler")


def normalize_type_name(type_name: str) -> str:
    """Collapse every sampler type to ``int``."""
    if type_name.startswith(SAMPLER_PREFIXES):
        return "int"
    return type_name


def uniform_kind(type_name: str) -> UniformKind:
    """Map a declared type name to its uniform kind.

    Args:
        type_name: Type as written in the declaration

    Returns:
        Matching kind, or UniformKind.UNKNOWN for unsupported types
    """
    return UNIFORM_TYPE_NAMES.get(normalize_type_name(type_name), UniformKind.UNKNOWN)
