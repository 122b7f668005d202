from glslbin.compiler import compile_file, compile_shader, process_source
from glslbin.compiler.models import (
    CompileOptions,
    ResourceDescriptor,
    ResourceTable,
    ShaderStage,
    TargetDialect,
    UniformKind,
)
from glslbin.compiler.serializer import deserialize, read_blob, serialize

__version__ = "0.1.0"


__all__ = [
    "CompileOptions",
    "ResourceDescriptor",
    "ResourceTable",
    "ShaderStage",
    "TargetDialect",
    "UniformKind",
    "compile_file",
    "compile_shader",
    "deserialize",
    "process_source",
    "read_blob",
    "serialize",
]
