"""
Constants and predefined values for the shader post-processing compiler.

This module contains the replacement tables, keyword sets and text markers used
by the rewriter and the resource scanners, and the fixed values of the blob
format.
"""

# Deprecated extension-suffixed names and their core replacements, applied in
# order. No replacement contains a key, so applying the table twice is a no-op.
LEGACY_REPLACEMENTS: list[tuple[str, str]] = [
    ("gl_FragDepthEXT", "gl_FragDepth"),
    ("textureLodEXT", "texture2DLod"),
    ("textureGradEXT", "texture2DGrad"),
    ("texture2DLodARB", "texture2DLod"),
    ("texture2DLodEXT", "texture2DLod"),
    ("texture2DGradARB", "texture2DGrad"),
    ("texture2DGradEXT", "texture2DGrad"),
    ("textureCubeLodARB", "textureCubeLod"),
    ("textureCubeLodEXT", "textureCubeLod"),
    ("textureCubeGradARB", "textureCubeGrad"),
    ("textureCubeGradEXT", "textureCubeGrad"),
    ("texture2DProjLodARB", "texture2DProjLod"),
    ("texture2DProjLodEXT", "texture2DProjLod"),
    ("texture2DProjGradARB", "texture2DProjGrad"),
    ("texture2DProjGradEXT", "texture2DProjGrad"),
    ("shadow2DARB", "shadow2D"),
    ("shadow2DEXT", "shadow2D"),
    ("shadow2DProjARB", "shadow2DProj"),
    ("shadow2DProjEXT", "shadow2DProj"),
]

# Precision qualifiers
PRECISION_QUALIFIERS = frozenset({"lowp", "mediump", "highp"})
REDUCED_PRECISION_QUALIFIERS = ("lowp", "mediump")
FORCED_PRECISION = "highp"

# Leading words of top-level statements that never declare a bindable resource
PRECISION_STATEMENT = "precision"
STAGE_IO_QUALIFIERS = frozenset({"attribute", "varying", "in", "out"})
INTERPOLATION_QUALIFIERS = frozenset({"flat", "smooth", "noperspective", "centroid"})
UNIFORM_QUALIFIER = "uniform"
TEMPORARY_PREFIX = "tmpvar"

# Metal-like output markers
METAL_UNIFORM_STRUCT = "struct xlatMtlShaderUniform {"
METAL_STRUCT_END = "};"
METAL_ENTRY_POINT = "xlatMtlShaderOutput xlatMtlMain ("
METAL_TEXTURE_ANNOTATION = "[[texture("

# Target selection
METAL_PLATFORM_TAG = "MTL"
GLES_VERSION_BIT = 0x80000000
GLES3_MIN_VERSION = 300

# Diagnostics
CONTEXT_LINES_BEFORE = 10
CONTEXT_WINDOW_LINES = 20

# Output
DISASM_SUFFIX = ".disasm"
MAX_NAME_LENGTH = 0xFF
MAX_ARRAY_SIZE = 0xFF
MAX_REGISTER = 0xFFFF
MAX_RESOURCES = 0xFFFF
MAX_SOURCE_LENGTH = 0xFFFFFFFF
