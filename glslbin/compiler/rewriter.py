"""
Source rewriting applied to optimizer output before scanning.

Strips leading preprocessor directives, maps deprecated extension-suffixed
function names to their core names and forces high precision in vertex shaders.
"""

import re

from glslbin.compiler.constants import (
    FORCED_PRECISION,
    LEGACY_REPLACEMENTS,
    REDUCED_PRECISION_QUALIFIERS,
)
from glslbin.compiler.models import ShaderStage, TargetDialect

_REDUCED_PRECISION_RE = re.compile("|".join(REDUCED_PRECISION_QUALIFIERS))


def strip_directives(source: str) -> str:
    """Remove every leading line that starts with ``#``.

    Only the directive block at the very top is removed; directives further
    down are left alone.

    Args:
        source: Optimizer output

    Returns:
        Source starting at the first non-directive line
    """
    while source.startswith("#"):
        newline = source.find("\n")
        if newline == -1:
            return ""
        source = source[newline + 1 :]
    return source


def replace_legacy_names(source: str) -> str:
    """Apply the deprecated-name replacement table."""
    for legacy, canonical in LEGACY_REPLACEMENTS:
        source = source.replace(legacy, canonical)
    return source


def force_high_precision(source: str) -> str:
    """Replace every ``lowp`` and ``mediump`` with ``highp``."""
    return _REDUCED_PRECISION_RE.sub(FORCED_PRECISION, source)


def rewrite_legacy(source: str, dialect: TargetDialect, stage: ShaderStage) -> str:
    """Rewrite optimizer output for the runtime.

    Metal-like output is returned unchanged: it never contains the legacy
    names and has no precision qualifiers.

    Args:
        source: Directive-free optimizer output
        dialect: Target dialect
        stage: Shader stage

    Returns:
        Rewritten source
    """
    if dialect.is_metal:
        return source

    source = replace_legacy_names(source)

    # Some drivers misbehave with reduced vertex precision
    if stage is ShaderStage.VERTEX:
        source = force_high_precision(source)

    return source
