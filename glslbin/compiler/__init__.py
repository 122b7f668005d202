"""
Shader post-processing pipeline.

This module provides the top-level interface for turning shader source into a
compiled blob: select the target dialect, run the optimizer, rewrite its output,
recover the uniform table and serialize everything.
"""

from pathlib import Path

from loguru import logger

from glslbin.compiler.diagnostics import format_code_excerpt
from glslbin.compiler.dialect import select_dialect
from glslbin.compiler.errors import (
    ConfigError,
    OptimizerDiagnosticError,
    OptimizerFailure,
)
from glslbin.compiler.models import (
    CompileOptions,
    ResourceTable,
    ShaderStage,
    TargetDialect,
)
from glslbin.compiler.optimizer import Optimizer, PassthroughOptimizer, parse_diagnostic
from glslbin.compiler.rewriter import rewrite_legacy, strip_directives
from glslbin.compiler.scanner import scan_resources
from glslbin.compiler.serializer import write_blob, write_file


def process_source(
    optimized: str, stage: ShaderStage, dialect: TargetDialect
) -> tuple[ResourceTable, str]:
    """Rewrite optimizer output and recover its resource table.

    Args:
        optimized: Optimizer output
        stage: Shader stage
        dialect: Target dialect

    Returns:
        Tuple of (resource table, final source)

    Raises:
        MalformedDeclarationError: If a declaration cannot be parsed
    """
    source = strip_directives(optimized)
    source = rewrite_legacy(source, dialect, stage)
    logger.debug("Source rewritten")

    table = scan_resources(source, dialect)
    logger.debug(f"Scanned {len(table)} uniforms")
    return table, source


def _optimize(
    optimizer: Optimizer, stage: ShaderStage, dialect: TargetDialect, source: str
) -> str:
    try:
        return optimizer.optimize(stage, dialect, source)
    except OptimizerFailure as e:
        diagnostic = parse_diagnostic(e.log)
        excerpt = format_code_excerpt(source, diagnostic.line, diagnostic.column)
        for line in excerpt.splitlines():
            logger.error(line)
        logger.error(f"Error: {diagnostic.message.strip()}")
        raise OptimizerDiagnosticError(diagnostic, excerpt) from e


def compile_shader(
    source: str,
    options: CompileOptions,
    optimizer: Optimizer | None = None,
) -> ResourceTable:
    """Compile shader source into a blob at ``options.output_path``.

    When ``options.disasm`` is set the final source is written to the
    ``.disasm`` sibling first, so a failed disassembly write leaves any
    existing blob untouched.

    Args:
        source: Raw shader source
        options: Stage, target and output options
        optimizer: Optimizer collaborator, sources are taken as already
            optimized when omitted

    Returns:
        The resource table written to the blob

    Raises:
        ConfigError: If the target options are invalid
        OptimizerDiagnosticError: If the optimizer rejects the source
        MalformedDeclarationError: If a declaration cannot be parsed
        SerializationError: If the blob cannot be written
    """
    if optimizer is None:
        optimizer = PassthroughOptimizer()

    dialect = select_dialect(options.version, options.platform)

    optimized = _optimize(optimizer, options.stage, dialect, source)
    logger.debug(f"Optimized {options.stage.name.lower()} shader for {dialect.name}")

    table, final_source = process_source(optimized, options.stage, dialect)

    if options.disasm:
        write_file(options.disasm_path, final_source.encode("utf-8"))
        logger.debug(f"Wrote disassembly to {options.disasm_path}")

    write_blob(options.output_path, table, final_source)

    return table


def compile_file(
    input_path: Path, options: CompileOptions, optimizer: Optimizer | None = None
) -> ResourceTable:
    """Read shader source from a file and compile it.

    Raises:
        ConfigError: If the file cannot be read or is not UTF-8 text
    """
    try:
        source = Path(input_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {input_path}: {e}") from e
    return compile_shader(source, options, optimizer)


__all__ = [
    "CompileOptions",
    "ShaderStage",
    "TargetDialect",
    "compile_file",
    "compile_shader",
    "process_source",
]
