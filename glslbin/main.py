"""Command line interface for glslbin.

This module provides a command-line interface for compiling optimized shader
source into binary blobs and for inspecting existing blobs.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import typer
from loguru import logger

from glslbin.compiler import compile_file
from glslbin.compiler.dialect import select_dialect
from glslbin.compiler.errors import CompilerError
from glslbin.compiler.models import CompileOptions, ShaderStage
from glslbin.compiler.optimizer import CommandOptimizer, Optimizer, PassthroughOptimizer
from glslbin.compiler.serializer import read_blob

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="glslbin",
    help=(
        "Compile optimized GLSL and Metal shader source into binary blobs. "
        "Commands: compile, inspect, dialect."
    ),
    add_completion=False,
)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        lambda message: typer.echo(message, err=True, nl=False),
        level="DEBUG" if verbose else "INFO",
        format="<level>{level: <8}</level> | {message}",
    )


def _make_optimizer(command: str | None) -> Optimizer:
    if command:
        return CommandOptimizer(command)
    return PassthroughOptimizer()


# Define reusable arguments
SOURCE_ARG = typer.Argument(
    ..., exists=True, dir_okay=False, readable=True, help="Shader source file"
)
OUTPUT_ARG = typer.Argument(..., dir_okay=False, help="Output blob path")
BLOB_ARG = typer.Argument(..., exists=True, dir_okay=False, help="Compiled blob")


@typed_command(app.command("compile"))
def compile_command(
    source: Path = SOURCE_ARG,
    output: Path = OUTPUT_ARG,
    stage: str = typer.Option(
        "f", "--stage", "-s", help="Shader stage (v, f, c or full name)"
    ),
    version: int = typer.Option(
        0, "--version", "-p", help="Target version code (ES versions set bit 31)"
    ),
    platform: str | None = typer.Option(
        None, "--platform", help="Four-character platform tag (MTL for Metal)"
    ),
    disasm: bool = typer.Option(
        False, "--disasm", help="Also write the final source to OUTPUT.disasm"
    ),
    optimizer: str | None = typer.Option(
        None,
        "--optimizer",
        envvar="GLSLBIN_OPTIMIZER",
        help="Optimizer command; the source is used as-is when omitted",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Compile shader source into a blob.

    Runs the optimizer, rewrites legacy names, recovers the uniform table and
    writes the blob.

    Example: glslbin compile fs_mesh.sc.opt fs_mesh.bin --stage f --version 150
    """
    _configure_logging(verbose)
    try:
        options = CompileOptions(
            stage=ShaderStage.parse(stage),
            output_path=output,
            version=version,
            platform=platform,
            disasm=disasm,
        )
        table = compile_file(source, options, _make_optimizer(optimizer))
    except CompilerError as e:
        logger.error(f"Failed to compile {source}: {e}")
        raise typer.Exit(1) from e

    logger.info(f"Compiled {source} -> {output} ({len(table)} uniforms)")
    if disasm:
        logger.info(f"Disassembly written to {options.disasm_path}")


@typed_command(app.command("inspect"))
def inspect_command(
    blob: Path = BLOB_ARG,
    show_source: bool = typer.Option(
        False, "--source", help="Print the embedded shader source"
    ),
) -> None:
    """Print the uniform table stored in a compiled blob.

    Example: glslbin inspect fs_mesh.bin
    """
    try:
        compiled = read_blob(blob)
    except CompilerError as e:
        logger.error(f"Failed to read {blob}: {e}")
        raise typer.Exit(1) from e

    typer.echo(f"uniforms: {len(compiled.table)}")
    for resource in compiled.table:
        typer.echo(
            f"  {resource.name} {resource.kind.name.lower()} "
            f"num={resource.array_size} reg={resource.register_index} "
            f"count={resource.register_count}"
        )
    typer.echo(f"source: {len(compiled.source.encode('utf-8'))} bytes")
    if show_source:
        typer.echo(compiled.source)


@typed_command(app.command("dialect"))
def dialect_command(
    version: int = typer.Option(0, "--version", "-p", help="Target version code"),
    platform: str | None = typer.Option(None, "--platform", help="Platform tag"),
) -> None:
    """Print the dialect selected for a target version and platform."""
    try:
        dialect = select_dialect(version, platform)
    except CompilerError as e:
        logger.error(str(e))
        raise typer.Exit(1) from e
    typer.echo(dialect.name)


if __name__ == "__main__":
    app()
