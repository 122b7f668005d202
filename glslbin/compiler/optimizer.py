"""
Adapters for the external shader optimizer.

The optimizer itself is not part of this package. The compiler only needs a
callable that turns raw source into optimized source for a stage and dialect,
or raises OptimizerFailure with the optimizer log.
"""

import re
import shlex
import subprocess
from typing import Protocol

from loguru import logger

from glslbin.compiler.errors import ConfigError, OptimizerFailure
from glslbin.compiler.models import Diagnostic, ShaderStage, TargetDialect

# "0:12(4): error ..." (source:line(column)) and "(12,4): error ..."
_SOURCE_LINE_COLUMN_RE = re.compile(r"^\s*(\d+):(\d+)\((\d+)\):")
_LINE_COLUMN_RE = re.compile(r"^\s*\((\d+),(\d+)\):")


class Optimizer(Protocol):
    """Interface of the shader optimizer collaborator."""

    def optimize(self, stage: ShaderStage, dialect: TargetDialect, source: str) -> str:
        """Optimize shader source.

        Args:
            stage: Shader stage
            dialect: Output dialect
            source: Raw shader source

        Returns:
            Optimized source for the dialect

        Raises:
            OptimizerFailure: If the source is rejected
        """
        ...


class PassthroughOptimizer:
    """Optimizer for sources that were already optimized."""

    def optimize(self, stage: ShaderStage, dialect: TargetDialect, source: str) -> str:
        return source


class CommandOptimizer:
    """Run an external optimizer executable.

    The source is written to the process's stdin and the optimized source is
    read from stdout. ``--stage`` and ``--target`` arguments are appended to the
    command. A non-zero exit status is a failure and stderr is its log.
    """

    def __init__(self, command: str | list[str]):
        if isinstance(command, str):
            command = shlex.split(command)
        if not command:
            raise ConfigError("Optimizer command is empty")
        self.command = list(command)

    def arguments(self, stage: ShaderStage, dialect: TargetDialect) -> list[str]:
        return [
            *self.command,
            "--stage",
            stage.name.lower(),
            "--target",
            dialect.name.lower(),
        ]

    def optimize(self, stage: ShaderStage, dialect: TargetDialect, source: str) -> str:
        args = self.arguments(stage, dialect)
        logger.debug(f"Running optimizer: {shlex.join(args)}")
        try:
            result = subprocess.run(
                args, input=source, capture_output=True, text=True, check=False
            )
        except FileNotFoundError as e:
            raise ConfigError(f"Optimizer executable not found: {args[0]}") from e
        except PermissionError as e:
            raise ConfigError(f"Optimizer executable not runnable: {args[0]}") from e

        if result.returncode != 0:
            raise OptimizerFailure(result.stderr or result.stdout)
        return result.stdout


def parse_diagnostic(log: str) -> Diagnostic:
    """Extract the reported location from an optimizer log.

    Args:
        log: Optimizer log text

    Returns:
        Diagnostic with line and column set to 0 when no location is found
    """
    match = _SOURCE_LINE_COLUMN_RE.match(log)
    if match:
        return Diagnostic(int(match.group(2)), int(match.group(3)), log)
    match = _LINE_COLUMN_RE.match(log)
    if match:
        return Diagnostic(int(match.group(1)), int(match.group(2)), log)
    return Diagnostic(0, 0, log)
