"""
Exceptions and error handling for the shader post-processing compiler.

This module defines the exceptions raised while optimizing, scanning and
serializing a shader. Every error derives from CompilerError so callers of the
compile entry point can handle one exception type.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from glslbin.compiler.models import Diagnostic


class CompilerError(Exception):
    """Exception raised for errors during shader compilation.

    This is the main exception class used throughout the compiler to report
    errors in a user-friendly way. When the offending source line is known it is
    appended to the message.

    Examples:
        >>> raise CompilerError("Unexpected end of declaration", lineno=4)
        CompilerError: Unexpected end of declaration at line 4
    """

    def __init__(self, message: str, lineno: int | None = None):
        """Initialize the exception with a message and optional line number.

        Args:
            message: The error message
            lineno: Optional 1-based source line where the error occurred
        """
        self.message = message
        self.lineno = lineno

        location_info = ""
        if lineno:
            location_info = f" at line {lineno}"

        super().__init__(f"{message}{location_info}")


class ConfigError(CompilerError):
    """Invalid compile options (stage, target version, optimizer command)."""


class MalformedDeclarationError(CompilerError):
    """A declaration could not be parsed by the resource scanner."""


class SerializationError(CompilerError):
    """A blob could not be encoded, written or decoded."""


class OptimizerFailure(CompilerError):
    """Raised by optimizer adapters when the optimizer rejects the source.

    Attributes:
        log: Raw optimizer log text
    """

    def __init__(self, log: str):
        self.log = log
        super().__init__(log.strip() or "Optimizer failed without a log")


class OptimizerDiagnosticError(CompilerError):
    """Compilation stopped on an optimizer diagnostic.

    Attributes:
        diagnostic: Parsed line, column and message
        excerpt: Source context printed around the reported line
    """

    def __init__(self, diagnostic: "Diagnostic", excerpt: str):
        self.diagnostic = diagnostic
        self.excerpt = excerpt
        super().__init__(
            f"Optimizer error: {diagnostic.message.strip()}",
            lineno=diagnostic.line or None,
        )
