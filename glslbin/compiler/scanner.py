"""
Resource declaration scanners for optimized shader source.

The optimizer output no longer carries uniform metadata, so the bindable
resources are recovered by scanning the text. There is no parser here: each
scanner walks the source forward with a Cursor and only understands the narrow,
order-dependent shapes the optimizer emits.

GL-style dialects (desktop GL, GLES2, GLES3) declare uniforms as top-level
statements ahead of any code. The Metal-like dialect packs them into a uniform
struct and passes textures as annotated entry point parameters.
"""

from dataclasses import dataclass

from loguru import logger

from glslbin.compiler.constants import (
    INTERPOLATION_QUALIFIERS,
    MAX_ARRAY_SIZE,
    MAX_REGISTER,
    METAL_ENTRY_POINT,
    METAL_STRUCT_END,
    METAL_TEXTURE_ANNOTATION,
    METAL_UNIFORM_STRUCT,
    PRECISION_QUALIFIERS,
    PRECISION_STATEMENT,
    STAGE_IO_QUALIFIERS,
    TEMPORARY_PREFIX,
    UNIFORM_QUALIFIER,
)
from glslbin.compiler.errors import MalformedDeclarationError
from glslbin.compiler.models import (
    ResourceDescriptor,
    ResourceTable,
    TargetDialect,
    UniformKind,
)
from glslbin.compiler.type_mappings import uniform_kind


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class Cursor:
    """Forward-only position inside a bounded region of a source string.

    Attributes:
        text: Full source text, never modified
        pos: Current offset into text
        end: Exclusive end offset of the region
    """

    def __init__(self, text: str, pos: int = 0, end: int | None = None):
        self.text = text
        self.pos = pos
        self.end = len(text) if end is None else end

    @property
    def at_end(self) -> bool:
        return self.pos >= self.end

    @property
    def lineno(self) -> int:
        """1-based line number of the current position."""
        return self.text.count("\n", 0, self.pos) + 1

    def peek(self) -> str:
        """Return the current character, or an empty string at the end."""
        if self.at_end:
            return ""
        return self.text[self.pos]

    def advance(self, count: int = 1) -> None:
        self.pos = min(self.pos + count, self.end)

    def jump(self, pos: int) -> None:
        if pos < self.pos:
            raise ValueError(f"Cursor cannot move backwards ({pos} < {self.pos})")
        self.pos = min(pos, self.end)

    def skip_space(self) -> None:
        while not self.at_end and self.text[self.pos].isspace():
            self.pos += 1

    def skip_line(self) -> None:
        """Move to the start of the next line, or to the end."""
        newline = self.find("\n")
        self.pos = self.end if newline == -1 else newline + 1

    def find(self, token: str) -> int:
        """Offset of the next occurrence of token in the region, or -1."""
        return self.text.find(token, self.pos, self.end)

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos, self.end)

    def read_word(self) -> str:
        """Skip whitespace and read an identifier (letters, digits, underscore)."""
        self.skip_space()
        start = self.pos
        while not self.at_end and _is_word_char(self.text[self.pos]):
            self.pos += 1
        return self.text[start : self.pos]

    def read_token(self) -> str:
        """Skip whitespace and read a whitespace-delimited token."""
        self.skip_space()
        start = self.pos
        while not self.at_end and not self.text[self.pos].isspace():
            self.pos += 1
        return self.text[start : self.pos]

    def rest(self) -> str:
        return self.text[self.pos : self.end]

    def region(self, end: int) -> "Cursor":
        """Cursor over [pos, end) of the same text."""
        return Cursor(self.text, self.pos, min(end, self.end))


def parse_count(text: str, what: str, lineno: int, maximum: int) -> int:
    """Parse a decimal count written in a declaration.

    Args:
        text: Digits, surrounding whitespace allowed
        what: Description used in the error message
        lineno: Source line for error reporting
        maximum: Largest accepted value

    Returns:
        Parsed value

    Raises:
        MalformedDeclarationError: If the text is not a decimal integer in range
    """
    digits = text.strip()
    if not digits.isdigit() or not digits.isascii():
        raise MalformedDeclarationError(f"Invalid {what}: {text!r}", lineno)
    value = int(digits)
    if value > maximum:
        raise MalformedDeclarationError(
            f"{what.capitalize()} {value} exceeds {maximum}", lineno
        )
    return value


def _leading_digits(cursor: Cursor) -> str:
    cursor.skip_space()
    start = cursor.pos
    while not cursor.at_end and cursor.text[cursor.pos].isdigit():
        cursor.pos += 1
    return cursor.text[start : cursor.pos]


def _trace(resource: ResourceDescriptor) -> None:
    logger.debug(
        f"name: {resource.name} (type {resource.kind.name}, "
        f"num {resource.array_size}, reg {resource.register_index}, "
        f"count {resource.register_count})"
    )


@dataclass(frozen=True)
class GLStyleScanner:
    """Scanner for desktop GL and GLES output.

    Uniform declarations are expected ahead of any executable code. Precision
    statements, stage inputs/outputs, interpolation-qualified declarations and
    optimizer temporaries are skipped; any other statement that is not a
    uniform declaration ends the scan.
    """

    def scan(self, source: str) -> ResourceTable:
        table = ResourceTable()
        cursor = Cursor(source)

        while True:
            cursor.skip_space()
            eol = cursor.find(";")
            if eol == -1:
                break

            qualifier = cursor.read_word()

            if self._is_skipped(qualifier, cursor):
                cursor.jump(eol + 1)
                continue

            if qualifier != UNIFORM_QUALIFIER:
                logger.debug(
                    f"Header scan stopped at line {cursor.lineno} "
                    f"on {qualifier or cursor.peek()!r}"
                )
                break

            resource = self._parse_uniform(cursor.region(eol))
            if resource.kind is UniformKind.UNKNOWN:
                logger.debug(f"Dropping uniform {resource.name} of unsupported type")
            else:
                _trace(resource)
                table.append(resource)

            cursor.jump(eol + 1)
            cursor.skip_line()

        return table

    @staticmethod
    def _is_skipped(qualifier: str, cursor: Cursor) -> bool:
        if qualifier == PRECISION_STATEMENT:
            return True
        if qualifier in STAGE_IO_QUALIFIERS or qualifier in INTERPOLATION_QUALIFIERS:
            return True
        # Temporaries: "tmpvar_1 = ...;" or "vec4 tmpvar_1;"
        if qualifier.startswith(TEMPORARY_PREFIX):
            return True
        cursor.skip_space()
        return cursor.startswith(TEMPORARY_PREFIX)

    @staticmethod
    def _parse_uniform(statement: Cursor) -> ResourceDescriptor:
        """Parse the remainder of ``uniform [precision] type name[size]``."""
        lineno = statement.lineno
        declaration = statement.rest().strip()

        type_name = statement.read_word()
        if type_name in PRECISION_QUALIFIERS:
            type_name = statement.read_word()

        if not type_name:
            raise MalformedDeclarationError(
                f"Incomplete uniform declaration: {declaration!r}", lineno
            )

        kind = uniform_kind(type_name)
        name = statement.read_word()
        # Blocks and unsupported types are dropped by the caller
        if kind is UniformKind.UNKNOWN:
            return ResourceDescriptor.for_declaration(name or type_name, kind)

        if not name:
            raise MalformedDeclarationError(
                f"Incomplete uniform declaration: {declaration!r}", lineno
            )

        array_size = 1
        statement.skip_space()
        if statement.peek() == "[":
            statement.advance()
            digits = _leading_digits(statement)
            array_size = parse_count(
                digits or statement.rest(), "array size", lineno, MAX_ARRAY_SIZE
            )
            if array_size == 0:
                raise MalformedDeclarationError(
                    f"Uniform {name} has an empty array size", lineno
                )

        return ResourceDescriptor.for_declaration(name, kind, array_size)


@dataclass(frozen=True)
class MetalScanner:
    """Scanner for Metal-like output.

    Struct members of the uniform struct are collected first, followed by the
    texture parameters of the entry point in declaration order.
    """

    def scan(self, source: str) -> ResourceTable:
        table = ResourceTable()
        table.extend(self.scan_uniform_struct(source))
        table.extend(self.scan_entry_textures(source))
        return table

    def scan_uniform_struct(self, source: str) -> ResourceTable:
        table = ResourceTable()

        start = source.find(METAL_UNIFORM_STRUCT)
        if start == -1:
            return table

        body = start + len(METAL_UNIFORM_STRUCT)
        end = source.find(METAL_STRUCT_END, body)
        if end == -1:
            raise MalformedDeclarationError(
                "Unterminated uniform struct", Cursor(source, start).lineno
            )

        cursor = Cursor(source, body, end)
        while True:
            cursor.skip_space()
            eol = cursor.find(";")
            if eol == -1:
                break

            resource = self._parse_member(cursor.region(eol))
            if resource.kind is UniformKind.UNKNOWN:
                logger.debug(f"Dropping uniform {resource.name} of unsupported type")
            else:
                _trace(resource)
                table.append(resource)

            cursor.jump(eol + 1)

        return table

    @staticmethod
    def _parse_member(member: Cursor) -> ResourceDescriptor:
        lineno = member.lineno
        type_name = member.read_token()
        member.skip_space()
        declarator = member.rest().strip()
        if not type_name or not declarator:
            raise MalformedDeclarationError(
                f"Incomplete uniform struct member: {type_name!r}", lineno
            )

        array_size = 1
        bracket = declarator.find("[")
        if bracket == -1:
            name = declarator
        else:
            name = declarator[:bracket].strip()
            close = declarator.find("]", bracket)
            if close == -1:
                raise MalformedDeclarationError(
                    f"Unterminated array size in {declarator!r}", lineno
                )
            array_size = parse_count(
                declarator[bracket + 1 : close], "array size", lineno, MAX_ARRAY_SIZE
            )
            if array_size == 0 or not name:
                raise MalformedDeclarationError(
                    f"Invalid array declaration {declarator!r}", lineno
                )

        return ResourceDescriptor.for_declaration(
            name, uniform_kind(type_name), array_size, matrix_rows=False
        )

    def scan_entry_textures(self, source: str) -> ResourceTable:
        table = ResourceTable()

        start = source.find(METAL_ENTRY_POINT)
        if start == -1:
            return table

        params = start + len(METAL_ENTRY_POINT)
        end = source.find("{", params)
        cursor = Cursor(source, params, None if end == -1 else end)

        while True:
            mark = cursor.find(METAL_TEXTURE_ANNOTATION)
            if mark == -1:
                break

            lineno = Cursor(source, mark).lineno
            preceding = source[cursor.pos : mark].split()
            if not preceding:
                raise MalformedDeclarationError(
                    "Texture annotation without a parameter name", lineno
                )
            name = preceding[-1]

            index_start = mark + len(METAL_TEXTURE_ANNOTATION)
            close = source.find(")", index_start, cursor.end)
            if close == -1:
                raise MalformedDeclarationError(
                    f"Unterminated texture annotation on {name}", lineno
                )
            register_index = parse_count(
                source[index_start:close], "texture index", lineno, MAX_REGISTER
            )

            resource = ResourceDescriptor.for_texture(name, register_index)
            _trace(resource)
            table.append(resource)

            cursor.jump(close + 1)

        return table


Scanner = GLStyleScanner | MetalScanner


def scanner_for(dialect: TargetDialect) -> Scanner:
    """Select the declaration scanner for a dialect."""
    if dialect.is_metal:
        return MetalScanner()
    return GLStyleScanner()


def scan_resources(source: str, dialect: TargetDialect) -> ResourceTable:
    """Recover the resource table of rewritten shader source.

    Args:
        source: Directive-free, rewritten optimizer output
        dialect: Target dialect the source was produced for

    Returns:
        Resources in source order

    Raises:
        MalformedDeclarationError: If a declaration cannot be parsed
    """
    return scanner_for(dialect).scan(source)
