"""Source excerpts printed around optimizer diagnostics."""

from glslbin.compiler.constants import CONTEXT_LINES_BEFORE, CONTEXT_WINDOW_LINES


def context_window(line: int) -> tuple[int, int]:
    """First and last (inclusive) line shown around a reported line.

    A line of 0 means the location is unknown and the whole source is shown.
    """
    if line <= 0:
        return 1, -1
    start = max(1, line - CONTEXT_LINES_BEFORE)
    return start, start + CONTEXT_WINDOW_LINES


def format_code_excerpt(source: str, line: int = 0, column: int = 0) -> str:
    """Format numbered source lines around a reported location.

    The reported line is marked with ``>>>`` and followed by a caret under the
    reported column when it is known.

    Args:
        source: Shader source passed to the optimizer
        line: 1-based reported line, 0 when unknown
        column: Reported column, 0 when unknown

    Returns:
        Multi-line excerpt framed by ``Code:`` and ``---`` lines
    """
    start, end = context_window(line)
    out = ["Code:", "---"]

    for number, text in enumerate(source.splitlines(), start=1):
        if number < start:
            continue
        if end != -1 and number > end:
            break
        if number == line:
            out.append("")
            out.append(f">>> {number:3d}: {text}")
            if column > 0:
                out.append(f">>> {column:3d}: {' ' * (column - 1)}^")
            out.append("")
        else:
            out.append(f"    {number:3d}: {text}")

    out.append("---")
    return "\n".join(out)
