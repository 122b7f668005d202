"""Target dialect selection from version codes and platform tags."""

from loguru import logger

from glslbin.compiler.constants import (
    GLES3_MIN_VERSION,
    GLES_VERSION_BIT,
    METAL_PLATFORM_TAG,
)
from glslbin.compiler.errors import ConfigError
from glslbin.compiler.models import TargetDialect


def make_fourcc(tag: str) -> int:
    """Pack up to four ASCII characters into a little-endian integer code.

    Args:
        tag: One to four ASCII characters, missing characters count as NUL

    Returns:
        The four-character code

    Raises:
        ConfigError: If the tag is empty, longer than four characters or not ASCII
    """
    if not tag or len(tag) > 4 or not tag.isascii():
        raise ConfigError(f"Invalid four-character code: {tag!r}")
    code = 0
    for shift, char in enumerate(tag):
        code |= ord(char) << (8 * shift)
    return code


METAL_FOURCC = make_fourcc(METAL_PLATFORM_TAG)


def _is_metal_platform(platform: str | None) -> bool:
    if platform is None:
        return False
    return platform.rstrip("\0").strip().upper() == METAL_PLATFORM_TAG


def select_dialect(version: int, platform: str | None = None) -> TargetDialect:
    """Select the target dialect for a compilation.

    The Metal platform tag (or its four-character code passed as the version)
    selects the Metal-like dialect. Versions with the ES bit set select GLES3
    from version 300 on and GLES2 below it. Everything else is desktop GL.

    Args:
        version: Numeric target version code
        platform: Optional four-character platform tag

    Returns:
        Selected dialect

    Raises:
        ConfigError: If the version is negative
    """
    if version < 0:
        raise ConfigError(f"Invalid target version: {version}")

    if _is_metal_platform(platform) or version == METAL_FOURCC:
        dialect = TargetDialect.METAL
    elif version >= GLES_VERSION_BIT:
        es_version = version & ~GLES_VERSION_BIT
        if es_version >= GLES3_MIN_VERSION:
            dialect = TargetDialect.GLES3
        else:
            dialect = TargetDialect.GLES2
    else:
        dialect = TargetDialect.DESKTOP_GL

    logger.debug(f"Selected dialect {dialect.name} (version={version:#x})")
    return dialect
