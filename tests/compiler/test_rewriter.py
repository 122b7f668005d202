"""Tests for the compiler rewriter module."""

import pytest

from glslbin.compiler.constants import LEGACY_REPLACEMENTS
from glslbin.compiler.models import ShaderStage, TargetDialect
from glslbin.compiler.rewriter import (
    replace_legacy_names,
    rewrite_legacy,
    strip_directives,
)


class TestStripDirectives:
    """Tests for leading directive removal."""

    def test_strips_leading_directives(self):
        source = "#version 300 es\n#define A 1\nuniform vec4 u_a;\n"
        assert strip_directives(source) == "uniform vec4 u_a;\n"

    def test_keeps_later_directives(self):
        source = "uniform vec4 u_a;\n#define A 1\n"
        assert strip_directives(source) == source

    def test_only_directives(self):
        assert strip_directives("#version 120") == ""
        assert strip_directives("#version 120\n") == ""


class TestRewriteLegacy:
    """Tests for legacy name replacement and precision forcing."""

    @pytest.mark.parametrize(
        "legacy, canonical",
        [
            ("gl_FragDepthEXT = 1.0;", "gl_FragDepth = 1.0;"),
            ("textureLodEXT(s, uv, 0.0)", "texture2DLod(s, uv, 0.0)"),
            ("textureGradEXT(s, uv, dx, dy)", "texture2DGrad(s, uv, dx, dy)"),
            ("texture2DLodARB(s, uv, 1.0)", "texture2DLod(s, uv, 1.0)"),
            ("textureCubeGradEXT(s, n, dx, dy)", "textureCubeGrad(s, n, dx, dy)"),
            ("texture2DProjLodEXT(s, p, 0.0)", "texture2DProjLod(s, p, 0.0)"),
            ("shadow2DProjARB(s, p)", "shadow2DProj(s, p)"),
            ("shadow2DEXT(s, p)", "shadow2D(s, p)"),
        ],
    )
    def test_legacy_names(self, legacy, canonical):
        result = rewrite_legacy(legacy, TargetDialect.GLES2, ShaderStage.FRAGMENT)
        assert result == canonical

    def test_replacements_are_idempotent(self):
        """Test that no replacement output contains a replaceable name."""
        source = " ".join(legacy for legacy, _ in LEGACY_REPLACEMENTS)

        once = replace_legacy_names(source)
        twice = replace_legacy_names(once)

        assert once == twice
        for legacy, _ in LEGACY_REPLACEMENTS:
            assert legacy not in once

    def test_rewrite_twice_matches_once(self, gl_vertex_source):
        once = rewrite_legacy(
            gl_vertex_source, TargetDialect.DESKTOP_GL, ShaderStage.VERTEX
        )
        twice = rewrite_legacy(once, TargetDialect.DESKTOP_GL, ShaderStage.VERTEX)
        assert once == twice

    def test_vertex_precision_forced(self):
        result = rewrite_legacy(
            "mediump vec4 v;", TargetDialect.DESKTOP_GL, ShaderStage.VERTEX
        )
        assert result == "highp vec4 v;"

    def test_vertex_lowp_forced(self):
        result = rewrite_legacy(
            "uniform lowp vec4 u_a;\nvarying mediump vec2 v_uv;\n",
            TargetDialect.GLES3,
            ShaderStage.VERTEX,
        )
        assert "lowp" not in result
        assert "mediump" not in result
        assert result.count("highp") == 2

    def test_fragment_precision_untouched(self):
        source = "precision mediump float;\nuniform lowp vec4 u_a;\n"
        result = rewrite_legacy(source, TargetDialect.GLES2, ShaderStage.FRAGMENT)
        assert result == source

    def test_metal_untouched(self):
        source = "mediump vec4 v; textureLodEXT(s, uv, 0.0);"
        result = rewrite_legacy(source, TargetDialect.METAL, ShaderStage.VERTEX)
        assert result == source
