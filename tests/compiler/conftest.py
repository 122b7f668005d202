"""
Pytest configuration and shared fixtures for compiler tests.

This module contains sample optimizer outputs shared across multiple test
modules.
"""

import pytest

from glslbin.compiler.models import (
    CompileOptions,
    ResourceDescriptor,
    ResourceTable,
    ShaderStage,
    UniformKind,
)


@pytest.fixture
def gl_vertex_source():
    """Fixture providing desktop GL optimizer output for a vertex shader."""
    return (
        "#version 120\n"
        "#extension GL_ARB_shader_texture_lod : enable\n"
        "attribute vec3 a_position;\n"
        "attribute vec2 a_texcoord0;\n"
        "varying vec2 v_texcoord0;\n"
        "uniform mat4 u_modelViewProj;\n"
        "uniform vec4 u_params[3];\n"
        "uniform mediump vec4 u_color;\n"
        "uniform float u_time;\n"
        "uniform sampler2D s_texColor;\n"
        "void main ()\n"
        "{\n"
        "  vec4 tmpvar_1;\n"
        "  tmpvar_1.w = 1.0;\n"
        "  tmpvar_1.xyz = a_position;\n"
        "  gl_Position = (u_modelViewProj * tmpvar_1);\n"
        "  v_texcoord0 = a_texcoord0;\n"
        "}\n"
    )


@pytest.fixture
def metal_fragment_source():
    """Fixture providing Metal-like optimizer output for a fragment shader."""
    return (
        "#include <metal_stdlib>\n"
        "#pragma clang diagnostic ignored \"-Wparentheses-equality\"\n"
        "using namespace metal;\n"
        "struct xlatMtlShaderInput {\n"
        "  float2 v_texcoord0;\n"
        "};\n"
        "struct xlatMtlShaderOutput {\n"
        "  half4 gl_FragColor;\n"
        "};\n"
        "struct xlatMtlShaderUniform {\n"
        "  float4 u_color;\n"
        "  float4x4 viewProj[2];\n"
        "  float3x3 u_normalMtx;\n"
        "  float u_time;\n"
        "};\n"
        "fragment xlatMtlShaderOutput xlatMtlMain (xlatMtlShaderInput _mtl_i "
        "[[stage_in]], constant xlatMtlShaderUniform& _mtl_u [[buffer(0)]]\n"
        "  ,   texture2d<float> s_texColor [[texture(0)]], "
        "sampler _mtlsmp_s_texColor [[sampler(0)]]\n"
        "  ,   texture2d<float> diffuseTex [[texture(3)]], "
        "sampler _mtlsmp_diffuseTex [[sampler(3)]])\n"
        "{\n"
        "  xlatMtlShaderOutput _mtl_o;\n"
        "  _mtl_o.gl_FragColor = half4(s_texColor.sample(_mtlsmp_s_texColor, "
        "(float2)(_mtl_i.v_texcoord0)));\n"
        "  return _mtl_o;\n"
        "}\n"
    )


@pytest.fixture
def resource_table():
    """Fixture providing a small resource table."""
    table = ResourceTable()
    table.append(ResourceDescriptor.for_declaration("u_mtx", UniformKind.MAT4, 2))
    table.append(ResourceDescriptor.for_declaration("u_color", UniformKind.VEC4))
    table.append(ResourceDescriptor.for_texture("s_tex", 3))
    return table


@pytest.fixture
def vertex_options(tmp_path):
    """Fixture providing desktop GL vertex compile options."""
    return CompileOptions(
        stage=ShaderStage.VERTEX, output_path=tmp_path / "vs.bin", version=120
    )


@pytest.fixture
def fragment_options(tmp_path):
    """Fixture providing desktop GL fragment compile options."""
    return CompileOptions(
        stage=ShaderStage.FRAGMENT, output_path=tmp_path / "fs.bin", version=150
    )
