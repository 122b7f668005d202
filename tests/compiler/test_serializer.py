"""Tests for the compiler serializer module."""

import os
import struct
from unittest.mock import patch

import pytest

from glslbin.compiler.errors import SerializationError
from glslbin.compiler.models import ResourceDescriptor, ResourceTable, UniformKind
from glslbin.compiler.serializer import (
    deserialize,
    read_blob,
    serialize,
    write_blob,
)


class TestSerialize:
    """Tests for blob encoding."""

    def test_exact_layout(self):
        """Test the byte layout of a single resource."""
        # Arrange
        table = ResourceTable()
        table.append(ResourceDescriptor.for_texture("s_tex", 0x0102))

        # Act
        data = serialize(table, "void main(){}")

        # Assert
        expected = (
            b"\x01\x00"
            + b"\x05s_tex"
            + b"\x00"  # kind
            + b"\x01"  # array size
            + b"\x02\x01"  # register index
            + b"\x01\x00"  # register count
            + b"\x00\x00\x00"
            + struct.pack("<I", 13)
            + b"void main(){}"
            + b"\x00"
        )
        assert data == expected

    def test_empty_table(self):
        assert serialize(ResourceTable(), "") == b"\x00\x00" + b"\x00" * 4 + b"\x00"

    def test_matrix_register_count(self):
        table = ResourceTable()
        table.append(ResourceDescriptor.for_declaration("u_bones", UniformKind.MAT4, 64))

        data = serialize(table, "")

        reg_count = struct.unpack_from("<H", data, 2 + 1 + 7 + 4)[0]
        assert reg_count == 256

    def test_name_too_long(self):
        table = ResourceTable()
        table.append(ResourceDescriptor(name="u" * 256, kind=UniformKind.VEC4))

        with pytest.raises(SerializationError):
            serialize(table, "")

    def test_unknown_kind_rejected(self):
        table = ResourceTable()
        table.append(ResourceDescriptor(name="u_time", kind=UniformKind.UNKNOWN))

        with pytest.raises(SerializationError):
            serialize(table, "")

    def test_register_overflow(self):
        table = ResourceTable()
        table.append(ResourceDescriptor.for_texture("s_tex", 0x10000))

        with pytest.raises(SerializationError):
            serialize(table, "")


class TestDeserialize:
    """Tests for blob decoding."""

    def test_round_trip(self, resource_table):
        """Test that a blob decodes to the same table and source."""
        source = "uniform vec4 u_color;\nvoid main () {}\n"

        blob = deserialize(serialize(resource_table, source))

        assert blob.source == source
        assert blob.table.names() == resource_table.names()
        assert list(blob.table) == list(resource_table)

    def test_truncated(self, resource_table):
        data = serialize(resource_table, "abc")

        with pytest.raises(SerializationError):
            deserialize(data[:-3])

    def test_missing_terminator(self, resource_table):
        data = serialize(resource_table, "abc")

        with pytest.raises(SerializationError):
            deserialize(data[:-1] + b"x")

    def test_trailing_bytes(self, resource_table):
        data = serialize(resource_table, "abc")

        with pytest.raises(SerializationError):
            deserialize(data + b"\x00")

    def test_unknown_kind_byte(self):
        data = b"\x01\x00\x01a\x09\x01\x00\x00\x01\x00\x00\x00\x00" + b"\x00" * 5

        with pytest.raises(SerializationError):
            deserialize(data)


class TestWriteBlob:
    """Tests for writing blobs to disk."""

    def test_write_and_read(self, tmp_path, resource_table):
        path = tmp_path / "shader.bin"

        write_blob(path, resource_table, "void main () {}")
        blob = read_blob(path)

        assert blob.table.names() == ["u_mtx", "u_color", "s_tex"]
        assert blob.source == "void main () {}"
        assert os.listdir(tmp_path) == ["shader.bin"]

    def test_missing_directory(self, tmp_path, resource_table):
        path = tmp_path / "missing" / "shader.bin"

        with pytest.raises(SerializationError):
            write_blob(path, resource_table, "")

        assert not path.exists()

    def test_failed_write_leaves_no_partial_file(self, tmp_path, resource_table):
        """Test that a failing replace removes the temporary file."""
        path = tmp_path / "shader.bin"
        path.write_bytes(b"previous")

        with patch("glslbin.compiler.serializer.os.replace", side_effect=OSError):
            with pytest.raises(SerializationError):
                write_blob(path, resource_table, "")

        assert path.read_bytes() == b"previous"
        assert os.listdir(tmp_path) == ["shader.bin"]

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(SerializationError):
            read_blob(tmp_path / "nothing.bin")
