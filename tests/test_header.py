"""Tests for the MeshFormat header parser."""

import dataclasses
import struct

import pytest

from meshpreview.model.errors import (
    HeaderMissingError,
    InvalidEncodingFlagError,
    InvalidFloatWidthError,
    MshError,
    MshErrorKind,
    SectionSyntaxError,
    UnsupportedVersionError,
)
from meshpreview.model.header import Endianness, MeshFormatHeader, parse_header


def binary_header(endian):
    return b"$MeshFormat\n2.2 1 8\n" + struct.pack(endian + "i", 1) + b"\n$EndMeshFormat\n$Nodes"


def test_ascii_header():
    data = b"$MeshFormat\n2.2 0 8\n$EndMeshFormat\n$Nodes\n"
    header, rest = parse_header(data)
    assert header == MeshFormatHeader(version="2.2", is_ascii=True, float_byte_width=8)
    assert header.endianness is Endianness.NONE
    assert data[rest:] == b"\n$Nodes\n"


def test_little_endian_binary_header():
    header, rest = parse_header(binary_header("<"))
    assert not header.is_ascii
    assert header.endianness is Endianness.LITTLE
    assert header.endianness.struct_prefix == "<"
    assert binary_header("<")[rest:] == b"\n$Nodes"


def test_big_endian_binary_header():
    header, _ = parse_header(binary_header(">"))
    assert header.endianness is Endianness.BIG
    assert header.endianness.struct_prefix == ">"


def test_leading_whitespace_is_tolerated():
    header, _ = parse_header(b"\n\n  \t$MeshFormat\r\n2.2 0 8\r\n$EndMeshFormat\r\n")
    assert header.is_ascii


def test_header_is_immutable():
    header, _ = parse_header(b"$MeshFormat\n2.2 0 8\n$EndMeshFormat\n")
    with pytest.raises(dataclasses.FrozenInstanceError):
        header.version = "4.1"


@pytest.mark.parametrize("data", [
    b"",
    b"hello\n$MeshFormat\n2.2 0 8\n$EndMeshFormat\n",
    b"$Nodes\n0\n$EndNodes\n",
    b"$MeshFormatX\n2.2 0 8\n$EndMeshFormat\n",
    b"$MeshFormat\n2.2 0 8\n",
])
def test_missing_header(data):
    with pytest.raises(HeaderMissingError) as excinfo:
        parse_header(data)
    assert excinfo.value.kind is MshErrorKind.HEADER_MISSING


@pytest.mark.parametrize("body, error, kind", [
    (b"2.1 0 8", UnsupportedVersionError, MshErrorKind.UNSUPPORTED_VERSION),
    (b"4.1 0 8", UnsupportedVersionError, MshErrorKind.UNSUPPORTED_VERSION),
    (b"2.2 2 8", InvalidEncodingFlagError, MshErrorKind.INVALID_ENCODING_FLAG),
    (b"2.2 x 8", InvalidEncodingFlagError, MshErrorKind.INVALID_ENCODING_FLAG),
    (b"2.2 0 4", InvalidFloatWidthError, MshErrorKind.INVALID_FLOAT_WIDTH),
    (b"2.2 0 eight", InvalidFloatWidthError, MshErrorKind.INVALID_FLOAT_WIDTH),
    (b"2.2 0", SectionSyntaxError, MshErrorKind.SECTION_SYNTAX_ERROR),
    (b"2.2 0 8 1 1", SectionSyntaxError, MshErrorKind.SECTION_SYNTAX_ERROR),
    (b"2.2 1 8", SectionSyntaxError, MshErrorKind.SECTION_SYNTAX_ERROR),
])
def test_invalid_header_fields(body, error, kind):
    with pytest.raises(error) as excinfo:
        parse_header(b"$MeshFormat\n" + body + b"\n$EndMeshFormat\n")
    assert excinfo.value.kind is kind
    assert isinstance(excinfo.value, MshError)
    assert isinstance(excinfo.value, ValueError)
