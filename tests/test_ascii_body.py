"""Tests for the ASCII Nodes/Elements parsers."""

import numpy.testing as npt
import pytest

from meshpreview.model.ascii_body import parse_ascii_elements, parse_ascii_nodes
from meshpreview.model.errors import (
    DanglingNodeReferenceError,
    DuplicateNodeIdError,
    SectionSyntaxError,
    UnknownElementTypeError,
)
from meshpreview.model.geometry import GeometryAssembler, TriangleCollector
from meshpreview.model.node_map import NodeIndexMap
from meshpreview.model.sections import RawSection


def nodes_section(text):
    return RawSection(name="Nodes", content=text, offset=0)


def elements_section(text):
    return RawSection(name="Elements", content=text, offset=0)


@pytest.fixture
def loaded():
    """Node map, assembler and collector after reading three sparse nodes."""
    node_map = NodeIndexMap()
    assembler = GeometryAssembler()
    parse_ascii_nodes(nodes_section("\n3\n30 0 0 0\n5 1 0 0\n17 0 1 0.5\n"), node_map, assembler)
    return node_map, assembler, TriangleCollector(node_map)


def test_nodes_in_file_order(loaded):
    node_map, assembler, triangles = loaded
    assert [node_map.lookup(i) for i in (30, 5, 17)] == [0, 1, 2]
    assert node_map.frozen
    geometry = assembler.assemble(triangles)
    npt.assert_array_equal(geometry.vertices, [0, 0, 0, 1, 0, 0, 0, 1, 0.5])


def test_scientific_notation_coordinates():
    assembler = GeometryAssembler()
    parse_ascii_nodes(nodes_section("1\n1 1.5e-3 -2E+2 .25\n"), NodeIndexMap(), assembler)
    npt.assert_allclose(assembler.vertex_chunks[0], [0.0015, -200.0, 0.25])


def test_empty_nodes_section():
    assembler = GeometryAssembler()
    assert parse_ascii_nodes(nodes_section("0\n"), NodeIndexMap(), assembler) == 0
    assert assembler.vertex_chunks[0].size == 0


@pytest.mark.parametrize("text", [
    "",
    "two\n",
    "-1\n",
    "2\n1 0 0 0\n",
    "1\n1 0 0 0 99\n",
    "1\n1 0 zero 0\n",
    "1\n1.5 0 0 0\n",
])
def test_malformed_nodes(text):
    with pytest.raises(SectionSyntaxError):
        parse_ascii_nodes(nodes_section(text), NodeIndexMap(), GeometryAssembler())


def test_duplicate_node_id():
    with pytest.raises(DuplicateNodeIdError):
        parse_ascii_nodes(nodes_section("2\n4 0 0 0\n4 1 1 1\n"), NodeIndexMap(), GeometryAssembler())


def test_triangles_are_remapped(loaded):
    node_map, assembler, triangles = loaded
    count = parse_ascii_elements(elements_section("2\n1 2 2 0 1 17 5 30\n2 2 0 5 17 30\n"), triangles)
    assert count == 2
    npt.assert_array_equal(assembler.assemble(triangles).indices, [2, 1, 0, 1, 2, 0])


def test_other_types_are_consumed_and_skipped(loaded):
    _, assembler, triangles = loaded
    text = (
        "4\n"
        "1 15 2 0 1 30\n"          # point
        "2 1 3 7 8 9 30 5\n"       # line with three tags
        "3 4 0 30 5 17 30\n"       # tetrahedron
        "4 2 1 99 30 5 17\n"       # triangle after all of them
    )
    parse_ascii_elements(elements_section(text), triangles)
    geometry = assembler.assemble(triangles)
    npt.assert_array_equal(geometry.indices, [0, 1, 2])
    assert geometry.skipped_elements == {15: 1, 1: 1, 4: 1}


def test_non_triangles_do_not_need_declared_nodes(loaded):
    _, _, triangles = loaded
    parse_ascii_elements(elements_section("1\n1 1 0 1000 2000\n"), triangles)
    assert triangles.num_triangles == 0


def test_unknown_element_type(loaded):
    _, _, triangles = loaded
    with pytest.raises(UnknownElementTypeError, match="unknown type 99"):
        parse_ascii_elements(elements_section("1\n1 99 0 30 5 17\n"), triangles)


def test_dangling_node_reference(loaded):
    _, _, triangles = loaded
    with pytest.raises(DanglingNodeReferenceError, match="node 6"):
        parse_ascii_elements(elements_section("1\n1 2 0 30 6 17\n"), triangles)


@pytest.mark.parametrize("text", [
    "1\n1 2 0 30 5\n",
    "1\n1 2 3 0 0\n",
    "1\n1 2 0 30 5 17 30\n",
    "2\n1 2 0 30 5 17\n",
    "1\n1 2 -1 30 5 17\n",
    "1\n1 2 0 30 5 x\n",
])
def test_malformed_elements(loaded, text):
    _, _, triangles = loaded
    with pytest.raises(SectionSyntaxError):
        parse_ascii_elements(elements_section(text), triangles)


@pytest.mark.parametrize("text", [
    "1\n1 0\xa00 0\n",
    "1\n1 0\x1c0 0\n",
    "1\n1\x85 0 0 0\n",
    "1\n1 0 0 1_0\n",
])
def test_only_header_whitespace_separates_tokens(text):
    with pytest.raises(SectionSyntaxError):
        parse_ascii_nodes(nodes_section(text), NodeIndexMap(), GeometryAssembler())


def test_node_error_points_at_the_token():
    text = "2\n1 0 0 0\n2 0 bad 0\n"
    section = RawSection(name="Nodes", content=text, offset=50)
    with pytest.raises(SectionSyntaxError) as excinfo:
        parse_ascii_nodes(section, NodeIndexMap(), GeometryAssembler())
    assert excinfo.value.offset == 50 + text.index("bad")
    assert excinfo.value.excerpt == repr("bad")


def test_duplicate_node_points_at_the_second_id():
    text = "2\n4 0 0 0\n4 1 1 1\n"
    with pytest.raises(DuplicateNodeIdError) as excinfo:
        parse_ascii_nodes(nodes_section(text), NodeIndexMap(), GeometryAssembler())
    assert excinfo.value.offset == text.index("4 1 1 1")


def test_unknown_type_points_at_the_type(loaded):
    _, _, triangles = loaded
    text = "1\n1 99 0 30 5 17\n"
    with pytest.raises(UnknownElementTypeError) as excinfo:
        parse_ascii_elements(elements_section(text), triangles)
    assert excinfo.value.offset == text.index("99")
    assert excinfo.value.excerpt == repr("99")


def test_dangling_node_reports_id_and_node_list(loaded):
    _, _, triangles = loaded
    text = "1\n1 2 1 0 30 6 17\n"
    with pytest.raises(DanglingNodeReferenceError) as excinfo:
        parse_ascii_elements(elements_section(text), triangles)
    assert excinfo.value.offset == text.index("30 6 17")
    assert excinfo.value.excerpt == repr("6")


def test_truncated_section_points_at_its_end():
    text = "2\n1 0 0 0\n"
    with pytest.raises(SectionSyntaxError) as excinfo:
        parse_ascii_nodes(nodes_section(text), NodeIndexMap(), GeometryAssembler())
    assert excinfo.value.offset == len(text)
