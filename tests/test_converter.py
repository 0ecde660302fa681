import logging

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from core.converter import ConvertOptions, convert, decode, encode
from core.errors import EmptyResultError, MalformedInputError, UnsupportedConversionError
from core.formats import MeshFormat
from core.mesh import Mesh
from core.stl_codec import binary_size

coords = st.floats(
    min_value=-100.0, max_value=100.0,
    allow_nan=False, allow_infinity=False, width=32
)


@st.composite
def meshes(draw):
    n = draw(st.integers(min_value=3, max_value=20))
    vertices = draw(st.lists(st.tuples(coords, coords, coords), min_size=n, max_size=n))
    index = st.integers(min_value=0, max_value=n - 1)
    faces = draw(st.lists(st.tuples(index, index, index), max_size=20))
    return Mesh(vertices=vertices, faces=faces)


@pytest.mark.parametrize("fmt", ["stl", "obj"])
def test_same_format_is_passthrough(fmt, binary_cube_stl, quad_obj):
    data = binary_cube_stl if fmt == "stl" else quad_obj
    result = convert(data, fmt, fmt)
    assert result.passthrough
    assert result.data == data
    assert result.triangle_count is None


def test_passthrough_does_not_parse():
    garbage = b"not a mesh at all"
    assert convert(garbage, MeshFormat.OBJ, MeshFormat.OBJ).data == garbage


@settings(max_examples=50, deadline=None)
@given(meshes(), st.booleans())
def test_triangle_count_survives_cross_format_round_trip(mesh, stl_ascii):
    options = ConvertOptions(stl_ascii=stl_ascii)
    stl = encode(mesh, "stl", options)

    obj = convert(stl, "stl", "obj", options)
    assert obj.triangle_count == mesh.triangle_count
    assert decode(obj.data, "obj").triangle_count == mesh.triangle_count

    back = convert(obj.data, "obj", "stl", options)
    assert decode(back.data, "stl").triangle_count == mesh.triangle_count


def test_binary_stl_cube_to_obj_keeps_duplicates(binary_cube_stl):
    result = convert(binary_cube_stl, "stl", "obj")
    mesh = decode(result.data, "obj")
    assert mesh.triangle_count == 12
    assert mesh.vertex_count == 36
    assert result.extension == ".obj"
    assert result.content_type == "text/plain"


def test_conversion_centers_model(binary_cube_stl):
    result = convert(binary_cube_stl, "stl", "obj")
    np.testing.assert_allclose(result.offset, [-0.5, -0.5, -0.5])
    bbox = decode(result.data, "obj").bounding_box()
    np.testing.assert_allclose(bbox.center, 0.0, atol=1e-6)


def test_normalization_can_be_disabled(binary_cube_stl):
    result = convert(binary_cube_stl, "stl", "obj", ConvertOptions(normalize=False))
    assert result.offset is None
    np.testing.assert_array_equal(decode(result.data, "obj").bounding_box().min, [0, 0, 0])


def test_winding_survives_conversion(binary_cube_stl):
    original = decode(binary_cube_stl, "stl").face_normals()
    obj = convert(binary_cube_stl, "stl", "obj").data
    stl = convert(obj, "obj", "stl").data
    np.testing.assert_allclose(decode(stl, "stl").face_normals(), original, atol=1e-6)


def test_obj_to_stl_defaults_to_binary(quad_obj):
    result = convert(quad_obj, ".obj", "STL")
    assert result.format is MeshFormat.STL
    assert len(result.data) == binary_size(2)
    assert result.content_type == "model/stl"
    assert result.extension == ".stl"


def test_obj_to_ascii_stl(quad_obj):
    result = convert(quad_obj, "obj", "stl", ConvertOptions(stl_ascii=True))
    assert result.data.startswith(b"solid")
    assert result.content_type == "text/plain"
    assert decode(result.data, "stl").triangle_count == 2


def test_passthrough_content_type(ascii_triangle_stl, binary_cube_stl):
    assert convert(ascii_triangle_stl, "stl", "stl").content_type == "text/plain"
    assert convert(binary_cube_stl, "stl", "stl").content_type == "model/stl"
    assert convert(b"v 0 0 0\n", "obj", "obj").content_type == "text/plain"


@pytest.mark.parametrize("source, target", [
    ("stl", "ply"),
    ("3mf", "obj"),
    ("stl", ""),
    ("obj", None),
])
def test_unsupported_format_is_rejected(source, target, binary_cube_stl):
    with pytest.raises(UnsupportedConversionError):
        convert(binary_cube_stl, source, target)


def test_empty_result_is_a_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="core.converter"):
        result = convert(b"v 0 0 0\n", "obj", "stl")
    assert result.triangle_count == 0
    assert len(result.data) == binary_size(0)
    assert any("三角面" in r.getMessage() for r in caplog.records)


def test_empty_result_can_be_required_to_fail():
    with pytest.raises(EmptyResultError):
        convert(b"v 0 0 0\n", "obj", "stl", ConvertOptions(require_geometry=True))


def test_non_finite_coordinate_fails_instead_of_poisoning_centering():
    data = (b"v nan 0 0\nv 1 0 0\nv 0 1 0\n"
            b"v 5 5 5\nv 6 5 5\nv 5 6 5\n"
            b"f 1 2 3\nf 4 5 6\n")
    with pytest.raises(MalformedInputError) as exc_info:
        convert(data, "obj", "stl")
    assert exc_info.value.line == 1
