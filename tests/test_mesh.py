import numpy as np
import pytest

from core.errors import MalformedInputError
from core.mesh import Mesh, MeshBuilder


def test_counts_and_accessors(cube_mesh):
    assert cube_mesh.vertex_count == 8
    assert cube_mesh.triangle_count == 12
    assert not cube_mesh.is_empty
    np.testing.assert_array_equal(cube_mesh.vertex(6), [1, 1, 1])
    assert cube_mesh.triangle(0).indices == (0, 2, 1)


def test_empty_mesh_is_valid():
    mesh = Mesh()
    mesh.validate()
    assert mesh.is_empty
    assert mesh.bounding_box() is None
    assert mesh.face_normals().shape == (0, 3)


def test_missing_normal_is_derived_from_winding(cube_mesh):
    # 底面朝 -z，顶面朝 +z
    np.testing.assert_allclose(cube_mesh.triangle(0).normal, [0, 0, -1])
    np.testing.assert_allclose(cube_mesh.triangle(2).normal, [0, 0, 1])


def test_reversed_winding_flips_normal():
    mesh = Mesh(vertices=[(0, 0, 0), (1, 0, 0), (0, 1, 0)], faces=[(0, 2, 1)])
    np.testing.assert_allclose(mesh.triangle(0).normal, [0, 0, -1])


def test_stored_normal_is_kept():
    mesh = Mesh(
        vertices=[(0, 0, 0), (1, 0, 0), (0, 1, 0)],
        faces=[(0, 1, 2)],
        normals=[(0, 1, 0)]
    )
    np.testing.assert_allclose(mesh.face_normals(), [[0, 1, 0]])


def test_degenerate_triangle_has_zero_normal():
    mesh = Mesh(vertices=[(0, 0, 0), (1, 0, 0), (2, 0, 0)], faces=[(0, 1, 2)])
    np.testing.assert_array_equal(mesh.face_normals(), [[0, 0, 0]])


def test_face_normals_are_unit_length(cube_mesh):
    lengths = np.linalg.norm(cube_mesh.face_normals(), axis=1)
    np.testing.assert_allclose(lengths, 1.0)


def test_translate_moves_vertices_only(cube_mesh):
    faces = cube_mesh.faces.copy()
    cube_mesh.translate([1, 2, 3])
    np.testing.assert_array_equal(cube_mesh.vertex(0), [1, 2, 3])
    np.testing.assert_array_equal(cube_mesh.faces, faces)


def test_mesh_owns_copies_of_input_arrays():
    vertices = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 2.0, 0.0]])
    faces = np.array([[0, 1, 2]])
    mesh = Mesh(vertices=vertices, faces=faces)
    mesh.translate([10, 10, 10])
    mesh.faces[0, 0] = 2
    np.testing.assert_array_equal(vertices[1], [2, 0, 0])
    np.testing.assert_array_equal(faces, [[0, 1, 2]])


def test_bounding_box(cube_mesh):
    bbox = cube_mesh.bounding_box()
    np.testing.assert_array_equal(bbox.min, [0, 0, 0])
    np.testing.assert_array_equal(bbox.max, [1, 1, 1])
    np.testing.assert_array_equal(bbox.center, [0.5, 0.5, 0.5])
    np.testing.assert_array_equal(bbox.size, [1, 1, 1])


def test_validate_rejects_out_of_range_index():
    mesh = Mesh(vertices=[(0, 0, 0), (1, 0, 0), (0, 1, 0)], faces=[(0, 1, 3)])
    with pytest.raises(MalformedInputError):
        mesh.validate()


def test_builder_keeps_duplicate_vertices():
    builder = MeshBuilder(name="dup")
    for _ in range(2):
        a = builder.add_vertex(0, 0, 0)
        b = builder.add_vertex(1, 0, 0)
        c = builder.add_vertex(0, 1, 0)
        builder.add_triangle(a, b, c)
    mesh = builder.build()
    assert mesh.name == "dup"
    assert mesh.vertex_count == 6
    assert mesh.triangle_count == 2


def test_to_trimesh_does_not_merge(cube_mesh):
    duplicated = Mesh(
        vertices=cube_mesh.vertices[cube_mesh.faces].reshape(-1, 3),
        faces=np.arange(36).reshape(-1, 3)
    )
    tm = duplicated.to_trimesh()
    assert len(tm.vertices) == 36
    assert len(tm.faces) == 12
