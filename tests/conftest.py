"""共享测试夹具"""
import struct

import numpy as np
import pytest

from core.mesh import Mesh

# 单位立方体，面按外侧逆时针排列
CUBE_VERTICES = [
    (0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0),
    (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1),
]
CUBE_FACES = [
    (0, 2, 1), (0, 3, 2),  # z = 0
    (4, 5, 6), (4, 6, 7),  # z = 1
    (0, 1, 5), (0, 5, 4),  # y = 0
    (3, 7, 6), (3, 6, 2),  # y = 1
    (0, 4, 7), (0, 7, 3),  # x = 0
    (1, 2, 6), (1, 6, 5),  # x = 1
]

ASCII_TRIANGLE_STL = b"""solid test
  facet normal 0 0 1
    outer loop
      vertex 0 0 0
      vertex 1 0 0
      vertex 0 1 0
    endloop
  endfacet
endsolid test
"""

QUAD_OBJ = b"""# quad
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
f 1 2 3 4
"""


def pack_binary_stl(triangles, header=b"", normals=None):
    """按二进制STL布局打包三角形列表 [(v0, v1, v2), ...]"""
    out = [header.ljust(80, b"\0")[:80], struct.pack("<I", len(triangles))]
    for i, (v0, v1, v2) in enumerate(triangles):
        if normals is None:
            n = np.cross(np.subtract(v1, v0), np.subtract(v2, v0))
            n = n / np.linalg.norm(n)
        else:
            n = normals[i]
        out.append(struct.pack("<12fH", *n, *v0, *v1, *v2, 0))
    return b"".join(out)


@pytest.fixture
def cube_mesh():
    return Mesh(vertices=CUBE_VERTICES, faces=CUBE_FACES, name="cube")


@pytest.fixture
def binary_cube_stl():
    triangles = [tuple(CUBE_VERTICES[i] for i in face) for face in CUBE_FACES]
    return pack_binary_stl(triangles, header=b"cube")


@pytest.fixture
def ascii_triangle_stl():
    return ASCII_TRIANGLE_STL


@pytest.fixture
def quad_obj():
    return QUAD_OBJ


@pytest.fixture
def stl_packer():
    return pack_binary_stl
