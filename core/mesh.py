"""网格数据模型"""
import numpy as np
import trimesh
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from utils.geometry import (
    compute_bounds,
    compute_face_normal,
    compute_face_normals,
    usable_normal_mask,
)
from .errors import MalformedInputError


@dataclass
class BoundingBox:
    """轴对齐包围盒"""
    min: np.ndarray
    max: np.ndarray

    @property
    def center(self) -> np.ndarray:
        return (self.min + self.max) / 2.0

    @property
    def size(self) -> np.ndarray:
        return self.max - self.min


@dataclass
class Triangle:
    """三角面：三个顶点索引和面法向量"""
    indices: tuple
    normal: np.ndarray


class Mesh:
    """
    与格式无关的三角网格

    vertices: (N, 3) float64 顶点坐标
    faces: (M, 3) int64 顶点索引
    normals: (M, 3) float64 面法向量，零向量表示未指定

    顶点不去重：逐三角形存储的格式会为每个三角形产生三个新顶点。
    """

    def __init__(
        self,
        vertices: Optional[np.ndarray] = None,
        faces: Optional[np.ndarray] = None,
        normals: Optional[np.ndarray] = None,
        name: str = ""
    ):
        self.vertices = np.zeros((0, 3)) if vertices is None else \
            np.array(vertices, dtype=np.float64).reshape(-1, 3)
        self.faces = np.zeros((0, 3), dtype=np.int64) if faces is None else \
            np.array(faces, dtype=np.int64).reshape(-1, 3)
        if normals is None:
            self.normals = np.zeros((len(self.faces), 3))
        else:
            self.normals = np.array(normals, dtype=np.float64).reshape(-1, 3)
        self.name = name

    def __repr__(self) -> str:
        return (f"Mesh(name={self.name!r}, vertices={self.vertex_count}, "
                f"triangles={self.triangle_count})")

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.faces)

    @property
    def is_empty(self) -> bool:
        return self.triangle_count == 0

    def vertex(self, index: int) -> np.ndarray:
        """按索引获取顶点坐标"""
        return self.vertices[index]

    def triangle(self, index: int) -> Triangle:
        """按索引获取三角面，法向量缺失时由顶点计算"""
        a, b, c = (int(i) for i in self.faces[index])
        normal = self.normals[index]
        if not usable_normal_mask(normal.reshape(1, 3))[0]:
            normal = compute_face_normal(
                self.vertices[a], self.vertices[b], self.vertices[c]
            )
        return Triangle(indices=(a, b, c), normal=np.array(normal))

    def face_normals(self) -> np.ndarray:
        """所有三角面的法向量：优先使用已存储的，缺失或退化的重新计算"""
        result = np.array(self.normals, dtype=np.float64)
        missing = ~usable_normal_mask(result)
        if missing.any():
            result[missing] = compute_face_normals(self.vertices, self.faces[missing])
        return result

    def translate(self, offset: Sequence[float]):
        """平移所有顶点（拓扑和法向量不变）"""
        self.vertices += np.asarray(offset, dtype=np.float64)

    def bounding_box(self) -> Optional[BoundingBox]:
        """计算包围盒，无顶点时返回None"""
        if self.vertex_count == 0:
            return None
        lo, hi = compute_bounds(self.vertices)
        return BoundingBox(min=lo, max=hi)

    def validate(self):
        """检查索引是否都在顶点范围内"""
        if len(self.normals) != len(self.faces):
            raise MalformedInputError(
                f"法向量数量({len(self.normals)})与面数量({len(self.faces)})不一致"
            )
        if self.triangle_count == 0:
            return
        if self.faces.min() < 0 or self.faces.max() >= self.vertex_count:
            raise MalformedInputError(
                f"面索引超出顶点范围 [0, {self.vertex_count})"
            )

    def to_trimesh(self) -> trimesh.Trimesh:
        """转换为trimesh对象用于分析（不合并顶点）"""
        return trimesh.Trimesh(
            vertices=self.vertices.copy(),
            faces=self.faces.copy(),
            process=False
        )


@dataclass
class MeshBuilder:
    """解码时逐条收集顶点和面，最后一次性生成数组"""
    name: str = ""
    vertices: List[Sequence[float]] = field(default_factory=list)
    faces: List[Sequence[int]] = field(default_factory=list)
    normals: List[Sequence[float]] = field(default_factory=list)

    def add_vertex(self, x: float, y: float, z: float) -> int:
        self.vertices.append((x, y, z))
        return len(self.vertices) - 1

    def add_triangle(self, a: int, b: int, c: int, normal: Optional[Sequence[float]] = None):
        self.faces.append((a, b, c))
        self.normals.append((0.0, 0.0, 0.0) if normal is None else tuple(normal))

    def build(self) -> Mesh:
        mesh = Mesh(
            vertices=self.vertices,
            faces=self.faces,
            normals=self.normals,
            name=self.name
        )
        mesh.validate()
        return mesh
