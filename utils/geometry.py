"""几何工具函数"""
import numpy as np
from typing import Tuple


def compute_face_normal(
    v0: np.ndarray,
    v1: np.ndarray,
    v2: np.ndarray
) -> np.ndarray:
    """计算三角面法向量，退化三角形返回零向量"""
    edge1 = np.asarray(v1, dtype=np.float64) - v0
    edge2 = np.asarray(v2, dtype=np.float64) - v0
    normal = np.cross(edge1, edge2)
    norm = np.linalg.norm(normal)
    if norm > 1e-12:
        return normal / norm
    return np.zeros(3)


def compute_face_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """
    批量计算三角面法向量

    法向方向由顶点环绕顺序决定（从外侧看逆时针）。

    Args:
        vertices: (N, 3) 顶点坐标
        faces: (M, 3) 顶点索引

    Returns:
        (M, 3) 单位法向量，退化三角形为零向量
    """
    if len(faces) == 0:
        return np.zeros((0, 3))

    tris = vertices[faces]
    normals = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    norms = np.linalg.norm(normals, axis=1, keepdims=True)
    valid = norms[:, 0] > 1e-12
    normals[valid] /= norms[valid]
    normals[~valid] = 0.0
    return normals


def usable_normal_mask(normals: np.ndarray) -> np.ndarray:
    """给定法向量中可直接使用（非零长度、有限值）的行"""
    if len(normals) == 0:
        return np.zeros(0, dtype=bool)
    finite = np.all(np.isfinite(normals), axis=1)
    lengths = np.linalg.norm(np.where(finite[:, None], normals, 0.0), axis=1)
    return finite & (lengths > 1e-12)


def compute_bounds(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """计算轴对齐包围盒的最小、最大角点"""
    points = np.asarray(points, dtype=np.float64)
    return points.min(axis=0), points.max(axis=0)
