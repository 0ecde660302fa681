"""网格归一化：将包围盒中心平移到原点"""
import logging
import numpy as np
from typing import Optional

from .mesh import Mesh, BoundingBox

logger = logging.getLogger(__name__)


def compute_bounding_box(mesh: Mesh) -> Optional[BoundingBox]:
    """计算网格所有顶点的包围盒，空网格返回None"""
    return mesh.bounding_box()


def normalize(mesh: Mesh) -> np.ndarray:
    """
    将网格包围盒中心平移到原点（原地修改）

    不缩放、不旋转、不合并顶点，三角面数量和拓扑不变。

    Args:
        mesh: 要归一化的网格

    Returns:
        实际施加的平移量，空网格为零向量
    """
    bbox = compute_bounding_box(mesh)
    if bbox is None:
        return np.zeros(3)

    offset = -bbox.center
    mesh.translate(offset)
    logger.debug(
        "归一化: 中心 (%.6g, %.6g, %.6g) 平移到原点",
        *bbox.center
    )
    return offset
