"""工具模块"""
from .geometry import (
    compute_face_normal,
    compute_face_normals,
    usable_normal_mask,
    compute_bounds
)
