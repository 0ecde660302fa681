"""3D模型文件加载与保存"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .converter import ConversionResult, ConvertOptions, convert, decode
from .formats import MeshFormat
from .mesh import Mesh

logger = logging.getLogger(__name__)


@dataclass
class LoadedModel:
    """已加载的模型：原始字节与解码结果"""
    path: Path
    format: MeshFormat
    data: bytes
    mesh: Mesh


class MeshLoader:
    """网格加载器，支持STL、OBJ格式"""

    SUPPORTED_FORMATS = {fmt.extension for fmt in MeshFormat}

    @classmethod
    def load(cls, filepath: str) -> Mesh:
        """加载3D模型文件，返回Mesh对象"""
        return cls.load_source(filepath).mesh

    @classmethod
    def load_source(cls, filepath: str) -> LoadedModel:
        """
        读取并解码模型文件，同时保留原始字节

        Args:
            filepath: 文件路径，格式由扩展名决定

        Returns:
            LoadedModel，网格名称缺省为文件名（不含扩展名）

        Raises:
            FileNotFoundError: 文件不存在
            UnsupportedConversionError: 扩展名不受支持
            MalformedInputError: 文件内容无法解析
        """
        path = Path(filepath)
        fmt = MeshFormat.from_filename(path.name)

        if not path.exists():
            raise FileNotFoundError(f"文件不存在: {filepath}")

        data = path.read_bytes()
        mesh = decode(data, fmt)
        if not mesh.name:
            mesh.name = path.stem
        logger.info(
            "已加载 %s: %d 个顶点, %d 个三角面",
            path.name, mesh.vertex_count, mesh.triangle_count
        )
        return LoadedModel(path=path, format=fmt, data=data, mesh=mesh)

    @classmethod
    def get_mesh_info(cls, mesh: Mesh) -> dict:
        """获取网格信息"""
        bbox = mesh.bounding_box()
        info = {
            'name': mesh.name,
            'vertices': mesh.vertex_count,
            'faces': mesh.triangle_count,
            'bounds': None if bbox is None else [bbox.min.tolist(), bbox.max.tolist()],
            'center': None if bbox is None else bbox.center.tolist(),
            'is_watertight': False,
            'volume': None,
            'area': 0.0,
        }
        if mesh.is_empty:
            return info

        # 顶点按位置合并后才能判断是否封闭
        tm = mesh.to_trimesh()
        tm.merge_vertices()
        info['is_watertight'] = bool(tm.is_watertight)
        info['volume'] = float(abs(tm.volume)) if tm.is_watertight else None
        info['area'] = float(tm.area)
        return info

    @classmethod
    def save_converted(
        cls,
        model: LoadedModel,
        filepath: str,
        options: Optional[ConvertOptions] = None
    ) -> ConversionResult:
        """
        将已加载的模型转换后写入文件

        同格式时原样写出原始字节。

        Args:
            model: load_source 的返回值
            filepath: 保存路径，目标格式由扩展名决定
            options: 转换参数

        Returns:
            ConversionResult
        """
        path = Path(filepath)
        target = MeshFormat.from_filename(path.name)
        result = convert(model.data, model.format, target, options)
        path.write_bytes(result.data)
        logger.info("已保存 %s (%s, %d 字节)", path, target.name, len(result.data))
        return result
