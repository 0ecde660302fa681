"""格式转换流程：解码 → 归一化 → 编码"""
import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional, Union

from .errors import EmptyResultError
from .formats import MeshFormat, CONTENT_TYPE_BINARY_STL, CONTENT_TYPE_TEXT
from .mesh import Mesh
from .normalizer import normalize
from .obj_codec import ObjCodec
from .stl_codec import StlCodec

logger = logging.getLogger(__name__)

FormatLike = Union[MeshFormat, str]


@dataclass
class ConvertOptions:
    """转换参数"""
    normalize: bool = True  # 将包围盒中心平移到原点
    stl_ascii: bool = False  # 输出ASCII STL而不是二进制
    require_geometry: bool = False  # 解码结果为空时报错而不是警告


@dataclass
class ConversionResult:
    """转换结果"""
    data: bytes
    format: MeshFormat
    content_type: str
    passthrough: bool = False
    triangle_count: Optional[int] = None
    offset: Optional[np.ndarray] = None

    @property
    def extension(self) -> str:
        return self.format.extension


_CODECS = {
    MeshFormat.STL: StlCodec,
    MeshFormat.OBJ: ObjCodec,
}


def content_type_for(fmt: MeshFormat, data: bytes) -> str:
    """二进制STL为 model/stl，ASCII STL和OBJ为纯文本"""
    if fmt is MeshFormat.STL and not StlCodec.is_ascii(data):
        return CONTENT_TYPE_BINARY_STL
    return CONTENT_TYPE_TEXT


def decode(data: bytes, fmt: FormatLike) -> Mesh:
    """用对应格式的解码器解析字节流"""
    return _CODECS[MeshFormat.parse(fmt)].decode(data)


def encode(mesh: Mesh, fmt: FormatLike, options: Optional[ConvertOptions] = None) -> bytes:
    """用对应格式的编码器生成字节流"""
    options = options or ConvertOptions()
    fmt = MeshFormat.parse(fmt)
    if fmt is MeshFormat.STL:
        return StlCodec.encode(mesh, ascii=options.stl_ascii)
    return _CODECS[fmt].encode(mesh)


def convert(
    data: bytes,
    source_format: FormatLike,
    target_format: FormatLike,
    options: Optional[ConvertOptions] = None
) -> ConversionResult:
    """
    在STL和OBJ之间转换

    源格式与目标格式相同时原样返回输入字节，不做解码/编码。

    Args:
        data: 源文件完整内容
        source_format: 源格式
        target_format: 目标格式
        options: 转换参数

    Returns:
        ConversionResult

    Raises:
        UnsupportedConversionError: 格式无法识别
        MalformedInputError: 源文件结构错误
        EmptyResultError: 设置了 require_geometry 且解码结果没有三角面
    """
    options = options or ConvertOptions()
    source = MeshFormat.parse(source_format)
    target = MeshFormat.parse(target_format)

    if source is target:
        logger.info("源格式与目标格式相同 (%s)，直接返回原文件", source.name)
        return ConversionResult(
            data=data,
            format=target,
            content_type=content_type_for(target, data),
            passthrough=True
        )

    mesh = decode(data, source)
    if mesh.is_empty:
        if options.require_geometry:
            raise EmptyResultError(f"{source.name} 文件中没有任何三角面")
        logger.warning("%s 文件中没有任何三角面，输出空模型", source.name)

    offset = normalize(mesh) if options.normalize else None
    output = encode(mesh, target, options)

    logger.info(
        "%s → %s: %d 个三角面, %d 字节",
        source.name, target.name, mesh.triangle_count, len(output)
    )
    return ConversionResult(
        data=output,
        format=target,
        content_type=content_type_for(target, output),
        triangle_count=mesh.triangle_count,
        offset=offset
    )
