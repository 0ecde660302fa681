"""支持的网格格式"""
from enum import Enum
from pathlib import Path
from typing import Union

from .errors import UnsupportedConversionError


class MeshFormat(Enum):
    """网格文件格式"""
    STL = 'stl'
    OBJ = 'obj'

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @classmethod
    def parse(cls, value: Union['MeshFormat', str]) -> 'MeshFormat':
        """
        解析格式标识，接受枚举成员、名称或扩展名（'STL'、'obj'、'.stl'）

        Raises:
            UnsupportedConversionError: 无法识别的格式
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().lstrip('.')
            for fmt in cls:
                if fmt.value == key:
                    return fmt
        raise UnsupportedConversionError(
            f"不支持的格式: {value!r}，仅支持 STL 和 OBJ"
        )

    @classmethod
    def from_filename(cls, filename: str) -> 'MeshFormat':
        """根据文件扩展名判断格式"""
        suffix = Path(filename).suffix
        if not suffix:
            raise UnsupportedConversionError(f"文件没有扩展名: {filename}")
        return cls.parse(suffix)


SUPPORTED_EXTENSIONS = {fmt.extension for fmt in MeshFormat}

CONTENT_TYPE_BINARY_STL = 'model/stl'
CONTENT_TYPE_TEXT = 'text/plain'
