"""转换异常定义"""
from typing import Optional


class ConversionError(Exception):
    """网格转换错误基类"""


class MalformedInputError(ConversionError, ValueError):
    """输入文件结构错误（长度不符、无法解析的记号、索引越界等）"""

    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"第{line}行: {message}"
        super().__init__(message)
        self.line = line


class UnsupportedConversionError(ConversionError):
    """不支持的格式或格式组合"""


class EmptyResultError(ConversionError):
    """解析成功但不含任何三角面"""
