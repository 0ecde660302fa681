"""文件上传存储与导出模块"""
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from .converter import ConvertOptions, convert
from .errors import ConversionError, UnsupportedConversionError
from .formats import MeshFormat, SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    """已上传的文件"""
    original_name: str
    file_name: str
    path: Path
    size: int
    format: MeshFormat


@dataclass
class ExportResult:
    """导出结果"""
    data: bytes
    download_name: str
    content_type: str
    format: MeshFormat


class UploadStore:
    """上传文件目录，按 <字段名>-<毫秒时间戳><扩展名> 生成文件名"""

    def __init__(self, upload_dir: Union[str, Path]):
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def save(self, original_name: str, data: bytes, field_name: str = 'file') -> StoredFile:
        """
        保存上传的文件

        Args:
            original_name: 上传时的原始文件名
            data: 文件内容
            field_name: 表单字段名，用作生成文件名的前缀

        Returns:
            StoredFile

        Raises:
            UnsupportedConversionError: 扩展名不是 .stl 或 .obj
        """
        ext = Path(original_name).suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise UnsupportedConversionError(
                "Unsupported file format. Only STL and OBJ files are allowed."
            )

        stamp = int(time.time() * 1000)
        path = self.upload_dir / f"{field_name}-{stamp}{ext}"
        while path.exists():
            stamp += 1
            path = self.upload_dir / f"{field_name}-{stamp}{ext}"

        path.write_bytes(data)
        logger.info("已保存上传文件 %s → %s (%d 字节)", original_name, path.name, len(data))
        return StoredFile(
            original_name=original_name,
            file_name=path.name,
            path=path,
            size=len(data),
            format=MeshFormat.parse(ext)
        )

    def resolve(self, file_name: str) -> Path:
        """获取存储文件路径，只接受纯文件名"""
        if not file_name or Path(file_name).name != file_name or file_name in ('.', '..'):
            raise FileNotFoundError(f"无效的文件名: {file_name!r}")
        path = self.upload_dir / file_name
        if not path.is_file():
            raise FileNotFoundError(f"文件不存在: {file_name}")
        return path

    def read(self, file_name: str) -> bytes:
        return self.resolve(file_name).read_bytes()


class Exporter:
    """文件导出器"""

    @staticmethod
    def download_name(file_name: str, fmt: MeshFormat) -> str:
        """下载文件名：原文件名第一个点之前的部分加目标扩展名"""
        return f"{file_name.split('.')[0]}{fmt.extension}"

    @classmethod
    def export(
        cls,
        store: UploadStore,
        file_name: str,
        target_format: Union[MeshFormat, str],
        options: Optional[ConvertOptions] = None
    ) -> ExportResult:
        """
        将已上传的文件导出为指定格式

        源格式与目标格式相同时返回原文件内容。

        Raises:
            FileNotFoundError: 文件不存在
            ConversionError: 格式不受支持或文件内容无法解析
        """
        path = store.resolve(file_name)
        result = convert(
            path.read_bytes(),
            MeshFormat.from_filename(file_name),
            target_format,
            options
        )
        return ExportResult(
            data=result.data,
            download_name=cls.download_name(file_name, result.format),
            content_type=result.content_type,
            format=result.format
        )


class BatchExporter:
    """批量导出器：转换文件夹中的所有模型"""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export_folder(
        self,
        source_dir: Union[str, Path],
        target_format: Union[MeshFormat, str],
        options: Optional[ConvertOptions] = None
    ) -> Dict[str, str]:
        """
        一键转换文件夹内所有STL/OBJ文件

        单个文件失败时记录警告并继续。

        Returns:
            {源文件名: 输出路径}
        """
        target = MeshFormat.parse(target_format)
        exported = {}

        for path in sorted(Path(source_dir).iterdir()):
            if not path.is_file() or path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                continue
            try:
                result = convert(
                    path.read_bytes(), MeshFormat.from_filename(path.name), target, options
                )
            except ConversionError as e:
                logger.warning("转换 %s 失败: %s", path.name, e)
                continue

            out_path = self.output_dir / f"{path.stem}{target.extension}"
            out_path.write_bytes(result.data)
            exported[path.name] = str(out_path)

        logger.info("批量导出完成: %d 个文件 → %s", len(exported), self.output_dir)
        return exported
