"""OBJ编解码"""
import logging
import numpy as np
from typing import Iterator, List, Tuple

from .errors import MalformedInputError
from .mesh import Mesh, MeshBuilder

logger = logging.getLogger(__name__)


class ObjCodec:
    """
    OBJ编解码器

    只处理 v 和 f 指令（o 用作网格名称），其余指令（vn、vt、g、usemtl、注释等）忽略。
    多边形面按扇形从第一个顶点三角化，凹多边形和自相交多边形结果不保证正确。
    """

    @classmethod
    def decode(cls, data: bytes) -> Mesh:
        """
        解码OBJ文本

        Args:
            data: UTF-8编码的文件内容

        Returns:
            Mesh，顶点按文件中的索引关系共享

        Raises:
            MalformedInputError: 数值无法解析或面索引越界
        """
        try:
            text = bytes(data).decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"OBJ 文件不是有效的UTF-8文本: {e}") from e

        builder = MeshBuilder()
        name_set = False
        skipped = 0

        for lineno, tokens in _logical_lines(text):
            keyword = tokens[0]
            if keyword == 'v':
                builder.add_vertex(*_parse_vertex(tokens[1:], lineno))
            elif keyword == 'f':
                indices = [
                    _resolve_index(t, len(builder.vertices), lineno)
                    for t in tokens[1:]
                ]
                if len(indices) < 3:
                    skipped += 1
                    continue
                # 扇形三角化: (0, i, i+1)
                for i in range(1, len(indices) - 1):
                    builder.add_triangle(indices[0], indices[i], indices[i + 1])
            elif keyword == 'o' and not name_set:
                builder.name = ' '.join(tokens[1:])
                name_set = True

        if skipped:
            logger.debug("忽略 %d 个少于三个顶点的面", skipped)

        mesh = builder.build()
        logger.debug(
            "解码OBJ: %d 个顶点, %d 个三角面", mesh.vertex_count, mesh.triangle_count
        )
        return mesh

    @staticmethod
    def encode(mesh: Mesh) -> bytes:
        """编码为OBJ文本：先写全部顶点，再写1起始索引的三角面"""
        lines = [f"# {mesh.vertex_count} vertices, {mesh.triangle_count} faces"]
        name = ' '.join(mesh.name.split())
        if name:
            lines.append(f"o {name}")

        for x, y, z in mesh.vertices.tolist():
            lines.append(f"v {x!r} {y!r} {z!r}")
        for a, b, c in (mesh.faces + 1).tolist():
            lines.append(f"f {a} {b} {c}")

        return ('\n'.join(lines) + '\n').encode('utf-8')


def _logical_lines(text: str) -> Iterator[Tuple[int, List[str]]]:
    """拆分记号，处理行尾反斜杠续行，跳过空行"""
    pending: List[str] = []
    start = 0
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not pending:
            start = lineno
        stripped = line.rstrip()
        if stripped.endswith('\\'):
            pending.append(stripped[:-1])
            continue
        pending.append(stripped)
        tokens = ' '.join(pending).split()
        pending = []
        if tokens:
            yield start, tokens
    if pending:
        tokens = ' '.join(pending).split()
        if tokens:
            yield start, tokens


def _parse_vertex(tokens: List[str], lineno: int) -> Tuple[float, float, float]:
    # 额外的 w 或顶点颜色分量忽略
    if len(tokens) < 3:
        raise MalformedInputError(f"顶点需要三个坐标，实际为 {len(tokens)} 个", lineno)
    try:
        x, y, z = (float(t) for t in tokens[:3])
    except ValueError as e:
        raise MalformedInputError(f"无法解析的顶点坐标: {' '.join(tokens)!r}", lineno) from e
    if not np.isfinite((x, y, z)).all():
        raise MalformedInputError(f"顶点坐标必须为有限数值: {' '.join(tokens)!r}", lineno)
    return x, y, z


def _resolve_index(token: str, vertex_count: int, lineno: int) -> int:
    """将 idx、idx/tex、idx//norm、idx/tex/norm 解析为0起始顶点索引"""
    raw = token.split('/')[0]
    try:
        index = int(raw)
    except ValueError as e:
        raise MalformedInputError(f"无法解析的面索引: {token!r}", lineno) from e

    if index > 0:
        resolved = index - 1
    elif index < 0:
        resolved = vertex_count + index
    else:
        raise MalformedInputError("面索引不能为0", lineno)

    if not 0 <= resolved < vertex_count:
        raise MalformedInputError(
            f"面索引 {index} 超出当前顶点表范围（共 {vertex_count} 个顶点）", lineno
        )
    return resolved
