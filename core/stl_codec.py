"""STL编解码（二进制与ASCII）"""
import logging
import struct
import numpy as np
from typing import Iterator, List, Optional, Sequence, Tuple

from .errors import MalformedInputError
from .mesh import Mesh, MeshBuilder

logger = logging.getLogger(__name__)

HEADER_SIZE = 80
COUNT_SIZE = 4
RECORD_SIZE = 50

# 每个三角形记录：法向量(3×f4) + 三个顶点(9×f4) + 属性(u2)，共50字节
RECORD_DTYPE = np.dtype([
    ('normal', '<f4', (3,)),
    ('vertices', '<f4', (3, 3)),
    ('attr', '<u2'),
])

NumberedLines = Iterator[Tuple[int, List[str]]]


def binary_size(triangle_count: int) -> int:
    """二进制STL的理论字节长度"""
    return HEADER_SIZE + COUNT_SIZE + RECORD_SIZE * triangle_count


class StlCodec:
    """STL编解码器"""

    # 不能以"solid"开头，否则会被当作ASCII文件
    HEADER_ID = b'Binary STL exported by mesh converter'

    @classmethod
    def is_ascii(cls, data: bytes) -> bool:
        """
        判断是否为ASCII STL

        以"solid"开头（区分大小写）且长度与二进制布局不一致时视为ASCII，
        否则按二进制处理。
        """
        if bytes(data[:5]) != b'solid':
            return False
        return not cls._binary_size_matches(data)

    @staticmethod
    def _binary_size_matches(data: bytes) -> bool:
        if len(data) < HEADER_SIZE + COUNT_SIZE:
            return False
        (count,) = struct.unpack_from('<I', data, HEADER_SIZE)
        return len(data) == binary_size(count)

    @classmethod
    def decode(cls, data: bytes) -> Mesh:
        """
        解码STL字节流

        Args:
            data: 完整文件内容

        Returns:
            Mesh，每个三角形拥有三个独立顶点

        Raises:
            MalformedInputError: 长度不符或内容无法解析
        """
        data = bytes(data)
        if cls.is_ascii(data):
            mesh = cls._decode_ascii(data)
            kind = 'ASCII'
        else:
            mesh = cls._decode_binary(data)
            kind = '二进制'
        logger.debug("解码%s STL: %d 个三角面", kind, mesh.triangle_count)
        return mesh

    @classmethod
    def encode(cls, mesh: Mesh, ascii: bool = False) -> bytes:
        """编码为STL，默认二进制"""
        if ascii:
            return cls._encode_ascii(mesh)
        return cls._encode_binary(mesh)

    # ---------- 二进制 ----------

    @staticmethod
    def _decode_binary(data: bytes) -> Mesh:
        if len(data) < HEADER_SIZE + COUNT_SIZE:
            raise MalformedInputError(
                f"二进制STL长度不足: {len(data)} 字节，至少需要 {HEADER_SIZE + COUNT_SIZE} 字节"
            )

        (count,) = struct.unpack_from('<I', data, HEADER_SIZE)
        expected = binary_size(count)
        if len(data) != expected:
            raise MalformedInputError(
                f"二进制STL声明 {count} 个三角面，应为 {expected} 字节，实际 {len(data)} 字节"
            )

        records = np.frombuffer(
            data, dtype=RECORD_DTYPE, count=count, offset=HEADER_SIZE + COUNT_SIZE
        )
        vertices = records['vertices'].astype(np.float64)
        bad = np.flatnonzero(~np.isfinite(vertices).all(axis=(1, 2)))
        if len(bad):
            raise MalformedInputError(f"第 {bad[0] + 1} 个三角面含有非有限顶点坐标")
        vertices = vertices.reshape(-1, 3)
        faces = np.arange(count * 3, dtype=np.int64).reshape(-1, 3)
        normals = records['normal'].astype(np.float64)
        return Mesh(vertices=vertices, faces=faces, normals=normals)

    @classmethod
    def _encode_binary(cls, mesh: Mesh) -> bytes:
        records = np.zeros(mesh.triangle_count, dtype=RECORD_DTYPE)
        records['normal'] = mesh.face_normals()
        records['vertices'] = mesh.vertices[mesh.faces]

        header = cls.HEADER_ID[:HEADER_SIZE].ljust(HEADER_SIZE, b'\0')
        return header + struct.pack('<I', mesh.triangle_count) + records.tobytes()

    # ---------- ASCII ----------

    @classmethod
    def _decode_ascii(cls, data: bytes) -> Mesh:
        # 部分导出工具在endsolid后补NUL；名称行可能是本地编码，非法字节替换后关键字与数值仍逐一校验
        text = data.rstrip(b"\0 \t\r\n").decode("utf-8", errors="replace")

        lines = _numbered_lines(text)
        builder = MeshBuilder()
        solids = 0

        for lineno, tokens in lines:
            if tokens[0].lower() != 'solid' and solids:
                logger.debug("忽略第%d行起 endsolid 之后的多余内容", lineno)
                break
            if tokens[0].lower() != 'solid':
                raise MalformedInputError(f"期望 'solid'，实际为 {tokens[0]!r}", lineno)
            if solids == 0:
                builder.name = ' '.join(tokens[1:])
            solids += 1
            cls._parse_solid(lines, builder)

        return builder.build()

    @staticmethod
    def _parse_solid(lines: NumberedLines, builder: MeshBuilder):
        for lineno, tokens in lines:
            keyword = tokens[0].lower()
            if keyword == 'endsolid':
                return
            if keyword != 'facet' or len(tokens) != 5 or tokens[1].lower() != 'normal':
                raise MalformedInputError(
                    f"期望 'facet normal nx ny nz' 或 'endsolid'，实际为 {' '.join(tokens)!r}",
                    lineno
                )
            normal = _parse_floats(tokens[2:], lineno)

            _expect(lines, ['outer', 'loop'])
            indices = []
            for _ in range(3):
                lineno, tokens = _next_line(lines, 'vertex')
                if tokens[0].lower() != 'vertex' or len(tokens) != 4:
                    raise MalformedInputError(
                        f"期望 'vertex x y z'，实际为 {' '.join(tokens)!r}", lineno
                    )
                vertex = _parse_floats(tokens[1:], lineno, finite=True)
                indices.append(builder.add_vertex(*vertex))
            _expect(lines, ['endloop'])
            _expect(lines, ['endfacet'])

            builder.add_triangle(*indices, normal=normal)

        raise MalformedInputError("文件意外结束，缺少 'endsolid'")

    @staticmethod
    def _encode_ascii(mesh: Mesh) -> bytes:
        name = ' '.join(mesh.name.split()) or 'mesh'
        lines = [f"solid {name}"]

        triangles = mesh.vertices[mesh.faces]
        for normal, triangle in zip(mesh.face_normals(), triangles):
            lines.append(f"  facet normal {_format_floats(normal)}")
            lines.append("    outer loop")
            for vertex in triangle:
                lines.append(f"      vertex {_format_floats(vertex)}")
            lines.append("    endloop")
            lines.append("  endfacet")

        lines.append(f"endsolid {name}")
        return ('\n'.join(lines) + '\n').encode('utf-8')


def _numbered_lines(text: str) -> NumberedLines:
    """逐行拆分记号，跳过空行"""
    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens = line.split()
        if tokens:
            yield lineno, tokens


def _next_line(lines: NumberedLines, expected: str) -> Tuple[int, List[str]]:
    item: Optional[Tuple[int, List[str]]] = next(lines, None)
    if item is None:
        raise MalformedInputError(f"文件意外结束，期望 '{expected}'")
    return item


def _expect(lines: NumberedLines, keywords: List[str]):
    expected = ' '.join(keywords)
    lineno, tokens = _next_line(lines, expected)
    if [t.lower() for t in tokens] != keywords:
        raise MalformedInputError(
            f"期望 '{expected}'，实际为 {' '.join(tokens)!r}", lineno
        )


def _parse_floats(tokens: Sequence[str], lineno: int, finite: bool = False) -> Tuple[float, ...]:
    """finite为True时拒绝nan/inf（用于顶点坐标；法向量非有限时按缺失处理）"""
    try:
        values = tuple(float(t) for t in tokens)
    except ValueError as e:
        raise MalformedInputError(f"无法解析的数值: {' '.join(tokens)!r}", lineno) from e
    if finite and not np.isfinite(values).all():
        raise MalformedInputError(f"坐标必须为有限数值: {' '.join(tokens)!r}", lineno)
    return values


def _format_floats(values: Sequence[float]) -> str:
    # float32最短可往返表示
    return ' '.join(
        np.format_float_scientific(np.float32(v), unique=True, trim='0', exp_digits=2)
        for v in values
    )
