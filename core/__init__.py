"""核心模块"""
from .errors import (
    ConversionError, MalformedInputError, UnsupportedConversionError, EmptyResultError
)
from .formats import MeshFormat
from .mesh import Mesh, MeshBuilder, Triangle, BoundingBox
from .normalizer import compute_bounding_box, normalize
from .stl_codec import StlCodec
from .obj_codec import ObjCodec
from .converter import ConvertOptions, ConversionResult, convert, decode, encode
from .mesh_loader import LoadedModel, MeshLoader
from .exporter import UploadStore, StoredFile, Exporter, ExportResult, BatchExporter
