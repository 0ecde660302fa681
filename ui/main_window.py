"""主窗口"""
import logging
from pathlib import Path
from typing import Optional

from PyQt5.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QAction, QFileDialog,
    QMessageBox, QStatusBar
)
from PyQt5.QtGui import QKeySequence

from .convert_panel import ConvertPanel
from core.converter import ConvertOptions
from core.errors import ConversionError
from core.exporter import Exporter
from core.formats import MeshFormat
from core.mesh_loader import LoadedModel, MeshLoader

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """主窗口"""

    def __init__(self):
        super().__init__()

        self.model: Optional[LoadedModel] = None

        self._setup_ui()
        self._setup_menu()
        self._connect_signals()

    def _setup_ui(self):
        """设置UI"""
        self.setWindowTitle("STL/OBJ 模型格式转换工具")
        self.setMinimumSize(420, 360)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        self.convert_panel = ConvertPanel()
        layout.addWidget(self.convert_panel)

        # 状态栏
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("就绪 - 请打开STL或OBJ模型")

    def _setup_menu(self):
        """设置菜单"""
        menubar = self.menuBar()

        # 文件菜单
        file_menu = menubar.addMenu("文件(&F)")

        open_action = QAction("打开模型(&O)...", self)
        open_action.setShortcut(QKeySequence.Open)
        open_action.triggered.connect(self._on_open_model)
        file_menu.addAction(open_action)

        export_action = QAction("导出(&E)...", self)
        export_action.setShortcut("Ctrl+E")
        export_action.triggered.connect(
            lambda: self._on_export(self.convert_panel.options, self.convert_panel.target_format)
        )
        file_menu.addAction(export_action)

        file_menu.addSeparator()

        exit_action = QAction("退出(&X)", self)
        exit_action.setShortcut(QKeySequence.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # 帮助菜单
        help_menu = menubar.addMenu("帮助(&H)")

        about_action = QAction("关于(&A)", self)
        about_action.triggered.connect(self._on_about)
        help_menu.addAction(about_action)

    def _connect_signals(self):
        """连接信号"""
        self.convert_panel.export_clicked.connect(self._on_export)

    def _on_open_model(self):
        """打开模型"""
        filepath, _ = QFileDialog.getOpenFileName(
            self, "打开3D模型",
            "",
            "3D模型文件 (*.stl *.obj);;所有文件 (*)"
        )

        if not filepath:
            return

        try:
            model = MeshLoader.load_source(filepath)
        except (ConversionError, OSError) as e:
            logger.warning("加载 %s 失败: %s", filepath, e)
            QMessageBox.critical(self, "错误", f"无法加载模型文件:\n{e}")
            return

        mesh = model.mesh
        self.model = model

        info = MeshLoader.get_mesh_info(mesh)
        self.convert_panel.set_mesh_info(info)

        if mesh.is_empty:
            QMessageBox.warning(self, "警告", "模型中没有任何三角面")

        self.status_bar.showMessage(
            f"已加载: {model.path.name} | {model.format.name} | "
            f"顶点: {info['vertices']} | 面: {info['faces']}"
        )

    def _on_export(self, options: ConvertOptions, target: MeshFormat):
        """导出为目标格式"""
        if self.model is None:
            QMessageBox.warning(self, "警告", "请先打开模型")
            return

        default_name = Exporter.download_name(self.model.path.name, target)
        filepath, _ = QFileDialog.getSaveFileName(
            self, "导出模型",
            str(self.model.path.with_name(default_name)),
            f"{target.name}文件 (*{target.extension})"
        )

        if not filepath:
            return
        if Path(filepath).suffix.lower() != target.extension:
            filepath += target.extension

        try:
            result = MeshLoader.save_converted(self.model, filepath, options)
        except (ConversionError, OSError) as e:
            logger.warning("导出失败: %s", e)
            QMessageBox.critical(self, "导出失败", str(e))
            return

        self.status_bar.showMessage(f"已导出: {filepath} ({len(result.data)} 字节)")

    def _on_about(self):
        """关于对话框"""
        QMessageBox.about(
            self,
            "关于",
            "STL/OBJ 模型格式转换工具\n\n"
            "读取二进制/ASCII STL 和 OBJ 三角网格，\n"
            "将模型中心移到原点后导出为另一种格式。\n\n"
            "版本: 1.0"
        )
