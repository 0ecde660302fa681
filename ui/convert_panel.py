"""转换参数面板"""
from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QComboBox,
    QCheckBox, QGroupBox, QPushButton, QFormLayout
)
from PyQt5.QtCore import pyqtSignal

from core.converter import ConvertOptions
from core.formats import MeshFormat


class ConvertPanel(QWidget):
    """转换参数与模型信息面板"""

    # 信号
    export_clicked = pyqtSignal(object, object)  # ConvertOptions, MeshFormat

    def __init__(self, parent=None):
        super().__init__(parent)

        self.options = ConvertOptions()

        self._setup_ui()
        self.set_mesh_info(None)

    def _setup_ui(self):
        """设置UI"""
        layout = QVBoxLayout(self)

        # 模型信息
        info_group = QGroupBox("模型信息")
        info_layout = QFormLayout(info_group)
        self.name_label = QLabel()
        self.vertices_label = QLabel()
        self.faces_label = QLabel()
        self.size_label = QLabel()
        self.watertight_label = QLabel()
        info_layout.addRow("名称:", self.name_label)
        info_layout.addRow("顶点:", self.vertices_label)
        info_layout.addRow("三角面:", self.faces_label)
        info_layout.addRow("尺寸:", self.size_label)
        info_layout.addRow("封闭:", self.watertight_label)
        layout.addWidget(info_group)

        # 导出设置
        export_group = QGroupBox("导出设置")
        export_layout = QVBoxLayout(export_group)

        format_layout = QHBoxLayout()
        format_layout.addWidget(QLabel("目标格式:"))
        self.format_combo = QComboBox()
        for fmt in MeshFormat:
            self.format_combo.addItem(fmt.name, fmt)
        self.format_combo.currentIndexChanged.connect(self._on_format_changed)
        format_layout.addWidget(self.format_combo)
        export_layout.addLayout(format_layout)

        self.ascii_check = QCheckBox("输出ASCII STL")
        self.ascii_check.setChecked(self.options.stl_ascii)
        self.ascii_check.stateChanged.connect(self._on_options_changed)
        export_layout.addWidget(self.ascii_check)

        self.normalize_check = QCheckBox("将模型中心移到原点")
        self.normalize_check.setChecked(self.options.normalize)
        self.normalize_check.stateChanged.connect(self._on_options_changed)
        export_layout.addWidget(self.normalize_check)

        self.export_btn = QPushButton("导出")
        self.export_btn.clicked.connect(self._on_export)
        export_layout.addWidget(self.export_btn)

        layout.addWidget(export_group)
        layout.addStretch()

        self._on_format_changed()

    @property
    def target_format(self) -> MeshFormat:
        return self.format_combo.currentData()

    def set_mesh_info(self, info):
        """显示模型信息，None表示未加载"""
        self.export_btn.setEnabled(info is not None)
        if info is None:
            for label in (self.name_label, self.vertices_label, self.faces_label,
                          self.size_label, self.watertight_label):
                label.setText("-")
            return

        self.name_label.setText(info['name'] or "-")
        self.vertices_label.setText(str(info['vertices']))
        self.faces_label.setText(str(info['faces']))
        if info['bounds'] is None:
            self.size_label.setText("-")
        else:
            lo, hi = info['bounds']
            self.size_label.setText(
                f"{hi[0] - lo[0]:.2f} × {hi[1] - lo[1]:.2f} × {hi[2] - lo[2]:.2f}"
            )
        self.watertight_label.setText("是" if info['is_watertight'] else "否")

    def _on_format_changed(self):
        self.ascii_check.setEnabled(self.target_format is MeshFormat.STL)

    def _on_options_changed(self):
        self.options.stl_ascii = self.ascii_check.isChecked()
        self.options.normalize = self.normalize_check.isChecked()

    def _on_export(self):
        self.export_clicked.emit(self.options, self.target_format)
