# src/chip8_tracer/ui/register_view.py
"""
CPUのレジスタを表示する汎用ウィジェット。
AbstractCpu.get_register_layout()のグループ定義から動的にUIを構築します。
"""
from typing import Dict, Optional
from PySide6.QtWidgets import QWidget, QVBoxLayout, QFormLayout, QLabel, QGroupBox
from PySide6.QtCore import Qt

from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.ui.fonts import get_monospace_font_family

GROUP_STYLE = """
    QGroupBox {
        font-weight: bold;
        border: 1px solid #222;
        border-radius: 4px;
        margin-top: 20px;
        color: #EEE;
        background-color: #121212;
    }
    QGroupBox::title {
        subcontrol-origin: margin;
        subcontrol-position: top left;
        padding: 0 5px;
        left: 10px;
        color: #00AAAA;
    }
"""

# @intent:responsibility CPUのレジスタ値を表示する汎用UIウィジェットを提供します。
class RegisterView(QWidget):
    """
    レジスタ名とその16進値を、グループごとのフォームとして表示するウィジェット。
    直前の更新から値が変わったレジスタは強調表示されます。
    """
    VALUE_COLOR = "#FFD700"
    CHANGED_COLOR = "#FF6060"

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #121212; color: #BBBBBB;")

        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(5, 5, 5, 5)

        self._font_family = get_monospace_font_family()
        self._register_labels: Dict[str, QLabel] = {}
        self._register_widths: Dict[str, int] = {}
        self._last_values: Dict[str, int] = {}
        self._cpu: Optional[AbstractCpu] = None

    # @intent:responsibility 表示対象のCPUを設定し、UIレイアウトを再構築します。
    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        self._setup_ui()
        self.update_registers()

    def _setup_ui(self) -> None:
        while self._layout.count():
            item = self._layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self._register_labels.clear()
        self._register_widths.clear()
        self._last_values.clear()

        for group in self._cpu.get_register_layout():
            group_box = QGroupBox(group.group_name)
            group_box.setStyleSheet(GROUP_STYLE)
            group_layout = QFormLayout(group_box)
            group_layout.setLabelAlignment(Qt.AlignLeft)
            group_layout.setContentsMargins(10, 15, 10, 10)
            group_layout.setSpacing(4)

            for reg in group.registers:
                hex_width = (reg.width + 3) // 4  # 16bit -> 4桁, 8bit -> 2桁
                self._register_widths[reg.name] = hex_width

                label_name = QLabel(f"{reg.name}:")
                label_name.setStyleSheet("font-weight: bold; color: #BBBBBB;")
                label_value = QLabel(f"0x{'0' * hex_width}")
                label_value.setAlignment(Qt.AlignRight)

                group_layout.addRow(label_name, label_value)
                self._register_labels[reg.name] = label_value

            self._layout.addWidget(group_box)

        self._layout.addStretch()

    # @intent:responsibility 現在のCPU状態を取得し、表示値と変化の強調を更新します。
    def update_registers(self) -> None:
        if not self._cpu:
            return

        for name, value in self._cpu.get_register_map().items():
            label = self._register_labels.get(name)
            if label is None:
                continue
            width = self._register_widths[name]
            label.setText(f"0x{value:0{width}X}")
            changed = name in self._last_values and self._last_values[name] != value
            color = self.CHANGED_COLOR if changed else self.VALUE_COLOR
            label.setStyleSheet(f"font-family: '{self._font_family}', monospace; color: {color};")
            self._last_values[name] = value

    def value_text(self, name: str) -> str:
        return self._register_labels[name].text()


if __name__ == '__main__':
    import sys
    from PySide6.QtWidgets import QApplication
    from chip8_tracer.config.builder import SystemBuilder
    from chip8_tracer.config.models import SystemConfig

    app = QApplication([])
    cpu, _ = SystemBuilder().build_system(SystemConfig())
    cpu.load_program(bytes([0x60, 0x05, 0x61, 0x0A, 0x80, 0x14]))

    view = RegisterView()
    view.setWindowTitle("Register View (CHIP-8)")
    view.set_cpu(cpu)
    view.show()

    cpu.step()
    view.update_registers()

    sys.exit(app.exec())
