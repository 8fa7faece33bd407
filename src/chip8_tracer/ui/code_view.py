"""
逆アセンブルコードを表示するウィジェット。
"""
from typing import Iterable, List, Tuple

from PySide6.QtWidgets import QWidget, QVBoxLayout, QTableWidget, QTableWidgetItem, QHeaderView
from PySide6.QtGui import QColor
from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.transport.bus import BusAccess, BusAccessType
from chip8_tracer.ui.fonts import get_monospace_font

# @intent:responsibility 逆アセンブルされたコードを表形式で表示し、現在のPCをハイライトします。
class CodeView(QWidget):
    HIGHLIGHT = QColor("#404000")
    NORMAL = QColor("#101010")
    WINDOW_BYTES = 512

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.table = QTableWidget()
        self.table.setColumnCount(3)
        self.table.setHorizontalHeaderLabels(["Address", "Bytes", "Mnemonic"])
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(1, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(2, QHeaderView.Stretch)
        self.table.setFont(get_monospace_font(10))
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setShowGrid(False)
        self.table.setStyleSheet("background-color: #101010; color: #BBBBBB; gridline-color: #303030;")
        layout.addWidget(self.table)

        self.disassembled_data: List[Tuple[int, str, str]] = []

    # @intent:responsibility PCが表示範囲外のとき、または表示範囲への書き込みがあったときだけ再逆アセンブルし、PCの行をハイライトします。
    def update_code(self, cpu: AbstractCpu, pc: int, bus_activity: Iterable[BusAccess] = ()) -> None:
        if self._writes_into_window(bus_activity):
            self.disassembled_data = []
        row_index = self._row_of(pc)
        if row_index < 0:
            self.disassembled_data = cpu.disassemble(pc, self.WINDOW_BYTES)
            self.table.setRowCount(len(self.disassembled_data))
            for row, (addr, hex_dump, mnemonic) in enumerate(self.disassembled_data):
                self.table.setItem(row, 0, QTableWidgetItem(f"{addr:04X}"))
                self.table.setItem(row, 1, QTableWidgetItem(hex_dump))
                self.table.setItem(row, 2, QTableWidgetItem(mnemonic))
            row_index = self._row_of(pc)

        for row in range(self.table.rowCount()):
            color = self.HIGHLIGHT if row == row_index else self.NORMAL
            for column in range(3):
                self.table.item(row, column).setBackground(color)

        if row_index >= 0:
            self.table.scrollToItem(self.table.item(row_index, 0), QTableWidget.EnsureVisible)

    # @intent:responsibility 自己書き換えで表示中の命令が古くなったかを判定します。
    def _writes_into_window(self, bus_activity: Iterable[BusAccess]) -> bool:
        if not self.disassembled_data:
            return False
        low = self.disassembled_data[0][0]
        high = self.disassembled_data[-1][0] + 1
        return any(
            access.access_type == BusAccessType.WRITE and low <= access.address <= high
            for access in bus_activity
        )

    def _row_of(self, pc: int) -> int:
        for i, (addr, _, _) in enumerate(self.disassembled_data):
            if addr == pc:
                return i
        return -1

    # @intent:responsibility メモリ内容が変わった場合（ROMの再ロードなど）にキャッシュを破棄します。
    def reset_cache(self) -> None:
        self.disassembled_data = []
        self.table.setRowCount(0)
