# src/chip8_tracer/ui/main_window.py
"""
メインウィンドウの実装。
ディスプレイを中央に、逆アセンブルとレジスタをドックに配置し、
QTimerによるフレームループでインタプリタを実時間に合わせて駆動します。
"""
import sys
import time
from typing import Dict, Optional, Tuple

from PySide6.QtWidgets import (
    QMainWindow, QApplication, QDockWidget, QTabWidget, QToolBar, QLabel, QFileDialog, QMessageBox
)
from PySide6.QtGui import QPalette, QColor, QAction, QCloseEvent, QKeyEvent
from PySide6.QtCore import Qt, QTimer, Slot

from chip8_tracer.common.errors import EmulationError, FatalCpuError
from chip8_tracer.config.loader import ConfigLoader
from chip8_tracer.config.builder import SystemBuilder
from chip8_tracer.config.models import SystemConfig
from chip8_tracer.arch.chip8.cpu import Chip8Cpu
from chip8_tracer.transport.bus import Bus
from chip8_tracer.loader.loader import RomLoader
from chip8_tracer.debugger.debugger import Debugger
from chip8_tracer.core.snapshot import Snapshot
from .display_view import DisplayView
from .register_view import RegisterView
from .code_view import CodeView
from .keymap import resolve_keymap
from .fonts import get_monospace_font_family

FRAME_INTERVAL_MS = 16
# 1フレームで消化する実時間の上限（デバッガでの停止やウィンドウ移動による遅延を吸収する）
MAX_FRAME_SECONDS = 0.1

# @intent:responsibility アプリケーションのメインウィンドウを定義し、UIの主要なコンポーネントを組み立てます。
class MainWindow(QMainWindow):
    def __init__(self, config: Optional[SystemConfig] = None, parent=None):
        super(MainWindow, self).__init__(parent)
        self.setWindowTitle("CHIP-8 Tracer")
        self.setDockNestingEnabled(True)

        self._rom_data: Optional[bytes] = None
        self._rom_path: Optional[str] = None
        self._last_tick: Optional[float] = None
        self._key_bindings: Dict[int, int] = {}

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)

        self._set_dark_theme()
        self.display_view = DisplayView()
        self.setCentralWidget(self.display_view)
        self._create_toolbar()
        self._create_inspector()
        self._create_menus()
        self._create_status_bar()

        self._apply_config(config or SystemConfig())
        self._update_ui_state(False)

    # --- 構築 ---

    def _create_menus(self):
        file_menu = self.menuBar().addMenu("File")

        self.load_rom_action = QAction("Load ROM...", self)
        self.load_rom_action.setShortcut("Ctrl+O")
        self.load_rom_action.triggered.connect(self._load_rom_dialog)
        file_menu.addAction(self.load_rom_action)

        self.load_config_action = QAction("Load System Config...", self)
        self.load_config_action.triggered.connect(self._load_config_dialog)
        file_menu.addAction(self.load_config_action)

    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        toolbar.setObjectName("MainToolbar")
        self.addToolBar(toolbar)

        self.run_action = QAction("Run", self)
        self.run_action.triggered.connect(self.start)
        toolbar.addAction(self.run_action)

        self.stop_action = QAction("Stop", self)
        self.stop_action.triggered.connect(self.stop)
        toolbar.addAction(self.stop_action)

        self.step_action = QAction("Step", self)
        self.step_action.triggered.connect(self.step)
        toolbar.addAction(self.step_action)

        self.reset_action = QAction("Reset", self)
        self.reset_action.triggered.connect(self.reset)
        toolbar.addAction(self.reset_action)

    def _create_inspector(self):
        inspector = QDockWidget("Status Inspector", self)
        inspector.setAllowedAreas(Qt.RightDockWidgetArea | Qt.LeftDockWidgetArea)
        tabs = QTabWidget()
        self.register_view = RegisterView()
        tabs.addTab(self.register_view, "Registers")
        self.code_view = CodeView()
        tabs.addTab(self.code_view, "Assembler")
        inspector.setWidget(tabs)
        self.addDockWidget(Qt.RightDockWidgetArea, inspector)

    def _create_status_bar(self):
        self.state_label = QLabel("No ROM loaded")
        self.sound_label = QLabel("")
        self.statusBar().addWidget(self.state_label, 1)
        self.statusBar().addPermanentWidget(self.sound_label)

    # @intent:responsibility 構成に基づいてCPUとバスを生成し、各ビューを接続し直します。
    # @intent:pre-condition `system`を渡す場合は、configから生成済みの (cpu, bus) であること。
    def _apply_config(self, config: SystemConfig, system: Optional[Tuple[Chip8Cpu, Bus]] = None) -> None:
        key_bindings = resolve_keymap(config.keymap)
        if system is None:
            system = SystemBuilder().build_system(config)
        self.config = config
        self._key_bindings = key_bindings
        self.cpu, self.bus = system
        self.debugger = Debugger(self.cpu)

        self.display_view.set_scale(config.display.scale)
        self.display_view.set_colors(config.display.foreground, config.display.background)
        self.display_view.set_framebuffer(self.cpu.display)
        self.register_view.set_cpu(self.cpu)
        self.code_view.reset_cache()

    # --- 実行制御 ---

    @property
    def is_running(self) -> bool:
        return self._frame_timer.isActive()

    def _update_ui_state(self, is_running: bool):
        loaded = self.cpu.program_loaded
        self.load_rom_action.setEnabled(not is_running)
        self.load_config_action.setEnabled(not is_running)
        self.run_action.setEnabled(loaded and not is_running)
        self.step_action.setEnabled(loaded and not is_running)
        self.reset_action.setEnabled(self._rom_data is not None)
        self.stop_action.setEnabled(is_running)

    # @intent:responsibility ROMファイルを読み込み、CPUをリセットした上でロードします。
    # @intent:post-condition 読み込みまたは容量検査に失敗した場合、実行中のプログラムは変更されません。
    def load_rom(self, path: str) -> None:
        data = RomLoader().read_rom(path)
        self.cpu.check_program(data)
        self.cpu.reset()
        self.cpu.load_program(data)
        self._rom_data = data
        self._rom_path = path
        self.debugger = Debugger(self.cpu)
        self.code_view.reset_cache()
        self._refresh_views()
        self.state_label.setText(f"Loaded {path} ({len(data)} bytes)")
        self._update_ui_state(False)

    @Slot()
    def start(self):
        if not self.cpu.program_loaded or self.is_running:
            return
        self._last_tick = time.perf_counter()
        self._frame_timer.start()
        self.state_label.setText("Running...")
        self._update_ui_state(True)

    @Slot()
    def stop(self):
        self._frame_timer.stop()
        self._last_tick = None
        # 連続実行中の書き込みは追跡していないため、逆アセンブルを作り直す
        self.code_view.reset_cache()
        self.state_label.setText(f"Stopped at PC {self.cpu.get_state().pc:#06x}")
        self._refresh_views()
        self._update_ui_state(False)

    @Slot()
    def step(self):
        try:
            snapshot = self.debugger.step_instruction()
        except FatalCpuError as e:
            self._report_fault(e)
            return
        self._refresh_views(snapshot)

    # @intent:responsibility CPUを初期化し、最後にロードしたROMを再ロードします。
    @Slot()
    def reset(self):
        was_running = self.is_running
        self._frame_timer.stop()
        self.cpu.reset()
        if self._rom_data is not None:
            self.cpu.load_program(self._rom_data)
        self.code_view.reset_cache()
        self._refresh_views()
        self.state_label.setText("Reset")
        if was_running:
            self.start()
        else:
            self._update_ui_state(False)

    # @intent:responsibility 前回のフレームからの実経過時間（上限付き）分だけCPUを進めます。
    @Slot()
    def _on_frame(self):
        now = time.perf_counter()
        elapsed = min(now - (self._last_tick or now), MAX_FRAME_SECONDS)
        self._last_tick = now
        try:
            self.cpu.run_for(elapsed)
        except FatalCpuError as e:
            self._report_fault(e)
            return
        self.display_view.refresh()
        self._update_sound_indicator()

    def _report_fault(self, error: FatalCpuError) -> None:
        self._frame_timer.stop()
        self.code_view.reset_cache()
        self._refresh_views()
        self.state_label.setText(f"Halted: {error}")
        self._update_ui_state(False)
        QMessageBox.critical(self, "CPU Fault", f"Execution halted: {error}\n\nUse Reset to restart the program.")

    def _refresh_views(self, snapshot: Optional[Snapshot] = None) -> None:
        self.display_view.refresh()
        self.register_view.update_registers()
        pc = snapshot.state.pc if snapshot is not None else self.cpu.get_state().pc
        if self.cpu.program_loaded:
            activity = snapshot.bus_activity if snapshot is not None else ()
            self.code_view.update_code(self.cpu, pc, activity)
        self._update_sound_indicator()

    def _update_sound_indicator(self) -> None:
        self.sound_label.setText("BEEP" if self.cpu.is_sound_active() else "")

    # --- 入力 ---

    def keyPressEvent(self, event: QKeyEvent):
        key = self._key_bindings.get(event.key())
        if key is None or event.isAutoRepeat():
            super().keyPressEvent(event)
            return
        self.cpu.keypad.set_key(key, True)

    def keyReleaseEvent(self, event: QKeyEvent):
        key = self._key_bindings.get(event.key())
        if key is None or event.isAutoRepeat():
            super().keyReleaseEvent(event)
            return
        self.cpu.keypad.set_key(key, False)

    # --- ダイアログ ---

    @Slot()
    def _load_rom_dialog(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open CHIP-8 ROM", "", "CHIP-8 Programs (*.ch8 *.c8);;All Files (*)")
        if file_name:
            try:
                self.load_rom(file_name)
            except EmulationError as e:
                QMessageBox.critical(self, "Error", f"Failed to load ROM: {e}")

    @Slot()
    def _load_config_dialog(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open System Config", "", "YAML Files (*.yaml *.yml);;All Files (*)")
        if not file_name:
            return
        try:
            config = ConfigLoader().load_from_file(file_name)
            # 新しい構成で組み立てとROMの再ロードが成功してから差し替える
            cpu, bus = SystemBuilder().build_system(config)
            if self._rom_data is not None:
                cpu.load_program(self._rom_data)
            self._apply_config(config, (cpu, bus))
            self._refresh_views()
            self._update_ui_state(False)
            self.state_label.setText(f"Loaded system config from {file_name}")
        except EmulationError as e:
            QMessageBox.critical(self, "Error", f"Failed to load system config: {e}")

    # @intent:responsibility アプリケーションにダークテーマを適用します。
    def _set_dark_theme(self):
        dark_palette = QPalette()
        dark_palette.setColor(QPalette.Window, QColor(29, 29, 29))
        dark_palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Base, QColor(30, 30, 30))
        dark_palette.setColor(QPalette.Text, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
        dark_palette.setColor(QPalette.HighlightedText, QColor(0, 0, 0))
        QApplication.setPalette(dark_palette)

        font_family = get_monospace_font_family()
        self.setStyleSheet(f"""
            QWidget {{ font-family: '{font_family}', monospace; font-size: 10pt; }}
            QMainWindow, QToolBar {{ background-color: #1D1D1D; border: none; }}
            QDockWidget::title {{ text-align: left; background: #101010; padding: 4px; font-weight: bold; }}
            QTabWidget::pane {{ border-top: 2px solid #2A82DA; }}
            QTabBar::tab {{ background: #1E1E1E; padding: 6px 12px; min-width: 80px; }}
            QTabBar::tab:selected {{ background: #101010; border: 1px solid #2A82DA; }}
        """)

    def closeEvent(self, event: QCloseEvent):
        self._frame_timer.stop()
        self.debugger.stop()
        event.accept()


if __name__ == '__main__':
    app = QApplication(sys.argv)
    main_win = MainWindow()
    main_win.show()
    sys.exit(app.exec())
