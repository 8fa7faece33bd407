# tests/ui/test_main_window.py
"""
MainWindowのROMロード、実行制御、キー入力、フォールト表示の検証。
"""
import pytest
from PySide6.QtCore import Qt, QEvent
from PySide6.QtGui import QKeyEvent

from chip8_tracer.common.errors import RomLoadError
from chip8_tracer.config.models import SystemConfig
from chip8_tracer.ui import main_window as main_window_module
from chip8_tracer.ui.main_window import MainWindow


@pytest.fixture
def window(qapp):
    win = MainWindow(SystemConfig(seed=3))
    yield win
    win.stop()
    win.close()


@pytest.fixture
def rom_file(tmp_path):
    path = tmp_path / "loop.ch8"
    # LD V0, 5 / ADD V0, 1 / JP $202
    path.write_bytes(bytes([0x60, 0x05, 0x70, 0x01, 0x12, 0x02]))
    return str(path)


def test_initial_state_without_rom(window):
    assert not window.run_action.isEnabled()
    assert not window.step_action.isEnabled()
    assert not window.reset_action.isEnabled()


def test_load_rom_and_step(window, rom_file):
    window.load_rom(rom_file)
    assert window.run_action.isEnabled()
    window.step()
    window.step()
    assert window.cpu.get_state().v[0] == 6
    assert window.register_view.value_text("V0") == "0x06"


# @intent:test_case_reset Resetが最後にロードしたROMを再ロードすることを検証します。
def test_reset_reloads_last_rom(window, rom_file):
    window.load_rom(rom_file)
    window.step()
    window.reset()
    assert window.cpu.program_loaded
    assert window.cpu.get_state().pc == 0x200
    assert window.cpu.get_state().v[0] == 0


def test_start_and_stop(window, rom_file):
    window.load_rom(rom_file)
    window.start()
    assert window.is_running
    assert window.stop_action.isEnabled()
    assert not window.load_rom_action.isEnabled()
    window.stop()
    assert not window.is_running
    assert window.run_action.isEnabled()


def test_frame_advances_cpu(window, rom_file):
    window.load_rom(rom_file)
    window.start()
    window._last_tick -= 0.05
    window._on_frame()
    assert window.cpu.cycle_count > 0


def test_key_events_update_keypad(window):
    press = QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_A, Qt.KeyboardModifier.NoModifier)
    window.keyPressEvent(press)
    assert window.cpu.keypad.is_pressed(0xA)
    release = QKeyEvent(QEvent.Type.KeyRelease, Qt.Key.Key_A, Qt.KeyboardModifier.NoModifier)
    window.keyReleaseEvent(release)
    assert not window.cpu.keypad.is_pressed(0xA)


def test_fault_is_reported(window, tmp_path, monkeypatch):
    shown = []
    monkeypatch.setattr(main_window_module.QMessageBox, "critical", lambda *args: shown.append(args))
    path = tmp_path / "ret.ch8"
    path.write_bytes(bytes([0x00, 0xEE]))
    window.load_rom(str(path))
    window.step()
    assert window.cpu.fault is not None
    assert window.state_label.text().startswith("Halted")
    assert len(shown) == 1


def test_sound_indicator(window, tmp_path):
    path = tmp_path / "beep.ch8"
    path.write_bytes(bytes([0x60, 0x10, 0xF0, 0x18]))
    window.load_rom(str(path))
    window.step()
    window.step()
    assert window.sound_label.text() == "BEEP"


# @intent:test_case_failed_load 容量超過のROMロードが失敗しても、実行中のプログラムが保持されることを検証します。
def test_failed_rom_load_keeps_current_program(window, rom_file, tmp_path):
    window.load_rom(rom_file)
    window.step()
    big = tmp_path / "big.ch8"
    big.write_bytes(bytes(0xE01))

    with pytest.raises(RomLoadError):
        window.load_rom(str(big))

    assert window.cpu.program_loaded
    assert window.cpu.get_state().v[0] == 5
    assert window.bus.peek(0x200) == 0x60
    assert window.run_action.isEnabled()
    window.reset()
    assert window.bus.peek(0x200) == 0x60


def _choose_file(monkeypatch, path):
    monkeypatch.setattr(main_window_module.QFileDialog, "getOpenFileName", lambda *args: (str(path), ""))


# @intent:test_case_config_too_small ROMが収まらない構成は適用せず、現在のCPUとプログラムを保持することを検証します。
def test_config_too_small_for_rom_is_rejected(window, tmp_path, monkeypatch):
    shown = []
    monkeypatch.setattr(main_window_module.QMessageBox, "critical", lambda *args: shown.append(args))
    rom = tmp_path / "long.ch8"
    rom.write_bytes(bytes([0x60, 0x05, 0x12, 0x02]) + bytes(0x17C))
    window.load_rom(str(rom))
    cpu_before = window.cpu

    config = tmp_path / "small.yaml"
    config.write_text("memory:\n  size: 0x300\n  program_origin: 0x200\n", encoding="utf-8")
    _choose_file(monkeypatch, config)
    window._load_config_dialog()

    assert len(shown) == 1
    assert window.cpu is cpu_before
    assert window.config.memory.size == 0x1000
    assert window.cpu.program_loaded
    assert window.run_action.isEnabled()


def test_config_reload_keeps_rom(window, rom_file, tmp_path, monkeypatch):
    window.load_rom(rom_file)
    config = tmp_path / "scaled.yaml"
    config.write_text("display:\n  scale: 4\n", encoding="utf-8")
    _choose_file(monkeypatch, config)
    window._load_config_dialog()

    assert window.display_view.scale == 4
    assert window.cpu.program_loaded
    assert window.bus.peek(0x200) == 0x60
    assert window.debugger.step_instruction().state.v[0] == 5


def test_stop_refreshes_disassembly(window, rom_file):
    window.load_rom(rom_file)
    window.step()
    window.start()
    window.bus.load(0x202, 0x00)
    window.bus.load(0x203, 0xE0)
    window.stop()
    assert window.code_view.table.item(0, 2).text() == "CLS"
