# tests/conftest.py
"""
テスト全体で共有するフィクスチャ。
"""
import os

# UIテストはディスプレイのない環境でも動作するようにoffscreenプラットフォームを使う
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from chip8_tracer.config.builder import SystemBuilder
from chip8_tracer.config.models import SystemConfig


def words_to_bytes(*words: int) -> bytes:
    return b"".join(word.to_bytes(2, "big") for word in words)


# PySide6のテストにはQApplicationのインスタンスが必要
@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def chip8():
    """既定構成（シード固定）のCPUとバスを返します。"""
    return SystemBuilder().build_system(SystemConfig(seed=1234))


@pytest.fixture
def load_words(chip8):
    """16bit命令語の列をプログラムとしてロードし、CPUを返すヘルパー。"""
    cpu, _ = chip8

    def _load(*words: int):
        cpu.load_program(words_to_bytes(*words))
        return cpu
    return _load
