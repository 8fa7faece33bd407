# chip8_tracer/loader/loader.py
"""
ROMローダーモジュール。
バイナリ形式（.ch8）のプログラムイメージを読み込み、CPUのプログラム領域にロードします。
"""
from chip8_tracer.arch.chip8.cpu import Chip8Cpu
from chip8_tracer.common.errors import RomLoadError

class RomLoader:
    """
    バイナリROMファイルを読み込み、Chip8Cpu.load_programに渡すローダー。
    """
    # @intent:responsibility ファイルを読み込んでロードし、ロードしたバイト列を返します。
    # @intent:post-condition 読み込み失敗・容量超過のいずれもRomLoadErrorとなり、CPUの状態は変更されません。
    def load_rom(self, file_path: str, cpu: Chip8Cpu) -> bytes:
        data = self.read_rom(file_path)
        cpu.load_program(data)
        return data

    def read_rom(self, file_path: str) -> bytes:
        try:
            with open(file_path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise RomLoadError(f"Error loading ROM {file_path}: {e}") from e
