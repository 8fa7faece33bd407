# src/chip8_tracer/arch/chip8/disassembler.py
"""
CHIP-8 Disassembler

メモリ上のバイナリデータを解析し、ニーモニックに変換します。
Instruction Layerのデコードロジックを再利用しますが、バスアクセスログを汚さないように
peek（ログなし読み込み）を使用します。
"""
from typing import List, Tuple
from chip8_tracer.transport.bus import Bus
from chip8_tracer.common.errors import MemoryAccessError
from chip8_tracer.arch.chip8.instructions import decode_opcode

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルし、表示用データを生成します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    指定された範囲のメモリを2バイト単位で逆アセンブルします。

    Returns:
        List of (address, hex_bytes, mnemonic) tuples.
    """
    result = []
    current_addr = start_addr
    end_addr = start_addr + length

    while current_addr < end_addr:
        try:
            high = bus.peek(current_addr)
            low = bus.peek(current_addr + 1)
        except MemoryAccessError:
            # メモリ終端
            break

        operation = decode_opcode((high << 8) | low)
        result.append((current_addr, f"{high:02X} {low:02X}", operation.text()))
        current_addr += operation.length

    return result
