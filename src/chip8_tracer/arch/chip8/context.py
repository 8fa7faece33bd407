# src/chip8_tracer/arch/chip8/context.py
"""
命令ハンドラに渡される実行コンテキスト。
"""
import random
from dataclasses import dataclass

from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, MemoryLayout
from chip8_tracer.arch.chip8.display import Framebuffer
from chip8_tracer.arch.chip8.keypad import Keypad

# @intent:responsibility 1つのインタプリタが所有する全ての状態への参照をまとめます。
# @intent:rationale 各ハンドラは (context, operation) のみを受け取り、モジュールレベルの状態を持ちません。
@dataclass
class ExecutionContext:
    state: Chip8CpuState
    bus: Bus
    display: Framebuffer
    keypad: Keypad
    rng: random.Random
    layout: MemoryLayout
