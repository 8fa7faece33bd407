# src/chip8_tracer/arch/chip8/state.py
"""
CHIP-8 CPU固有の状態定義。
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List

from chip8_tracer.core.state import CpuState
from chip8_tracer.arch.chip8.font import FONT_SET

# @intent:constant 汎用レジスタ数と、フラグレジスタ(VF)のインデックス。
REGISTER_COUNT = 16
FLAG_REGISTER = 0xF

# @intent:responsibility メモリ配置（サイズ、プログラム原点、フォント位置、スタック深さ）を保持します。
@dataclass(frozen=True)
class MemoryLayout:
    size: int = 0x1000
    program_origin: int = 0x200
    font_base: int = 0x000
    stack_depth: int = 16

    # @intent:responsibility レイアウトの整合性を検証します。
    # @intent:post-condition 不整合の場合はValueErrorを送出します。
    def validate(self) -> None:
        if not 0 < self.program_origin < self.size:
            raise ValueError(f"program_origin {self.program_origin:#x} must lie inside memory of size {self.size:#x}.")
        if self.font_base < 0 or self.font_base + len(FONT_SET) > self.program_origin:
            raise ValueError(f"Font at {self.font_base:#x} does not fit below program_origin {self.program_origin:#x}.")
        if self.stack_depth <= 0:
            raise ValueError("stack_depth must be positive.")

    @property
    def program_capacity(self) -> int:
        return self.size - self.program_origin

# @intent:responsibility 命令進行の状態を表します。
class RunState(Enum):
    RUNNING = "RUNNING"
    WAITING_FOR_KEY = "WAITING_FOR_KEY"

# @intent:responsibility CHIP-8 CPUの全てのレジスタ、コールスタック、タイマー、実行状態を保持します。
@dataclass
class Chip8CpuState(CpuState):
    """
    CHIP-8 CPUの状態を保持するデータクラス。
    spはコールスタックの深さ（次にプッシュする位置）を表します。
    """
    pc: int = 0x200
    v: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)  # V0-VF
    i: int = 0x0000  # Index Register
    stack: List[int] = field(default_factory=lambda: [0] * 16)  # 固定長。容量 = len(stack)
    delay_timer: int = 0
    sound_timer: int = 0
    run_state: RunState = RunState.RUNNING
    wait_register: int = 0  # LD Vx, K の格納先

    # @intent:rationale v/stackはリストのため、Snapshot間で共有されないように複製します。
    def copy(self) -> "Chip8CpuState":
        return replace(self, v=list(self.v), stack=list(self.stack))

    @property
    def vf(self) -> int:
        return self.v[FLAG_REGISTER]

    @vf.setter
    def vf(self, value: int) -> None:
        self.v[FLAG_REGISTER] = value & 0xFF

    @property
    def waiting_for_key(self) -> bool:
        return self.run_state is RunState.WAITING_FOR_KEY

    # @intent:responsibility 現在スタックに積まれている戻りアドレスを古い順に返します。
    def call_stack(self) -> List[int]:
        return self.stack[:self.sp]
